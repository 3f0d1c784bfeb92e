import json
import logging
from dataclasses import dataclass
from typing import Any

import stripe

from resume_forge.app.core.exceptions import (
    InvalidSignature,
    MalformedEvent,
    PaymentsNotConfigured,
)
from resume_forge.app.ledger.store import LedgerStore

log = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
CHECKOUT_ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
_PAID_STATUSES = ("paid", "no_payment_required")


@dataclass
class WebhookOutcome:
    """What the reconciler did with a verified event.

    Attributes:
        event_id (str): Provider-assigned event id.
        event_type (str): Provider event type.
        status (str): "credited", "duplicate", "awaiting_payment" or "ignored".
        user_id (str | None): The credited user, when applicable.
        credits (int): Credits applied by this delivery (0 unless status is "credited").

    """

    event_id: str
    event_type: str
    status: str
    user_id: str | None = None
    credits: int = 0


def parse_credits(raw: Any) -> int:
    """Read the credit amount from event metadata.

    Args:
        raw (Any): The `creditsToAdd` metadata value, usually a string. None means 1.

    Returns:
        int: A positive credit amount.

    Raises:
        MalformedEvent: If the value is not a positive integer.

    """
    if raw is None or raw == "":
        return 1
    try:
        credits = int(str(raw).strip())
    except ValueError as e:
        raise MalformedEvent(f"creditsToAdd is not an integer: {raw!r}") from e
    if credits <= 0:
        raise MalformedEvent(f"creditsToAdd must be positive, got {credits}")
    return credits


class PaymentWebhookReconciler:
    """Credits ledgers from signed payment provider events, once per event id.

    Attributes:
        ledger (LedgerStore): The credit ledger.
        webhook_secret (str | None): The signing secret shared with the provider.
        tolerance (int): Maximum age, in seconds, of an accepted signature timestamp.

    """

    def __init__(
        self,
        ledger: LedgerStore,
        webhook_secret: str | None,
        tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ):
        self.ledger = ledger
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def _verify(self, raw_body: bytes, signature: str | None) -> dict:
        """Verify the signature over the raw body, then parse it.

        Raises:
            PaymentsNotConfigured: If no webhook secret is configured.
            InvalidSignature: If the header is missing or does not match.
            MalformedEvent: If the verified body is not a JSON object.

        """
        if not self.webhook_secret:
            raise PaymentsNotConfigured("The payment webhook secret is not configured.")
        if not signature:
            raise InvalidSignature("Missing Stripe-Signature header.")

        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidSignature("Webhook body is not valid UTF-8.") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload,
                signature,
                self.webhook_secret,
                tolerance=self.tolerance,
            )
        except stripe.SignatureVerificationError as e:
            raise InvalidSignature(f"Webhook signature verification failed: {e!s}") from e

        try:
            event = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedEvent("Webhook body is not valid JSON.") from e
        if not isinstance(event, dict):
            raise MalformedEvent("Webhook body is not a JSON object.")
        return event

    def handle(self, raw_body: bytes, signature: str | None) -> WebhookOutcome:
        """Verify and apply one webhook delivery.

        Args:
            raw_body (bytes): The request body exactly as received.
            signature (str | None): The `Stripe-Signature` header value.

        Returns:
            WebhookOutcome: The result. Returning at all means the event may be
                acknowledged: any credit it carries is durable.

        Raises:
            PaymentsNotConfigured: If no webhook secret is configured.
            InvalidSignature: If verification fails. The ledger is not touched.
            MalformedEvent: If a payment-completed event lacks a user id or has an
                invalid credit amount. The ledger is not touched.
            StorageUnavailable: If the credit could not be written; the provider should retry.

        Notes:
            1. Verify the signature before reading anything from the body.
            2. Acknowledge event types other than checkout completion without action.
            3. Acknowledge a completed but still unpaid session without credit; the
               async-payment-succeeded event will carry the credit.
            4. Read `userId` (falling back to `client_reference_id`) and `creditsToAdd`
               from the session.
            5. Credit the ledger keyed on the event id, so redelivery credits once.

        """
        event = self._verify(raw_body, signature)
        event_id = event.get("id")
        event_type = event.get("type", "")
        if not isinstance(event_id, str) or not event_id:
            raise MalformedEvent("Webhook event has no id.")

        _msg = f"Payment webhook received: {event_type} ({event_id})"
        log.info(_msg)

        if event_type not in (CHECKOUT_COMPLETED, CHECKOUT_ASYNC_PAYMENT_SUCCEEDED):
            _msg = f"Unhandled event type {event_type}"
            log.info(_msg)
            return WebhookOutcome(event_id=event_id, event_type=event_type, status="ignored")

        data = event.get("data") or {}
        if not isinstance(data, dict):
            raise MalformedEvent(f"Event {event_id} has no data object.")
        session = data.get("object") or {}
        if not isinstance(session, dict):
            raise MalformedEvent(f"Event {event_id} has no checkout session object.")

        if event_type == CHECKOUT_COMPLETED and session.get("payment_status") not in _PAID_STATUSES:
            _msg = f"Checkout session in event {event_id} is not paid yet; waiting for async payment"
            log.info(_msg)
            return WebhookOutcome(
                event_id=event_id,
                event_type=event_type,
                status="awaiting_payment",
            )

        metadata = session.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise MalformedEvent(f"Checkout session metadata in event {event_id} is not an object.")
        user_id = metadata.get("userId") or session.get("client_reference_id")
        if not user_id:
            _msg = f"No userId in checkout session metadata for event {event_id}; dropping"
            log.error(_msg)
            raise MalformedEvent("Checkout session has no userId metadata.")
        credits = parse_credits(metadata.get("creditsToAdd"))

        applied = self.ledger.credit_for_event(str(user_id), credits, event_id)
        if not applied:
            return WebhookOutcome(
                event_id=event_id,
                event_type=event_type,
                status="duplicate",
                user_id=str(user_id),
            )

        _msg = f"Added {credits} credits to user {user_id} for event {event_id}"
        log.info(_msg)
        return WebhookOutcome(
            event_id=event_id,
            event_type=event_type,
            status="credited",
            user_id=str(user_id),
            credits=credits,
        )
