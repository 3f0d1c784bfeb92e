import logging
from dataclasses import dataclass

import stripe

from resume_forge.app.core.config import Settings
from resume_forge.app.core.exceptions import (
    CheckoutFailed,
    InvalidInput,
    PaymentsNotConfigured,
)

log = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """A created hosted checkout session."""

    session_id: str
    redirect_url: str


def create_checkout_session(
    settings: Settings,
    user_id: str,
    price_id: str | None = None,
    success_url: str | None = None,
    cancel_url: str | None = None,
) -> CheckoutSession:
    """Create a one-time Stripe Checkout session for a credit bundle.

    Args:
        settings (Settings): Application settings holding the Stripe credentials.
        user_id (str): The purchasing user. Stored on the session so the webhook can
            credit the right ledger.
        price_id (str | None): Stripe price to charge. Defaults to `STRIPE_PRICE_ID`.
        success_url (str | None): Where Stripe sends the user after paying.
        cancel_url (str | None): Where Stripe sends the user after cancelling.

    Returns:
        CheckoutSession: The session id and the hosted checkout URL.

    Raises:
        PaymentsNotConfigured: If no Stripe secret key is configured.
        InvalidInput: If no price id is given or configured.
        CheckoutFailed: If Stripe refuses to create the session.

    Notes:
        1. The session is tagged with `client_reference_id` and with `userId` and
           `creditsToAdd` metadata, which the webhook reconciler reads back.

    Network access:
        - This function makes one request to the Stripe API.

    """
    _msg = f"create_checkout_session starting for user {user_id}"
    log.debug(_msg)

    if not settings.stripe_secret_key:
        raise PaymentsNotConfigured("Payments are not configured.")

    price = price_id or settings.stripe_price_id
    if not price:
        raise InvalidInput("Price ID is required.")

    try:
        session = stripe.checkout.Session.create(
            api_key=settings.stripe_secret_key,
            mode="payment",
            line_items=[{"price": price, "quantity": 1}],
            success_url=success_url or settings.checkout_success_url,
            cancel_url=cancel_url or settings.checkout_cancel_url,
            client_reference_id=user_id,
            metadata={
                "userId": user_id,
                "creditsToAdd": str(settings.credits_per_purchase),
            },
        )
    except stripe.StripeError as e:
        _msg = f"Error creating checkout session for user {user_id}: {e!s}"
        log.exception(_msg)
        raise CheckoutFailed("Failed to create checkout session.") from e

    result = CheckoutSession(session_id=session.id, redirect_url=session.url)
    _msg = f"create_checkout_session returning {result.session_id}"
    log.debug(_msg)
    return result
