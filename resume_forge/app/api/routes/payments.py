import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from resume_forge.app.api.dependencies import get_webhook_reconciler
from resume_forge.app.core.auth import get_current_user_id
from resume_forge.app.core.config import Settings, get_settings
from resume_forge.app.schemas.payments import CheckoutRequest, CheckoutResponse, WebhookAck
from resume_forge.app.services.checkout import create_checkout_session
from resume_forge.app.services.payments import PaymentWebhookReconciler

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/checkout", response_model=CheckoutResponse)
def start_checkout(
    body: CheckoutRequest,
    user_id: str = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
) -> CheckoutResponse:
    """Create a hosted checkout session for a credit bundle and return its URL."""
    session = create_checkout_session(
        settings=settings,
        user_id=user_id,
        price_id=body.price_id,
        success_url=body.success_url,
        cancel_url=body.cancel_url,
    )
    return CheckoutResponse(session_id=session.session_id, redirect_url=session.redirect_url)


@router.post("/webhook", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    reconciler: PaymentWebhookReconciler = Depends(get_webhook_reconciler),
) -> WebhookAck:
    """Receive a signed payment provider event.

    Args:
        request (Request): The raw request. The body is read unparsed, because
            signature verification is computed over the exact bytes sent.
        reconciler (PaymentWebhookReconciler): The injected reconciler.

    Returns:
        WebhookAck: 200 acknowledgement, sent only once any credit is durable.

    Notes:
        1. Invalid signatures and malformed events are answered with 400.
        2. Storage failures are answered with 503 so the provider retries later.

    """
    raw_body = await request.body()
    signature = request.headers.get("stripe-signature")
    outcome = await run_in_threadpool(reconciler.handle, raw_body, signature)
    return WebhookAck(event_id=outcome.event_id, status=outcome.status)
