import logging

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)


class CheckoutRequest(BaseModel):
    """Schema for starting a credit purchase. Every field falls back to configuration."""

    price_id: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutResponse(BaseModel):
    """Schema for a created checkout session."""

    session_id: str
    redirect_url: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WebhookAck(BaseModel):
    """Schema for a webhook acknowledgement. Only sent once any credit is durable."""

    received: bool = True
    event_id: str
    status: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
