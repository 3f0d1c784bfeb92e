import logging

from sqlalchemy import Column, DateTime, Integer, String

from resume_forge.app.models import Base
from resume_forge.app.models.ledger import utcnow

log = logging.getLogger(__name__)


class ProcessedPaymentEvent(Base):
    """
    Idempotency record for a payment event that has credited a ledger.

    A row is inserted in the same transaction as the credit it records, so the
    presence of a row means the credit is durable, and the primary key on
    ``event_id`` prevents the same provider event from being applied twice.

    Attributes:
        event_id (str): Provider-assigned event identifier.
        user_id (str): The user whose ledger was credited.
        credits_added (int): How many credits the event granted.
        processed_at (datetime): When the credit was applied.

    """

    __tablename__ = "processed_payment_events"

    event_id = Column(String(255), primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    credits_added = Column(Integer, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, event_id: str, user_id: str, credits_added: int):
        self.event_id = event_id
        self.user_id = user_id
        self.credits_added = credits_added
        self.processed_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<ProcessedPaymentEvent event_id={self.event_id} "
            f"user_id={self.user_id} credits_added={self.credits_added}>"
        )
