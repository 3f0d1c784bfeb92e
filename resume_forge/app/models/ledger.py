import logging
from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.orm import validates

from resume_forge.app.models import Base

log = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class CreditLedger(Base):
    """
    Per-user credit balance.

    Attributes:
        user_id (str): Opaque stable user identifier, the primary key.
        balance (int): Number of generation credits available. Never negative.
        created_at (datetime): When the ledger row was first created.
        updated_at (datetime): When the balance was last mutated.

    """

    __tablename__ = "credit_ledgers"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_credit_ledgers_balance_non_negative"),
    )

    user_id = Column(String(128), primary_key=True)
    balance = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, user_id: str, balance: int = 0):
        """
        Initialize a CreditLedger instance.

        Args:
            user_id (str): The user the ledger belongs to. Must be a non-empty string.
            balance (int): The starting balance. Must be a non-negative integer.

        Returns:
            None

        Notes:
            1. Validation of both fields happens in the `validates` hooks.
            2. Both timestamps are set to the current UTC time.
            3. This operation does not involve network, disk, or database access.

        """
        _msg = f"Initializing CreditLedger for user: {user_id}"
        log.debug(_msg)
        now = utcnow()
        self.user_id = user_id
        self.balance = balance
        self.created_at = now
        self.updated_at = now

    @validates("user_id")
    def validate_user_id(self, key, user_id):
        """Ensure user_id is a non-empty string."""
        if not isinstance(user_id, str):
            raise ValueError("User id must be a string")
        if not user_id.strip():
            raise ValueError("User id cannot be empty")
        return user_id

    @validates("balance")
    def validate_balance(self, key, balance):
        """Ensure balance is a non-negative integer."""
        if isinstance(balance, bool) or not isinstance(balance, int):
            raise ValueError("Balance must be an integer")
        if balance < 0:
            raise ValueError("Balance cannot be negative")
        return balance

    def __repr__(self) -> str:
        return f"<CreditLedger user_id={self.user_id} balance={self.balance}>"
