import logging

from fastapi import APIRouter, Depends

from resume_forge.app.api.dependencies import get_ledger_store
from resume_forge.app.core.auth import get_current_user_id
from resume_forge.app.ledger.store import LedgerStore
from resume_forge.app.schemas.auth import CreditBalanceResponse

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/credits", tags=["credits"])


@router.get("", response_model=CreditBalanceResponse)
def read_credit_balance(
    user_id: str = Depends(get_current_user_id),
    ledger: LedgerStore = Depends(get_ledger_store),
) -> CreditBalanceResponse:
    """Return the current user's balance, creating an empty ledger on first access."""
    balance = ledger.read(user_id)
    return CreditBalanceResponse(user_id=user_id, balance=balance)
