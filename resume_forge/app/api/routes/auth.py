import logging

from fastapi import APIRouter, Depends

from resume_forge.app.core.config import Settings, get_settings
from resume_forge.app.core.security import create_access_token, new_anonymous_user_id
from resume_forge.app.schemas.auth import Token

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/anonymous", response_model=Token)
def sign_in_anonymously(settings: Settings = Depends(get_settings)) -> Token:
    """Issue a token for a new anonymous user.

    Args:
        settings (Settings): Application settings holding the signing key.

    Returns:
        Token: The bearer token and the generated user id.

    Notes:
        1. Generate a fresh opaque user id.
        2. Sign a token whose subject is that id.
        3. No ledger row is written; it is created on the first balance read.

    """
    user_id = new_anonymous_user_id()
    access_token = create_access_token(data={"sub": user_id, "anon": True}, settings=settings)
    _msg = f"Issued anonymous token for user {user_id}"
    log.info(_msg)
    return Token(access_token=access_token, user_id=user_id)
