import logging
import uuid
from datetime import UTC, datetime, timedelta

from fastapi.security import HTTPBearer
from jose import jwt

from resume_forge.app.core.config import Settings

log = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def new_anonymous_user_id() -> str:
    """Return a fresh opaque user id for an anonymous session."""
    return uuid.uuid4().hex


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data (dict): The claims to encode in the token (e.g. the user id as `sub`).
        settings (Settings): The application settings object.
        expires_delta (timedelta | None): Custom expiration time for the token. If None, uses default value.

    Returns:
        str: The encoded JWT token as a string.

    Notes:
        1. Copy the data to avoid modifying the original.
        2. Set expiration time based on expires_delta or default.
        3. Encode the data with the secret key and algorithm.
        4. No database or network access in this function.

    """
    _msg = "Creating access token"
    log.debug(_msg)
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes,
        )
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm,
    )
    return encoded_jwt
