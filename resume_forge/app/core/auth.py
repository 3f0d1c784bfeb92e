import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError, jwt

from resume_forge.app.core.config import Settings, get_settings
from resume_forge.app.core.security import bearer_scheme

log = logging.getLogger(__name__)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> str:
    """Retrieve the authenticated user id from the bearer JWT.

    Args:
        credentials: The parsed `Authorization: Bearer ...` header, if present.
        settings: Application settings holding the signing key.

    Returns:
        str: The user id carried in the token's `sub` claim.

    Raises:
        HTTPException: 401 when the header is missing, the token is invalid or
            expired, or it carries no subject.

    Notes:
        1. Decode the JWT using the secret key and algorithm.
        2. Return the subject; the ledger is created lazily, so there is no user lookup.

    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception
    return user_id
