import logging
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from resume_forge.app.core.auth import get_current_user_id
from resume_forge.app.core.security import create_access_token, new_anonymous_user_id

log = logging.getLogger(__name__)


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestSecurity:
    """Test cases for token creation and verification."""

    def test_new_anonymous_user_ids_are_unique(self):
        ids = {new_anonymous_user_id() for _ in range(100)}
        assert len(ids) == 100

    def test_create_access_token_default_expiry(self, settings):
        token = create_access_token(data={"sub": "user-1"}, settings=settings)

        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        assert claims["sub"] == "user-1"
        assert "exp" in claims

    def test_create_access_token_does_not_mutate_claims(self, settings):
        data = {"sub": "user-1"}
        create_access_token(data=data, settings=settings, expires_delta=timedelta(minutes=5))
        assert data == {"sub": "user-1"}

    def test_current_user_from_valid_token(self, settings):
        token = create_access_token(data={"sub": "user-1"}, settings=settings)

        assert get_current_user_id(credentials=_credentials(token), settings=settings) == "user-1"

    def test_current_user_missing_credentials(self, settings):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user_id(credentials=None, settings=settings)
        assert exc_info.value.status_code == 401

    def test_current_user_expired_token(self, settings):
        token = create_access_token(
            data={"sub": "user-1"},
            settings=settings,
            expires_delta=timedelta(minutes=-1),
        )
        with pytest.raises(HTTPException) as exc_info:
            get_current_user_id(credentials=_credentials(token), settings=settings)
        assert exc_info.value.status_code == 401

    def test_current_user_token_without_subject(self, settings):
        token = create_access_token(data={"anon": True}, settings=settings)
        with pytest.raises(HTTPException) as exc_info:
            get_current_user_id(credentials=_credentials(token), settings=settings)
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
