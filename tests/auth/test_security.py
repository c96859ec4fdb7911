"""Tests for access token handling."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from showcase.auth.permissions import UserRole
from showcase.auth.schemas import Viewer
from showcase.auth.security import create_access_token, decode_access_token, viewer_token
from showcase.config import get_settings


class TestAccessToken:
    """Tests for create/decode of access tokens."""

    def test_round_trip_claims(self) -> None:
        user_id = str(uuid4())
        token = create_access_token(
            {"sub": user_id, "email": "a@example.com", "role": UserRole.ADMIN.value}
        )

        payload = decode_access_token(token)

        assert payload["sub"] == user_id
        assert payload["email"] == "a@example.com"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(
            {"sub": str(uuid4())}, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_type_rejected(self) -> None:
        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError, match="Invalid token type"):
            decode_access_token(token)

    def test_tampered_token_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4())})
        with pytest.raises(JWTError):
            decode_access_token(token.rsplit(".", 1)[0] + ".bm90LWEtc2lnbmF0dXJl")


class TestViewer:
    """Tests for Viewer.from_claims."""

    def test_unknown_role_falls_back_to_user(self) -> None:
        user_id = uuid4()
        viewer = Viewer.from_claims({"sub": str(user_id), "role": "moderator"})

        assert viewer.id == user_id
        assert viewer.role == UserRole.USER
        assert viewer.email == ""

    def test_viewer_token_claims(self) -> None:
        user_id = uuid4()

        viewer = Viewer.from_claims(
            decode_access_token(viewer_token(user_id, "a@example.com", "admin"))
        )

        assert viewer == Viewer(id=user_id, email="a@example.com", role=UserRole.ADMIN)
