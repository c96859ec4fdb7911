"""JWT access tokens identifying the viewer.

Tokens are issued by the identity provider; this service only validates
them. The issuing helpers exist for local tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from showcase.auth.permissions import UserRole
from showcase.config.settings import get_settings


ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Sign ``data`` adding ``exp``, ``iat`` and ``type`` claims."""
    settings = get_settings()
    issued_at = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    claims = {
        **data,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.auth_secret_key, algorithm=settings.auth_algorithm)


def viewer_token(
    profile_id: UUID | str,
    email: str = "",
    role: UserRole | str = UserRole.USER,
    expires_delta: timedelta | None = None,
) -> str:
    """Access token for a profile, shaped like the identity provider's."""
    return create_access_token(
        {"sub": str(profile_id), "email": email, "role": UserRole(role).value},
        expires_delta,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Raises:
        JWTError: Bad signature, expired, not an access token, or no subject.
    """
    settings = get_settings()
    payload = jwt.decode(token, settings.auth_secret_key, algorithms=[settings.auth_algorithm])

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        msg = f"Invalid token type: expected '{ACCESS_TOKEN_TYPE}'"
        raise JWTError(msg)
    if not payload.get("sub"):
        msg = "Token missing sub claim"
        raise JWTError(msg)
    return payload
