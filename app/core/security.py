"""JWT helpers. Tokens are issued by the auth service; this service verifies them."""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import AuthenticationError


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Mint an access token (scripts and tests; production tokens come from auth)."""
    claims = {
        **data,
        "exp": datetime.now(UTC) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes)),
        "type": "access",
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> dict[str, Any]:
    """Decode a token and check its type.

    Raises:
        AuthenticationError: Bad signature, expired, or wrong type
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def token_subject(token: str) -> UUID:
    """User id carried in an access token's ``sub`` claim."""
    subject = verify_token(token).get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    try:
        return UUID(str(subject))
    except ValueError:
        raise AuthenticationError("Invalid token subject")
