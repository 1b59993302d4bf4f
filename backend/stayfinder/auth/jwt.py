"""JWT access/refresh tokens for StayFinder users."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from stayfinder.config import settings


def _encode(claims: dict, token_type: str, lifetime: timedelta) -> str:
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + lifetime, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string) and
            should carry ``role`` so clients can route without a profile call.
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(data, "access", lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token (``settings.jwt_refresh_token_expire_days``)."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(data, "refresh", lifetime)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def create_token_pair(user_id: uuid.UUID | str, role: str = "guest") -> dict[str, str]:
    """Create both access and refresh tokens for a user.

    The role claim is informational only; authorization always re-reads the
    user row, so a promotion to host takes effect on the next request.
    """
    access_payload = {"sub": str(user_id), "role": role}
    return {
        "access_token": create_access_token(access_payload),
        "refresh_token": create_refresh_token({"sub": str(user_id)}),
        "token_type": "bearer",
    }


def subject_from_token(token: str, expected_type: str) -> uuid.UUID | None:
    """Return the user id a valid token of ``expected_type`` was issued for.

    Any failure (bad signature, expiry, wrong type, malformed subject) yields
    ``None``; callers decide which HTTP error that becomes.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    if payload.get("type") != expected_type:
        return None
    try:
        return uuid.UUID(payload.get("sub") or "")
    except ValueError:
        return None
