"""
Session token helpers.

Identity provisioning happens elsewhere; this module only mints and reads
the signed JWT that names the user a request belongs to.

Token payload contains:
- sub: user_id as string (standard JWT subject claim)
- exp: expiration timestamp
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import JWTError, jwt

from edtech.config import get_settings


def create_access_token(user_id: UUID) -> str:
    """Create a JWT access token for a user."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str | None) -> UUID | None:
    """
    Decode and validate a JWT access token.

    Returns user_id if valid, None if missing/invalid/expired.
    """
    if not token:
        return None
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        user_id_str = payload.get("sub")
        if user_id_str is None:
            return None
        return UUID(user_id_str)
    except (JWTError, ValueError):
        return None
