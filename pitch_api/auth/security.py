"""Password hashing and signed session tokens."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from pitch_api.config import Settings, get_settings

ACCESS_TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    """bcrypt hash of ``password`` as text."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def password_matches(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def issue_access_token(user_id: int, settings: Optional[Settings] = None) -> tuple[str, int]:
    """
    Sign an access token for ``user_id``.

    Returns:
        The token and its lifetime in seconds
    """
    settings = settings or get_settings()
    lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        # python-jose expects a string subject
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    token = jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)
    return token, int(lifetime.total_seconds())


def read_access_token(token: str, settings: Optional[Settings] = None) -> Optional[int]:
    """User id carried by a valid, unexpired access token, else None."""
    settings = settings or get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
