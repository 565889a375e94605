"""Password hashing and access-token issuing."""

import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from libs.auth.models import TokenPair
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: str, email: Optional[str] = None) -> TokenPair:
    """Sign an HS256 token whose ``sub`` is the user id."""
    settings = get_settings()
    expires_in = settings.JWT_EXPIRE_MINUTES * 60
    now = utc_now()
    claims = {
        "sub": user_id,
        "email": email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return TokenPair(access_token=token, expires_in=expires_in)


def generate_reset_code() -> str:
    """Six random digits, zero padded."""
    return f"{secrets.randbelow(1_000_000):06d}"


RESET_TOKEN_PURPOSE = "password_reset"


def create_reset_token(user_id: str, reset_id: int, ttl_minutes: int) -> str:
    """Short-lived token proving a reset code was verified."""
    settings = get_settings()
    now = utc_now()
    claims = {
        "sub": user_id,
        "rid": reset_id,
        "purpose": RESET_TOKEN_PURPOSE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_reset_token(token: str) -> Optional[tuple[str, int]]:
    """Return (user_id, reset_id) for a valid reset token, else None."""
    settings = get_settings()
    try:
        claims = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return None
    if claims.get("purpose") != RESET_TOKEN_PURPOSE:
        return None
    try:
        return str(claims["sub"]), int(claims["rid"])
    except (KeyError, TypeError, ValueError):
        return None
