from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from pydantic import ValidationError

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """Decode an access token; raises JWTError/ValidationError when invalid."""
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    if payload.get("purpose"):
        # Single-purpose tokens (password reset) are not access tokens
        raise JWTError("Not an access token")
    return AuthUser(**payload)


async def get_current_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> AuthUser:
    """
    Validate the bearer token and return the authenticated user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Необходима авторизация",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        raise credentials_exception

    try:
        return decode_token(token.credentials)
    except (JWTError, ValidationError):
        raise credentials_exception
