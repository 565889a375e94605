from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user decoded from an access token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None

    model_config = {"populate_by_name": True}


class TokenPair(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
