"""Account and authentication schemas."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field
from services.storefront_service.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_super_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    profile_image_url: Optional[str] = None


class PasswordChangeRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class VerifyCodeRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., pattern=r"^\d{6}$")


class VerifyCodeResponse(CamelModel):
    reset_token: str


class ResetPasswordRequest(CamelModel):
    reset_token: str
    password: str = Field(..., min_length=6, max_length=128)
