"""Account routes: registration, login, profile and password reset."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.auth.security import create_access_token
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.storefront_service.models import User
from services.storefront_service.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    OkResponse,
    PasswordChangeRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    UserResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from services.storefront_service.services import accounts
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(user.id, user.email)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


async def _current_account(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
) -> User:
    user = await accounts.get_user(db, current_user.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Необходима авторизация",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


# ============================================================================
# SESSION
# ============================================================================


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create an account and sign in."""
    user = await accounts.register_user(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    await db.commit()
    await db.refresh(user)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@auth_limit
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Exchange e-mail and password for an access token."""
    user = await accounts.authenticate(db, payload.email, payload.password)
    return _auth_response(user)


@router.get("/user", response_model=UserResponse)
async def get_me(user: User = Depends(_current_account)):
    """Get the signed-in user."""
    return user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Update name, phone and avatar."""
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    return user


@router.put("/password", response_model=OkResponse)
async def update_password(
    payload: PasswordChangeRequest,
    user: User = Depends(_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Change password after checking the current one."""
    await accounts.change_password(
        db, user, payload.current_password, payload.new_password
    )
    await db.commit()
    return OkResponse()


# ============================================================================
# PASSWORD RESET
# ============================================================================


@router.post("/forgot-password", response_model=OkResponse)
@auth_limit
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """E-mail a reset code. Answers the same for unknown addresses."""
    await accounts.request_password_reset(db, payload.email)
    await db.commit()
    return OkResponse()


@router.post("/verify-code", response_model=VerifyCodeResponse)
@auth_limit
async def verify_code(
    request: Request,
    payload: VerifyCodeRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Exchange a valid reset code for a reset token."""
    reset_token = await accounts.verify_reset_code(db, payload.email, payload.code)
    return VerifyCodeResponse(reset_token=reset_token)


@router.post("/reset-password", response_model=OkResponse)
@auth_limit
async def reset_password(
    request: Request,
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Set a new password using a reset token."""
    await accounts.reset_password(db, payload.reset_token, payload.password)
    await db.commit()
    return OkResponse()
