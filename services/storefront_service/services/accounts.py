"""User accounts: registration, login and the e-mailed password reset flow.

Reset is three steps: request a six-digit code by e-mail, exchange the code
for a short-lived reset token, then set a new password with that token. A
code is single use and expires after ``PASSWORD_RESET_TTL_MINUTES``.
"""

from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from libs.auth.security import (
    create_reset_token,
    decode_reset_token,
    generate_reset_code,
    hash_password,
    verify_password,
)
from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_aware, utc_now
from libs.common.emails.client import get_email_client
from libs.common.emails.templates import password_reset_email
from libs.common.logging import get_logger
from services.storefront_service.models import PasswordResetCode, User
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Неверный email или пароль"
INVALID_CODE = "Неверный или просроченный код"


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(func.lower(User.email) == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> User:
    """Create a user. Raises 400 when the e-mail is taken. Caller commits."""
    if await get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Этот email уже зарегистрирован",
        )
    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        first_name=first_name or None,
        last_name=last_name or None,
    )
    db.add(user)
    await db.flush()
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS
        )
    return user


async def change_password(
    db: AsyncSession, user: User, current_password: str, new_password: str
) -> None:
    if not verify_password(current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Неверный текущий пароль",
        )
    user.password_hash = hash_password(new_password)


# ============================================================================
# PASSWORD RESET
# ============================================================================


async def request_password_reset(db: AsyncSession, email: str) -> bool:
    """Issue and e-mail a reset code.

    Unknown addresses are ignored so the endpoint does not reveal which
    e-mails are registered. Returns whether a code was issued. Caller commits.
    """
    user = await get_user_by_email(db, email)
    if not user:
        logger.info("Password reset requested for unknown email")
        return False

    settings = get_settings()
    ttl = settings.PASSWORD_RESET_TTL_MINUTES

    # A new code supersedes any outstanding ones
    await db.execute(
        update(PasswordResetCode)
        .where(PasswordResetCode.user_id == user.id, PasswordResetCode.used.is_(False))
        .values(used=True)
    )

    code = generate_reset_code()
    db.add(
        PasswordResetCode(
            user_id=user.id,
            email=user.email,
            code=code,
            expires_at=utc_now() + timedelta(minutes=ttl),
        )
    )
    await db.flush()

    subject, text, html = password_reset_email(code, ttl)
    sent = await get_email_client().send(
        to_email=user.email, subject=subject, body=text, html_body=html
    )
    if not sent:
        logger.warning(f"Password reset email to user {user.id} was not delivered")
    return True


async def _find_valid_code(
    db: AsyncSession, email: str, code: str
) -> Optional[PasswordResetCode]:
    result = await db.execute(
        select(PasswordResetCode)
        .where(
            PasswordResetCode.email == normalize_email(email),
            PasswordResetCode.code == code.strip(),
            PasswordResetCode.used.is_(False),
        )
        .order_by(PasswordResetCode.id.desc())
    )
    reset = result.scalars().first()
    if reset is None or ensure_aware(reset.expires_at) < utc_now():
        return None
    return reset


async def verify_reset_code(db: AsyncSession, email: str, code: str) -> str:
    """Exchange a valid code for a reset token."""
    reset = await _find_valid_code(db, email, code)
    if reset is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE
        )
    return create_reset_token(
        reset.user_id, reset.id, get_settings().PASSWORD_RESET_TTL_MINUTES
    )


async def reset_password(db: AsyncSession, reset_token: str, password: str) -> User:
    """Set a new password and burn the code. Caller commits."""
    decoded = decode_reset_token(reset_token)
    if decoded is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE
        )
    user_id, reset_id = decoded

    reset = await db.get(PasswordResetCode, reset_id)
    if (
        reset is None
        or reset.used
        or reset.user_id != user_id
        or ensure_aware(reset.expires_at) < utc_now()
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE
        )

    user = await get_user(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_CODE
        )

    user.password_hash = hash_password(password)
    reset.used = True
    return user
