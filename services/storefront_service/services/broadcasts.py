"""Superadmin e-mail broadcasts to every registered user."""

from libs.common.emails.client import get_email_client
from libs.common.logging import get_logger
from services.storefront_service.models import BroadcastStatus, EmailBroadcast, User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def recipient_emails(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(User.email).where(User.email.is_not(None)).order_by(User.created_at)
    )
    return [email for email in result.scalars().all() if email]


async def send_broadcast(
    db: AsyncSession, subject: str, html_content: str, sent_by: str
) -> EmailBroadcast:
    """Send inline and record the outcome. Caller commits."""
    recipients = await recipient_emails(db)
    broadcast = EmailBroadcast(
        subject=subject,
        html_content=html_content,
        recipient_count=len(recipients),
        status=BroadcastStatus.SENDING,
        sent_by=sent_by,
    )
    db.add(broadcast)
    await db.flush()

    result = await get_email_client().send_bulk(
        to_emails=recipients, subject=subject, html_body=html_content
    )
    broadcast.success_count = result["sent_count"]
    broadcast.fail_count = result["failed_count"]
    if recipients and result["sent_count"] == 0:
        broadcast.status = BroadcastStatus.FAILED
    else:
        broadcast.status = BroadcastStatus.COMPLETED

    logger.info(
        f"Broadcast {broadcast.id}: {broadcast.success_count}/{len(recipients)} sent"
    )
    return broadcast


async def list_broadcasts(db: AsyncSession, limit: int = 50) -> list[EmailBroadcast]:
    result = await db.execute(
        select(EmailBroadcast)
        .order_by(EmailBroadcast.created_at.desc(), EmailBroadcast.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
