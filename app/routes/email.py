"""Email Delivery Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field

from app.database import get_db
from app.models.profile import Profile
from app.middleware.auth import require_staff
from app.services.email_service import EmailDeliveryError, SmtpSettings, process_due_reminders, send_email_smtp
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class SmtpConfig(BaseModel):
    host: str
    port: int = Field(465, gt=0, le=65535)
    username: str
    password: str
    sender_email: str
    sender_name: str = ""
    use_ssl: bool = True


class EmailRequest(BaseModel):
    to: str
    subject: str
    html: str
    smtp: SmtpConfig


@router.post("/send")
async def send_email(
    data: EmailRequest,
    staff: Profile = Depends(require_staff),
):
    """Send one message through the caller-supplied SMTP account"""
    try:
        await send_email_smtp(data.to, data.subject, data.html, SmtpSettings(**data.smtp.model_dump()))
    except EmailDeliveryError as e:
        raise HTTPException(status_code=502, detail=f"Failed to send email: {e}")
    return {"success": True}


@router.post("/process-reminders")
async def run_reminders(
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    processed = await process_due_reminders(db)
    return {"success": True, "processed": len(processed), "reminderIds": processed}
