"""Reminder Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime, timedelta

from app.database import get_db
from app.models.reminder import Reminder, REMINDER_TYPES
from app.models.profile import Profile
from app.middleware.auth import get_viewer_session, require_staff
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


def scheduled_time(reminder_type: str, due_date: Optional[datetime]) -> Optional[datetime]:
    """When a reminder goes out if no explicit time was given"""
    if due_date is None:
        return None
    if reminder_type == 'two_days_before':
        return due_date - timedelta(days=2)
    return due_date


class ReminderCreate(BaseModel):
    recipient_id: str
    subject_title: str
    body: Optional[str] = None
    reminder_type: str = 'due_date'
    due_date: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None

    @field_validator('reminder_type')
    @classmethod
    def known_type(cls, value: str) -> str:
        if value not in REMINDER_TYPES:
            raise ValueError(f"must be one of {', '.join(REMINDER_TYPES)}")
        return value


class ReminderUpdate(BaseModel):
    subject_title: Optional[str] = None
    body: Optional[str] = None
    due_date: Optional[datetime] = None
    scheduled_for: Optional[datetime] = None


@router.get("/")
async def list_reminders(
    recipient_id: Optional[str] = None,
    pending_only: bool = False,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    query = select(Reminder)
    if recipient_id:
        query = query.where(Reminder.recipient_id == recipient_id)
    if pending_only:
        query = query.where(Reminder.sent_at.is_(None))
    result = await db.execute(query.order_by(Reminder.scheduled_for.asc()))
    reminders = result.scalars().all()
    return {"reminders": [r.to_dict() for r in reminders]}


@router.post("/")
async def create_reminder(
    data: ReminderCreate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    scheduled_for = data.scheduled_for or scheduled_time(data.reminder_type, data.due_date)
    if scheduled_for is None:
        raise HTTPException(status_code=400, detail="Either a due date or a scheduled time is required")

    reminder = Reminder(
        recipient_id=data.recipient_id,
        reminder_type=data.reminder_type,
        subject_title=data.subject_title,
        body=data.body,
        due_date=data.due_date,
        scheduled_for=scheduled_for,
    )
    db.add(reminder)
    await db.commit()
    await db.refresh(reminder)

    logger.info(f"Scheduled reminder {reminder.id}", extra={"reminder_id": reminder.id})
    session.toasts.success("Reminder scheduled")
    return {"success": True, "reminder": reminder.to_dict()}


@router.put("/{reminder_id}")
async def update_reminder(
    reminder_id: int,
    data: ReminderUpdate,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Reminder).where(Reminder.id == reminder_id))
    reminder = result.scalar_one_or_none()
    if not reminder:
        raise HTTPException(status_code=404, detail="Reminder not found")
    if reminder.sent_at:
        raise HTTPException(status_code=400, detail="Reminder has already been sent")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(reminder, field, value)
    if 'due_date' in update_data and 'scheduled_for' not in update_data:
        reminder.scheduled_for = scheduled_time(reminder.reminder_type, reminder.due_date)

    await db.commit()
    await db.refresh(reminder)
    return {"success": True, "reminder": reminder.to_dict()}


@router.delete("/{reminder_id}")
async def delete_reminder(
    reminder_id: int,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Reminder).where(Reminder.id == reminder_id))
    reminder = result.scalar_one_or_none()
    if not reminder:
        raise HTTPException(status_code=404, detail="Reminder not found")

    await db.delete(reminder)
    await db.commit()
    return {"success": True, "message": "Reminder deleted"}
