"""Office Hours Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from app.database import get_db
from app.models.office_hours import OfficeHoursRecord
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, require_staff, check_student_access
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class OfficeHoursCreate(BaseModel):
    student_id: str
    session_date: datetime
    duration_minutes: int = Field(30, gt=0)
    topics_covered: List[str] = []
    action_items: List[str] = []
    meeting_notes: Optional[str] = None
    recording_url: Optional[str] = None


class OfficeHoursUpdate(BaseModel):
    session_date: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    topics_covered: Optional[List[str]] = None
    action_items: Optional[List[str]] = None
    meeting_notes: Optional[str] = None
    recording_url: Optional[str] = None


async def _get_record(db: AsyncSession, record_id: int) -> OfficeHoursRecord:
    result = await db.execute(select(OfficeHoursRecord).where(OfficeHoursRecord.id == record_id))
    record = result.scalar_one_or_none()
    if not record:
        raise HTTPException(status_code=404, detail="Office hours record not found")
    return record


@router.get("/")
async def list_office_hours(
    student_id: str,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    result = await db.execute(
        select(OfficeHoursRecord)
        .where(OfficeHoursRecord.student_id == student_id)
        .order_by(OfficeHoursRecord.session_date.desc())
    )
    return {"officeHours": [r.to_dict() for r in result.scalars().all()]}


@router.post("/")
async def create_office_hours(
    data: OfficeHoursCreate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    record = OfficeHoursRecord(coach_id=staff.id, **data.model_dump())
    db.add(record)
    await db.commit()
    await db.refresh(record)

    logger.info(f"Recorded office hours {record.id}", extra={"student_id": data.student_id})
    session.toasts.success("Office hours record saved successfully")
    return {"success": True, "officeHours": record.to_dict()}


@router.put("/{record_id}")
async def update_office_hours(
    record_id: int,
    data: OfficeHoursUpdate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    record = await _get_record(db, record_id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(record, field, value)

    await db.commit()
    await db.refresh(record)
    session.toasts.success("Office hours record updated successfully")
    return {"success": True, "officeHours": record.to_dict()}


@router.delete("/{record_id}")
async def delete_office_hours(
    record_id: int,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    record = await _get_record(db, record_id)
    await db.delete(record)
    await db.commit()
    session.toasts.success("Office hours record deleted")
    return {"success": True}
