"""Job Search Progress Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import date

from app.database import get_db
from app.models.profile import Profile
from app.middleware.auth import get_current_user, check_student_access
from app.services.progress_service import default_date_range, progress_report

router = APIRouter()


@router.get("/{student_id}")
async def get_progress(
    student_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Application metrics and weekly goal progress; defaults to the last four weeks"""
    check_student_access(user, student_id)

    default_start, default_end = default_date_range()
    start = start or default_start
    end = end or default_end
    if end < start:
        raise HTTPException(status_code=400, detail="End date must be on or after start date")

    return await progress_report(db, student_id, start, end)
