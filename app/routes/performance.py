"""Performance Review Routes"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from pydantic import BaseModel, field_validator
from typing import Dict, Optional
from datetime import date

from app.database import get_db
from app.models.performance_review import PerformanceReview, ATTENTION_LEVELS, INDICATOR_FIELDS, PERFORMANCE_RATINGS
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, require_staff, check_student_access
from app.services import performance_service
from app.services.progress_service import parse_month
from app.services.scoring import clamp_rating, suggest_performance_rating
from app.services.session_state import ViewerSession, current_month
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class IndicatorValues(BaseModel):
    resume_quality: Optional[int] = None
    application_effectiveness: Optional[int] = None
    behavioral_performance: Optional[int] = None
    networking_capability: Optional[int] = None
    technical_proficiency: Optional[int] = None
    energy_level: Optional[int] = None

    @field_validator(*INDICATOR_FIELDS, mode='before')
    @classmethod
    def clamp(cls, value):
        if value is None:
            return None
        return clamp_rating(float(value))


class ReviewCreate(IndicatorValues):
    review_month: Optional[str] = None
    review_date: Optional[date] = None
    attention_level: str = 'medium'
    performance_rating: Optional[str] = None
    overall_notes: Optional[str] = None
    indicator_notes: Dict[str, str] = {}


class ReviewUpdate(IndicatorValues):
    attention_level: Optional[str] = None
    performance_rating: Optional[str] = None
    overall_notes: Optional[str] = None
    indicator_notes: Optional[Dict[str, str]] = None


def _month_or_400(month: str) -> str:
    try:
        parse_month(month)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return month


def _check_labels(attention_level: Optional[str], performance_rating: Optional[str]) -> None:
    if attention_level is not None and attention_level not in ATTENTION_LEVELS:
        raise HTTPException(status_code=400, detail=f"Invalid attention level: {attention_level}")
    if performance_rating is not None and performance_rating not in PERFORMANCE_RATINGS:
        raise HTTPException(status_code=400, detail=f"Invalid performance rating: {performance_rating}")


async def _student_or_404(db: AsyncSession, student_id: str) -> Profile:
    student = await performance_service.get_profile(db, student_id)
    if not student or student.role != 'student':
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.get("/{student_id}")
async def get_performance(
    student_id: str,
    month: Optional[str] = None,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    month = _month_or_400(month or current_month())
    student = await _student_or_404(db, student_id)
    return await performance_service.performance_overview(db, student, month)


@router.get("/{student_id}/seed")
async def get_review_seed(
    student_id: str,
    month: Optional[str] = None,
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """Default indicator values for a new review"""
    month = _month_or_400(month or current_month())
    student = await _student_or_404(db, student_id)
    return await performance_service.build_seed(db, student, month)


@router.get("/{student_id}/history")
async def get_indicator_history(
    student_id: str,
    months: int = Query(12, ge=1, le=36),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Monthly indicator values for the trend chart"""
    check_student_access(user, student_id)
    await _student_or_404(db, student_id)
    return await performance_service.indicator_history(db, student_id, months)


@router.post("/{student_id}/reviews")
async def create_review(
    student_id: str,
    data: ReviewCreate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    month = _month_or_400(data.review_month or current_month())
    _check_labels(data.attention_level, data.performance_rating)
    student = await _student_or_404(db, student_id)

    if await performance_service.review_for_month(db, student_id, month):
        raise HTTPException(status_code=409, detail=f"A review for {month} already exists")

    # Unset indicators fall back to the derived seeds
    seed = await performance_service.build_seed(db, student, month)
    values = {
        field: getattr(data, field) if getattr(data, field) is not None else seed["seeds"][field]
        for field in INDICATOR_FIELDS
    }

    review = PerformanceReview(
        student_id=student_id,
        coach_id=staff.id,
        review_month=month,
        review_date=data.review_date or date.today(),
        attention_level=data.attention_level,
        performance_rating=data.performance_rating or suggest_performance_rating(values),
        overall_notes=data.overall_notes,
        indicator_notes=data.indicator_notes,
        **values,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"A review for {month} already exists")

    await performance_service.sync_student_labels(db, student_id)
    await db.commit()
    await db.refresh(review)

    logger.info(f"Created review {review.id}", extra={"student_id": student_id, "month": month})
    session.toasts.success("Performance review submitted successfully")
    return {"success": True, "review": review.to_dict()}


@router.put("/reviews/{review_id}")
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(PerformanceReview).where(PerformanceReview.id == review_id))
    review = result.scalar_one_or_none()
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    _check_labels(update_data.get('attention_level'), update_data.get('performance_rating'))

    for field, value in update_data.items():
        setattr(review, field, value)

    await db.flush()
    await performance_service.sync_student_labels(db, review.student_id)
    await db.commit()
    await db.refresh(review)

    session.toasts.success("Performance indicators updated successfully")
    return {"success": True, "review": review.to_dict()}
