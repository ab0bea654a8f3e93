"""Mock Interview Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

from app.database import get_db
from app.models.mock_interview import MockInterview, INTERVIEW_TYPES
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, require_staff, check_student_access
from app.services.scoring import clamp_rating, MAX_INTERVIEW_RATING
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


def _clean_list(value):
    if value is None:
        return value
    return [item.strip() for item in value if item and item.strip()]


class MockInterviewCreate(BaseModel):
    student_id: str
    interviewer_id: str
    interview_date: datetime
    interview_type: str = 'technical'
    overall_rating: int = 5
    strengths: List[str] = []
    areas_for_improvement: List[str] = []
    evaluation_notes: Optional[str] = None
    worksheet_completion_status: str = 'not_started'
    recording_url: Optional[str] = None

    @field_validator('interviewer_id')
    @classmethod
    def interviewer_required(cls, value: str) -> str:
        value = (value or '').strip()
        if not value:
            raise ValueError('Please select an interviewer')
        return value

    @field_validator('interview_type')
    @classmethod
    def known_type(cls, value: str) -> str:
        if value not in INTERVIEW_TYPES:
            raise ValueError(f"must be one of {', '.join(INTERVIEW_TYPES)}")
        return value

    @field_validator('overall_rating', mode='before')
    @classmethod
    def clamp(cls, value):
        return clamp_rating(float(value), upper=MAX_INTERVIEW_RATING)

    @field_validator('strengths', 'areas_for_improvement')
    @classmethod
    def strip_items(cls, value):
        return _clean_list(value)


class MockInterviewUpdate(BaseModel):
    interviewer_id: Optional[str] = None
    interview_date: Optional[datetime] = None
    interview_type: Optional[str] = None
    overall_rating: Optional[int] = None
    strengths: Optional[List[str]] = None
    areas_for_improvement: Optional[List[str]] = None
    evaluation_notes: Optional[str] = None
    worksheet_completion_status: Optional[str] = None
    recording_url: Optional[str] = None

    @field_validator('interviewer_id')
    @classmethod
    def interviewer_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError('Please select an interviewer')
        return value.strip() if value else value

    @field_validator('interview_type')
    @classmethod
    def known_type(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in INTERVIEW_TYPES:
            raise ValueError(f"must be one of {', '.join(INTERVIEW_TYPES)}")
        return value

    @field_validator('overall_rating', mode='before')
    @classmethod
    def clamp(cls, value):
        if value is None:
            return None
        return clamp_rating(float(value), upper=MAX_INTERVIEW_RATING)

    @field_validator('strengths', 'areas_for_improvement')
    @classmethod
    def strip_items(cls, value):
        return _clean_list(value)


async def _get_interview(db: AsyncSession, interview_id: int) -> MockInterview:
    result = await db.execute(select(MockInterview).where(MockInterview.id == interview_id))
    interview = result.scalar_one_or_none()
    if not interview:
        raise HTTPException(status_code=404, detail="Mock interview not found")
    return interview


@router.get("/")
async def list_mock_interviews(
    student_id: str,
    interview_type: Optional[str] = None,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    query = select(MockInterview).where(MockInterview.student_id == student_id)
    if interview_type in INTERVIEW_TYPES:
        query = query.where(MockInterview.interview_type == interview_type)
    result = await db.execute(query.order_by(MockInterview.interview_date.desc()))
    return {"mockInterviews": [i.to_dict() for i in result.scalars().all()]}


@router.post("/")
async def create_mock_interview(
    data: MockInterviewCreate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    interview = MockInterview(**data.model_dump())
    db.add(interview)
    await db.commit()
    await db.refresh(interview)

    logger.info(f"Recorded mock interview {interview.id}", extra={"student_id": data.student_id})
    session.toasts.success("Mock interview saved successfully")
    return {"success": True, "mockInterview": interview.to_dict()}


@router.put("/{interview_id}")
async def update_mock_interview(
    interview_id: int,
    data: MockInterviewUpdate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    interview = await _get_interview(db, interview_id)

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(interview, field, value)

    await db.commit()
    await db.refresh(interview)
    session.toasts.success("Mock interview updated successfully")
    return {"success": True, "mockInterview": interview.to_dict()}


@router.delete("/{interview_id}")
async def delete_mock_interview(
    interview_id: int,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    interview = await _get_interview(db, interview_id)
    await db.delete(interview)
    await db.commit()
    session.toasts.success("Mock interview deleted")
    return {"success": True}
