"""Career Goals Routes"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import date

from app.database import get_db
from app.models.career_goal import CareerGoal, DEFAULT_GOALS, MAX_TARGET_ITEMS
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, check_student_access
from app.services.selection import cap_items
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class CareerGoalUpdate(BaseModel):
    target_roles: List[str] = []
    target_industries: List[str] = []
    preferred_company_size: List[str] = []
    preferred_location: Optional[str] = None
    geographic_preferences: List[str] = []
    job_boards: List[str] = []
    target_companies: List[str] = []
    weekly_application_goal: int = Field(DEFAULT_GOALS["weekly_application_goal"], ge=0)
    weekly_connection_goal: int = Field(DEFAULT_GOALS["weekly_connection_goal"], ge=0)
    weekly_interview_goal: int = Field(DEFAULT_GOALS["weekly_interview_goal"], ge=0)
    weekly_event_goal: int = Field(DEFAULT_GOALS["weekly_event_goal"], ge=0)
    quality_match_target: Optional[int] = Field(None, ge=0, le=100)
    monthly_alumni_goal: int = Field(DEFAULT_GOALS["monthly_alumni_goal"], ge=0)
    monthly_industry_goal: int = Field(DEFAULT_GOALS["monthly_industry_goal"], ge=0)
    monthly_recruiter_goal: int = Field(DEFAULT_GOALS["monthly_recruiter_goal"], ge=0)
    campaign_start_date: Optional[date] = None
    campaign_end_date: Optional[date] = None

    @field_validator('target_roles', 'target_industries')
    @classmethod
    def cap_targets(cls, value):
        return cap_items(value, MAX_TARGET_ITEMS)

    @model_validator(mode='after')
    def check_campaign_range(self):
        if self.campaign_start_date and self.campaign_end_date and self.campaign_end_date < self.campaign_start_date:
            raise ValueError("campaign_end_date must not be before campaign_start_date")
        return self


@router.get("/{student_id}")
async def get_career_goals(
    student_id: str,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    result = await db.execute(select(CareerGoal).where(CareerGoal.student_id == student_id))
    goals = result.scalar_one_or_none()
    return {
        "goals": goals.to_dict() if goals else None,
        "defaults": DEFAULT_GOALS,
    }


@router.put("/{student_id}")
async def save_career_goals(
    student_id: str,
    data: CareerGoalUpdate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    """Create or update the student's single career-goal record"""
    check_student_access(user, student_id)

    result = await db.execute(select(CareerGoal).where(CareerGoal.student_id == student_id))
    goals = result.scalar_one_or_none()
    if goals is None:
        goals = CareerGoal(student_id=student_id)
        db.add(goals)

    for field, value in data.model_dump().items():
        setattr(goals, field, value)

    await db.commit()
    await db.refresh(goals)
    logger.info(f"Saved career goals for {student_id}", extra={"student_id": student_id})
    session.toasts.success("Career goals saved successfully")
    return {"success": True, "goals": goals.to_dict()}
