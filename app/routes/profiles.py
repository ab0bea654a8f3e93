"""Profile and student directory routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from app.database import get_db
from app.models.performance_review import ATTENTION_LEVELS
from app.models.profile import Profile, STAFF_ROLES, PROFILE_STATUSES
from app.middleware.auth import get_current_user, get_viewer_session, require_staff
from app.services.selection import filter_options
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

STUDENT_SORT_COLUMNS = {
    'full_name': Profile.full_name,
    'email': Profile.email,
    'cohort': Profile.cohort,
    'status': Profile.status,
    'created_at': Profile.created_at,
    'last_review_date': Profile.last_review_date,
}


def _known_status(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in PROFILE_STATUSES:
        raise ValueError(f"must be one of {', '.join(PROFILE_STATUSES)}")
    return value


class StudentAssignment(BaseModel):
    coach_id: Optional[str] = None
    mentor_id: Optional[str] = None
    attention_level: Optional[str] = None
    cohort: Optional[str] = None
    status: Optional[str] = None

    @field_validator('status')
    @classmethod
    def known_status(cls, value: Optional[str]) -> Optional[str]:
        return _known_status(value)


class BulkStudentUpdate(BaseModel):
    student_ids: List[str] = Field(min_length=1)
    status: Optional[str] = None
    cohort: Optional[str] = None

    @field_validator('status')
    @classmethod
    def known_status(cls, value: Optional[str]) -> Optional[str]:
        return _known_status(value)


@router.get("/me")
async def get_me(user: Profile = Depends(get_current_user)):
    return {"profile": user.to_dict()}


@router.get("/students")
async def list_students(
    q: str = "",
    status: Optional[str] = None,
    cohort: Optional[str] = None,
    sort: str = "full_name",
    direction: str = "asc",
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """Student directory for staff: picker options plus full rows for the management table"""
    if sort not in STUDENT_SORT_COLUMNS:
        raise HTTPException(status_code=400, detail=f"Cannot sort by {sort}")
    if direction not in ("asc", "desc"):
        raise HTTPException(status_code=400, detail="direction must be asc or desc")
    if status is not None and status not in PROFILE_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    column = STUDENT_SORT_COLUMNS[sort]
    query = select(Profile).where(Profile.role == 'student')
    if status:
        query = query.where(Profile.status == status)
    if cohort:
        query = query.where(Profile.cohort == cohort)
    if q:
        pattern = f"%{q.strip()}%"
        query = query.where(or_(Profile.full_name.ilike(pattern), Profile.email.ilike(pattern)))
    query = query.order_by(column.desc() if direction == "desc" else column.asc(), Profile.id)

    students = (await db.execute(query)).scalars().all()

    cohorts = await db.execute(
        select(Profile.cohort)
        .where(Profile.role == 'student', Profile.cohort.is_not(None))
        .distinct()
        .order_by(Profile.cohort)
    )

    options = [{"value": s.id, "label": s.full_name or s.email} for s in students]
    return {
        "options": options,
        "students": [s.to_dict() for s in students],
        "cohorts": list(cohorts.scalars().all()),
    }


@router.get("/interviewers")
async def list_interviewers(
    q: str = "",
    staff: Profile = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """Active staff who can run mock interviews"""
    result = await db.execute(
        select(Profile)
        .where(Profile.role.in_(STAFF_ROLES), Profile.status == 'active')
        .order_by(Profile.full_name)
    )
    options = [{"value": p.id, "label": p.full_name or p.email} for p in result.scalars().all()]
    return {"options": filter_options(options, q), "default": staff.id}


@router.post("/students/bulk")
async def bulk_update_students(
    data: BulkStudentUpdate,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    """Set status and/or cohort on many students at once"""
    values = data.model_dump(include={'status', 'cohort'}, exclude_none=True)
    if not values:
        raise HTTPException(status_code=400, detail="Choose a status or cohort to apply")

    result = await db.execute(
        update(Profile)
        .where(Profile.id.in_(data.student_ids), Profile.role == 'student')
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    logger.info(
        f"Bulk updated {result.rowcount} students",
        extra={"user_id": staff.id},
    )
    session.toasts.success(f"Successfully updated {result.rowcount} students")
    return {"success": True, "updated": result.rowcount}


@router.put("/students/{student_id}")
async def update_student_assignment(
    student_id: str,
    data: StudentAssignment,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Profile).where(Profile.id == student_id, Profile.role == 'student')
    )
    student = result.scalar_one_or_none()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get('attention_level') and update_data['attention_level'] not in ATTENTION_LEVELS:
        raise HTTPException(status_code=400, detail=f"Invalid attention level: {update_data['attention_level']}")
    if 'status' in update_data and update_data['status'] is None:
        del update_data['status']

    for field, value in update_data.items():
        setattr(student, field, value)
    await db.commit()
    await db.refresh(student)

    session.toasts.success("Student updated successfully")
    return {"success": True, "profile": student.to_dict()}
