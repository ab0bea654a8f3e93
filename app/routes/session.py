"""
Dashboard Session Routes

The viewer's selected student and month live server-side. Every change bumps
the session generation; panel loads that started under an older generation
are dropped instead of overwriting the newer slice.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
from typing import Optional

from app.database import get_db
from app.models.career_goal import CareerGoal, DEFAULT_GOALS
from app.models.job_application import JobApplication
from app.models.networking_interaction import NetworkingInteraction
from app.models.profile import Profile
from app.models.resume_version import ResumeVersion
from app.middleware.auth import get_current_user, get_viewer_session, check_student_access
from app.services import performance_service
from app.services.progress_service import parse_month, month_date_range, progress_report
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class SessionUpdate(BaseModel):
    student_id: Optional[str] = None
    month: Optional[str] = None


async def _load_overview(db: AsyncSession, student: Profile, month: str):
    return await performance_service.performance_overview(db, student, month)


async def _load_seed(db: AsyncSession, student: Profile, month: str):
    return await performance_service.build_seed(db, student, month)


async def _load_progress(db: AsyncSession, student: Profile, month: str):
    start, end = month_date_range(month)
    return await progress_report(db, student.id, start, end)


async def _load_career_goals(db: AsyncSession, student: Profile, month: str):
    result = await db.execute(select(CareerGoal).where(CareerGoal.student_id == student.id))
    goals = result.scalar_one_or_none()
    return {"goals": goals.to_dict() if goals else None, "defaults": DEFAULT_GOALS}


async def _load_applications(db: AsyncSession, student: Profile, month: str):
    result = await db.execute(
        select(JobApplication)
        .where(JobApplication.student_id == student.id)
        .order_by(JobApplication.application_date.desc(), JobApplication.id.desc())
    )
    return {"applications": [a.to_dict() for a in result.scalars().all()]}


async def _load_networking(db: AsyncSession, student: Profile, month: str):
    result = await db.execute(
        select(NetworkingInteraction)
        .where(NetworkingInteraction.student_id == student.id)
        .order_by(NetworkingInteraction.interaction_date.desc(), NetworkingInteraction.id.desc())
    )
    return {"interactions": [i.to_dict() for i in result.scalars().all()]}


async def _load_resumes(db: AsyncSession, student: Profile, month: str):
    result = await db.execute(
        select(ResumeVersion)
        .where(ResumeVersion.student_id == student.id)
        .order_by(ResumeVersion.version_number.desc())
    )
    return {"versions": [v.to_dict() for v in result.scalars().all()]}


PANEL_LOADERS = {
    "overview": _load_overview,
    "seed": _load_seed,
    "progress": _load_progress,
    "career_goals": _load_career_goals,
    "applications": _load_applications,
    "networking": _load_networking,
    "resumes": _load_resumes,
}


@router.get("")
async def get_session(session: ViewerSession = Depends(get_viewer_session)):
    return {**session.to_dict(), "panels": session.panels}


@router.put("")
async def update_session(
    data: SessionUpdate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    fields = data.model_dump(exclude_unset=True)

    if fields.get("month") is not None:
        try:
            parse_month(fields["month"])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if "student_id" in fields and fields["student_id"] is not None:
        check_student_access(user, fields["student_id"])
        student = await performance_service.get_profile(db, fields["student_id"])
        if not student or student.role != 'student':
            raise HTTPException(status_code=404, detail="Student not found")

    changed = False
    if "student_id" in fields:
        if fields["student_id"] is None and not user.is_staff:
            raise HTTPException(status_code=400, detail="Students cannot clear their selection")
        changed = session.select_student(fields["student_id"]) or changed
    if fields.get("month") is not None:
        changed = session.select_month(fields["month"]) or changed

    if changed:
        logger.info(
            "Dashboard selection changed",
            extra={"student_id": session.student_id, "month": session.month, "generation": session.generation},
        )
    return {**session.to_dict(), "changed": changed}


@router.get("/panels/{panel}")
async def load_panel(
    panel: str,
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    """
    Fetch one panel slice for the session's current student and month.

    The slice is stored only if the selection did not change while the
    fetch was running; otherwise the response is marked stale and the
    stored slice for the new selection is left untouched.
    """
    loader = PANEL_LOADERS.get(panel)
    if loader is None:
        raise HTTPException(status_code=404, detail=f"Unknown panel: {panel}")
    if not session.student_id:
        raise HTTPException(status_code=400, detail="Select a student first")

    token = session.begin_load()
    student_id, month = session.student_id, session.month

    try:
        student = await performance_service.get_profile(db, student_id)
        if not student:
            raise HTTPException(status_code=404, detail="Student not found")
        data = await loader(db, student, month)
    except SQLAlchemyError as e:
        logger.error(f"Failed to load {panel} panel: {e}", extra={"panel": panel, "student_id": student_id})
        raise HTTPException(status_code=500, detail=f"Failed to load {panel.replace('_', ' ')}")

    applied = session.apply(panel, token, data)
    if not applied:
        logger.info(
            f"Discarded stale {panel} panel",
            extra={"panel": panel, "generation": token},
        )

    return {
        "panel": panel,
        "studentId": session.student_id,
        "month": session.month,
        "generation": session.generation,
        "stale": not applied,
        "data": session.panels.get(panel),
    }


@router.get("/toasts")
async def drain_toasts(session: ViewerSession = Depends(get_viewer_session)):
    return {"toasts": [t.to_dict() for t in session.toasts.drain()]}
