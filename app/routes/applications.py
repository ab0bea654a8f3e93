"""Application Tracking Routes"""

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

from app.database import get_db
from app.models.job_application import JobApplication, VALID_STATUSES
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, check_student_access
from app.services import import_service
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

MAX_IMPORT_BYTES = 1024 * 1024
REQUIRED_FIELDS = {'company_name', 'position_title', 'application_date', 'status'}


class ApplicationCreate(BaseModel):
    company_name: str
    position_title: str
    application_date: date
    status: str = "applied"
    job_url: Optional[str] = None
    location: Optional[str] = None
    last_contact_date: Optional[date] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None


class ApplicationUpdate(BaseModel):
    company_name: Optional[str] = None
    position_title: Optional[str] = None
    application_date: Optional[date] = None
    status: Optional[str] = None
    job_url: Optional[str] = None
    location: Optional[str] = None
    last_contact_date: Optional[date] = None
    next_follow_up: Optional[date] = None
    notes: Optional[str] = None


async def _get_application(db: AsyncSession, app_id: int, user: Profile) -> JobApplication:
    result = await db.execute(select(JobApplication).where(JobApplication.id == app_id))
    app = result.scalar_one_or_none()
    if not app:
        raise HTTPException(status_code=404, detail="Application not found")
    check_student_access(user, app.student_id)
    return app


@router.get("/import/template")
async def download_import_template(
    format: str = "xlsx",
    user: Profile = Depends(get_current_user),
):
    """Spreadsheet with every importable column and one example row"""
    if format not in ("xlsx", "csv"):
        raise HTTPException(status_code=400, detail="format must be xlsx or csv")
    content, media_type, filename = import_service.build_template('applications', format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{student_id}")
async def list_applications(
    student_id: str,
    q: Optional[str] = None,
    status: Optional[str] = None,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)

    query = select(JobApplication).where(JobApplication.student_id == student_id)
    if status and status in VALID_STATUSES:
        query = query.where(JobApplication.status == status)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.where(or_(
            JobApplication.company_name.ilike(pattern),
            JobApplication.position_title.ilike(pattern),
        ))
    query = query.order_by(JobApplication.application_date.desc(), JobApplication.id.desc())

    result = await db.execute(query)
    return {"applications": [a.to_dict() for a in result.scalars().all()]}


@router.get("/{student_id}/stats")
async def get_stats(
    student_id: str,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    query = (
        select(JobApplication.status, func.count(JobApplication.id))
        .where(JobApplication.student_id == student_id)
        .group_by(JobApplication.status)
    )
    result = await db.execute(query)
    stats = {row[0]: row[1] for row in result.all()}
    return {"stats": stats, "total": sum(stats.values())}


@router.post("/{student_id}")
async def create_application(
    student_id: str,
    data: ApplicationCreate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    if data.status not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {data.status}")

    app = JobApplication(student_id=student_id, **data.model_dump())
    db.add(app)
    await db.commit()
    await db.refresh(app)

    session.toasts.success("Application saved successfully")
    return {"success": True, "application": app.to_dict()}


@router.post("/{student_id}/import")
async def import_applications(
    student_id: str,
    file: UploadFile = File(...),
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    """Import applications from a CSV or xlsx file; all rows or none"""
    check_student_access(user, student_id)

    content = await file.read(MAX_IMPORT_BYTES + 1)
    if len(content) > MAX_IMPORT_BYTES:
        raise HTTPException(status_code=400, detail="Import file must be less than 1MB")

    try:
        records = import_service.application_rows(content, file.filename)
    except import_service.ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.add_all([JobApplication(student_id=student_id, **record) for record in records])
    await db.commit()

    logger.info(f"Imported {len(records)} applications", extra={"student_id": student_id})
    session.toasts.success(f"Successfully imported {len(records)} applications")
    return {"success": True, "imported": len(records)}


@router.put("/entry/{app_id}")
async def update_application(
    app_id: int,
    data: ApplicationUpdate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    app = await _get_application(db, app_id, user)

    update_data = data.model_dump(exclude_unset=True)
    if 'status' in update_data and update_data['status'] not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {update_data['status']}")

    for field, value in update_data.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(app, field, value)

    app.updated_at = datetime.utcnow()
    await db.commit()
    await db.refresh(app)

    session.toasts.success("Application updated successfully")
    return {"success": True, "application": app.to_dict()}


@router.delete("/entry/{app_id}")
async def delete_application(
    app_id: int,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    app = await _get_application(db, app_id, user)
    await db.delete(app)
    await db.commit()

    session.toasts.success("Application deleted")
    return {"success": True, "message": "Application deleted"}
