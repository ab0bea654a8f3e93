"""Resume Version Routes"""

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
import time

from app.config import get_settings
from app.database import get_db
from app.models.resume_version import ResumeVersion
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, require_staff, check_student_access
from app.middleware.rate_limit import limiter, UPLOAD_LIMIT
from app.services import storage_service
from app.services.session_state import ViewerSession
from app.utils.file_handler import ResumeFileHandler
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class ResumeReview(BaseModel):
    approved: bool
    feedback: Optional[str] = None


async def next_version_number(db: AsyncSession, student_id: str) -> int:
    max_ver_result = await db.execute(
        select(func.max(ResumeVersion.version_number))
        .where(ResumeVersion.student_id == student_id)
    )
    return (max_ver_result.scalar() or 0) + 1


async def _get_version(db: AsyncSession, version_id: int) -> ResumeVersion:
    result = await db.execute(select(ResumeVersion).where(ResumeVersion.id == version_id))
    version = result.scalar_one_or_none()
    if not version:
        raise HTTPException(status_code=404, detail="Resume version not found")
    return version


@router.get("/{student_id}")
async def list_versions(
    student_id: str,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)
    result = await db.execute(
        select(ResumeVersion)
        .where(ResumeVersion.student_id == student_id)
        .order_by(ResumeVersion.version_number.desc())
    )
    versions = result.scalars().all()
    return {"versions": [v.to_dict() for v in versions]}


@router.post("/{student_id}/upload")
@limiter.limit(UPLOAD_LIMIT)
async def upload_version(
    request: Request,
    student_id: str,
    file: UploadFile = File(...),
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    """
    Upload a new PDF resume as the student's next version.

    The file is validated before storage is touched, so a rejected upload
    leaves the version list as it was.
    """
    check_student_access(user, student_id)

    handler = ResumeFileHandler(max_size=get_settings().max_resume_bytes)
    extension = handler.validate_metadata(file)
    content = await handler.read_upload(file)

    version_number = await next_version_number(db, student_id)
    object_path = storage_service.resume_object_path(student_id, int(time.time() * 1000), extension)

    try:
        file_url = await storage_service.upload_object(object_path, content, "application/pdf")
    except storage_service.StorageError as e:
        raise HTTPException(status_code=502, detail=f"Failed to upload resume: {e}")

    version = ResumeVersion(
        student_id=student_id,
        version_number=version_number,
        file_url=file_url,
        storage_path=object_path,
        status='pending',
    )
    db.add(version)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to record resume version for {student_id}: {e}", extra={"student_id": student_id})
        # Don't leave an orphaned file behind
        await storage_service.delete_object(object_path)
        raise HTTPException(status_code=409, detail="Could not save resume version. Please try again.")
    await db.refresh(version)

    logger.info(
        f"Uploaded resume version {version_number} ({len(content)} bytes)",
        extra={"student_id": student_id},
    )
    session.toasts.success("Resume uploaded successfully")
    return {"success": True, "version": version.to_dict()}


@router.post("/versions/{version_id}/review")
async def review_version(
    version_id: int,
    data: ResumeReview,
    staff: Profile = Depends(require_staff),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    version = await _get_version(db, version_id)

    if not data.approved and not (data.feedback or '').strip():
        raise HTTPException(status_code=400, detail="Feedback is required when rejecting a resume")

    version.status = 'approved' if data.approved else 'rejected'
    version.feedback = data.feedback
    version.reviewed_by = staff.id
    version.reviewed_at = datetime.utcnow()
    await db.commit()
    await db.refresh(version)

    session.toasts.success(f"Resume {version.status}")
    return {"success": True, "version": version.to_dict()}


@router.delete("/versions/{version_id}")
async def delete_version(
    version_id: int,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    version = await _get_version(db, version_id)
    check_student_access(user, version.student_id)

    storage_path = version.storage_path
    if not await storage_service.delete_object(storage_path):
        # The row goes regardless; the object can be cleaned up from the bucket
        logger.warning(f"Stored file {storage_path} was not deleted", extra={"student_id": version.student_id})

    await db.delete(version)
    await db.commit()

    session.toasts.success("Resume deleted")
    return {"success": True}
