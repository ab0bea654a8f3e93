"""Networking Interaction Routes"""

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date

from app.database import get_db
from app.models.networking_interaction import NetworkingInteraction, INTERACTION_TYPES
from app.models.profile import Profile
from app.middleware.auth import get_current_user, get_viewer_session, check_student_access
from app.services import import_service
from app.services.session_state import ViewerSession
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

MAX_IMPORT_BYTES = 1024 * 1024
REQUIRED_FIELDS = {'contact_name', 'interaction_type', 'interaction_method', 'interaction_date'}


class InteractionFields(BaseModel):
    @field_validator('interaction_type', check_fields=False)
    @classmethod
    def known_type(cls, value):
        if value is not None and value not in INTERACTION_TYPES:
            raise ValueError(f"must be one of {', '.join(sorted(INTERACTION_TYPES))}")
        return value

    @field_validator('interaction_method', check_fields=False)
    @classmethod
    def known_method(cls, value):
        if value is not None and value not in import_service.INTERACTION_METHODS:
            raise ValueError(f"must be one of {', '.join(sorted(import_service.INTERACTION_METHODS))}")
        return value


class InteractionCreate(InteractionFields):
    contact_name: str
    interaction_date: date
    company: Optional[str] = None
    role: Optional[str] = None
    interaction_type: str = 'industry_professional'
    interaction_method: str = 'linkedin'
    discussion_points: Optional[str] = None
    follow_up_items: Optional[str] = None
    next_steps: Optional[str] = None
    next_follow_up_date: Optional[date] = None
    linkedin_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class InteractionUpdate(InteractionFields):
    contact_name: Optional[str] = None
    interaction_date: Optional[date] = None
    company: Optional[str] = None
    role: Optional[str] = None
    interaction_type: Optional[str] = None
    interaction_method: Optional[str] = None
    discussion_points: Optional[str] = None
    follow_up_items: Optional[str] = None
    next_steps: Optional[str] = None
    next_follow_up_date: Optional[date] = None
    linkedin_url: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


async def _get_interaction(db: AsyncSession, interaction_id: int, user: Profile) -> NetworkingInteraction:
    result = await db.execute(select(NetworkingInteraction).where(NetworkingInteraction.id == interaction_id))
    interaction = result.scalar_one_or_none()
    if not interaction:
        raise HTTPException(status_code=404, detail="Interaction not found")
    check_student_access(user, interaction.student_id)
    return interaction


@router.get("/import/template")
async def download_import_template(
    format: str = "xlsx",
    user: Profile = Depends(get_current_user),
):
    """Spreadsheet with every importable column and one example row"""
    if format not in ("xlsx", "csv"):
        raise HTTPException(status_code=400, detail="format must be xlsx or csv")
    content, media_type, filename = import_service.build_template('networking', format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{student_id}")
async def list_interactions(
    student_id: str,
    q: Optional[str] = None,
    interaction_type: Optional[str] = None,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)

    query = select(NetworkingInteraction).where(NetworkingInteraction.student_id == student_id)
    if interaction_type and interaction_type in INTERACTION_TYPES:
        query = query.where(NetworkingInteraction.interaction_type == interaction_type)
    if q and q.strip():
        pattern = f"%{q.strip()}%"
        query = query.where(or_(
            NetworkingInteraction.contact_name.ilike(pattern),
            NetworkingInteraction.company.ilike(pattern),
            NetworkingInteraction.role.ilike(pattern),
        ))
    query = query.order_by(NetworkingInteraction.interaction_date.desc(), NetworkingInteraction.id.desc())

    result = await db.execute(query)
    return {"interactions": [i.to_dict() for i in result.scalars().all()]}


@router.post("/{student_id}")
async def create_interaction(
    student_id: str,
    data: InteractionCreate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)

    interaction = NetworkingInteraction(student_id=student_id, **data.model_dump())
    db.add(interaction)
    await db.commit()
    await db.refresh(interaction)

    session.toasts.success("Networking interaction saved successfully")
    return {"success": True, "interaction": interaction.to_dict()}


@router.post("/{student_id}/import")
async def import_interactions(
    student_id: str,
    file: UploadFile = File(...),
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    check_student_access(user, student_id)

    content = await file.read(MAX_IMPORT_BYTES + 1)
    if len(content) > MAX_IMPORT_BYTES:
        raise HTTPException(status_code=400, detail="Import file must be less than 1MB")

    try:
        records = import_service.networking_rows(content, file.filename)
    except import_service.ImportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.add_all([NetworkingInteraction(student_id=student_id, **record) for record in records])
    await db.commit()

    logger.info(f"Imported {len(records)} networking interactions", extra={"student_id": student_id})
    session.toasts.success(f"Successfully imported {len(records)} interactions")
    return {"success": True, "imported": len(records)}


@router.put("/entry/{interaction_id}")
async def update_interaction(
    interaction_id: int,
    data: InteractionUpdate,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    interaction = await _get_interaction(db, interaction_id, user)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(interaction, field, value)

    await db.commit()
    await db.refresh(interaction)

    session.toasts.success("Networking interaction updated successfully")
    return {"success": True, "interaction": interaction.to_dict()}


@router.delete("/entry/{interaction_id}")
async def delete_interaction(
    interaction_id: int,
    user: Profile = Depends(get_current_user),
    session: ViewerSession = Depends(get_viewer_session),
    db: AsyncSession = Depends(get_db),
):
    interaction = await _get_interaction(db, interaction_id, user)
    await db.delete(interaction)
    await db.commit()

    session.toasts.success("Networking interaction deleted")
    return {"success": True}
