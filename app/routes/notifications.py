"""In-app Notification Routes"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func

from app.database import get_db
from app.models.notification import Notification
from app.models.profile import Profile
from app.middleware.auth import get_current_user

router = APIRouter()


@router.get("/")
async def list_notifications(
    unread_only: bool = False,
    limit: int = 50,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    result = await db.execute(
        query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(min(max(limit, 1), 200))
    )

    unread = await db.execute(
        select(func.count(Notification.id)).where(Notification.user_id == user.id, Notification.read.is_(False))
    )
    return {
        "notifications": [n.to_dict() for n in result.scalars().all()],
        "unreadCount": unread.scalar() or 0,
    }


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Notification).where(Notification.id == notification_id, Notification.user_id == user.id)
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.read = True
    await db.commit()
    return {"success": True, "notification": notification.to_dict()}


@router.post("/read-all")
async def mark_all_read(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.commit()
    return {"success": True, "updated": result.rowcount}
