from fastapi import Header, HTTPException, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import jwt

from app.config import get_settings
from app.database import get_db
from app.middleware.correlation import request_user_id_var
from app.models.profile import Profile, VALID_ROLES
from app.services.session_state import ViewerSession, sessions
from app.utils.logger import logger


def decode_supabase_token(token: str) -> dict:
    """Validate a Supabase HS256 access token and return its claims"""
    settings = get_settings()
    if not settings.supabase_jwt_secret:
        raise HTTPException(
            status_code=500,
            detail="Server misconfiguration: JWT secret not set"
        )
    return jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=['HS256'],
        options={"verify_exp": True, "verify_aud": False}  # Supabase sets aud='authenticated'
    )


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> Profile:
    """
    Validate Supabase JWT and return the caller's profile

    Expects Authorization header: Bearer <jwt_token>
    Creates a profile on first sign-in; the role comes from app_metadata.role
    (set by admins in Supabase) and defaults to student.
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Authorization header required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        payload = decode_supabase_token(parts[1])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=401,
            detail="Token expired. Please sign in again.",
            headers={"WWW-Authenticate": "Bearer"}
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )

    user_id = payload.get('sub')
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")

    result = await db.execute(select(Profile).where(Profile.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        metadata = payload.get('app_metadata') or {}
        role = metadata.get('role') if metadata.get('role') in VALID_ROLES else 'student'
        user = Profile(
            id=user_id,
            email=payload.get('email') or f"{user_id}@unknown",
            full_name=(payload.get('user_metadata') or {}).get('full_name', ''),
            role=role,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"[Auth] Created profile from Supabase JWT: {user.email} ({role})")

    if user.status != 'active':
        raise HTTPException(status_code=403, detail="User account is disabled")

    # Error handlers route failure toasts to this viewer
    request.state.viewer_id = user.id
    request_user_id_var.set(user.id)
    return user


async def require_staff(user: Profile = Depends(get_current_user)) -> Profile:
    """Coaches, mentors and admins only"""
    if not user.is_staff:
        raise HTTPException(status_code=403, detail="Staff access required")
    return user


def check_student_access(user: Profile, student_id: str) -> None:
    """Students may only read and write their own records; staff may access any student"""
    if user.is_staff:
        return
    if user.id != student_id:
        raise HTTPException(status_code=403, detail="Not allowed to access this student")


async def get_viewer_session(user: Profile = Depends(get_current_user)) -> ViewerSession:
    """Dashboard session of the caller; students always start on their own records"""
    default_student = None if user.is_staff else user.id
    return sessions.get(user.id, default_student)
