import asyncio

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.config import get_settings
from app.database import init_db
from app.middleware.correlation import CorrelationMiddleware
from app.middleware.error_toasts import register_error_handlers
from app.middleware.rate_limit import limiter
from app.routes import (
    applications,
    career_goals,
    email,
    mock_interviews,
    networking,
    notifications,
    office_hours,
    performance,
    profiles,
    progress,
    reminders,
    resume_versions,
    session,
    suggestions,
)
from app.utils.logger import logger
from app import worker

settings = get_settings()

app = FastAPI(title=settings.app_name, version=settings.app_version)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_error_handlers(app)

# CORS - Explicit origins for security
allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
    expose_headers=["X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)

_worker_stop = asyncio.Event()


# Startup: Initialize database
@app.on_event("startup")
async def startup_event():
    logger.info("Starting Coaching Tracker Backend...")
    await init_db()
    if settings.run_reminder_worker:
        _worker_stop.clear()
        app.state.reminder_worker = asyncio.create_task(worker.worker_loop(stop_event=_worker_stop))
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "reminder_worker", None)
    if task:
        _worker_stop.set()
        await task


# Health check endpoint (minimal response to prevent information disclosure)
@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok"}


# Register routes
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])
app.include_router(session.router, prefix="/api/session", tags=["Session"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["Suggestions"])
app.include_router(career_goals.router, prefix="/api/career-goals", tags=["Career Goals"])
app.include_router(applications.router, prefix="/api/applications", tags=["Applications"])
app.include_router(networking.router, prefix="/api/networking", tags=["Networking"])
app.include_router(progress.router, prefix="/api/progress", tags=["Progress"])
app.include_router(resume_versions.router, prefix="/api/resume-versions", tags=["Resume Versions"])
app.include_router(performance.router, prefix="/api/performance", tags=["Performance"])
app.include_router(mock_interviews.router, prefix="/api/mock-interviews", tags=["Mock Interviews"])
app.include_router(office_hours.router, prefix="/api/office-hours", tags=["Office Hours"])
app.include_router(reminders.router, prefix="/api/reminders", tags=["Reminders"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(email.router, prefix="/api/email", tags=["Email"])

# Railway deployment - use railway.json startCommand instead
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
