from pydantic_settings import BaseSettings
from functools import lru_cache
import os

class Settings(BaseSettings):
    # Supabase (auth + storage)
    supabase_url: str = ""
    supabase_jwt_secret: str = ""
    supabase_service_role_key: str = ""
    resume_bucket: str = "resumes"

    # Email delivery
    resend_api_key: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    reminder_sender: str = "Coaching Tracker <notifications@example.com>"

    # Database - Railway provides DATABASE_URL, fallback to SQLite for local
    database_url: str = None

    # Uploads
    max_resume_bytes: int = 10 * 1024 * 1024  # 10MB

    # Reminder worker (in-process when enabled, otherwise run python -m app.worker)
    run_reminder_worker: bool = False
    reminder_poll_interval: float = 60.0
    reminder_max_idle_interval: float = 300.0

    # Toasts kept per viewer before the oldest are dropped
    toast_queue_size: int = 20

    # App Settings
    app_name: str = "CoachingTracker"
    app_version: str = "1.0.0"
    debug: bool = False
    allowed_origins: str = "http://localhost:5173,http://localhost:3000"

    # API Settings
    backend_host: str = "0.0.0.0"
    backend_port: int = int(os.getenv("PORT", "8000"))  # Railway provides PORT env var

    class Config:
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Auto-detect database URL
        if self.database_url is None:
            railway_db = os.getenv("DATABASE_URL")
            if railway_db:
                self.database_url = to_async_url(railway_db)
            else:
                # Fallback to local SQLite
                self.database_url = "sqlite+aiosqlite:///./coaching_tracker.db"
        else:
            self.database_url = to_async_url(self.database_url)


def to_async_url(url: str) -> str:
    """Railway uses postgres:// or postgresql://, but SQLAlchemy async needs postgresql+asyncpg://"""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
