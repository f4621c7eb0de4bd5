# fleet_inspection/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./data/fleet_inspection.db"
    DATABASE_ECHO: bool = False   # Set True to log all SQL queries (debug only)

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on staff endpoints

    # ── Photo storage ─────────────────────────────────────────────────────
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/api/uploads"
    MAX_PHOTOS_PER_INSPECTION: int = 10
    MAX_PHOTO_BYTES: int = 5 * 1024 * 1024

    # ── Public inspection form ────────────────────────────────────────────
    PUBLIC_FORM_URL: str = "/inspection"   # driver-facing link is {PUBLIC_FORM_URL}/{token}

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    @property
    def inspections_upload_dir(self) -> str:
        return f"{self.UPLOAD_DIR.rstrip('/')}/inspections"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
