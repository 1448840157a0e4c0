"""Centralised application settings loaded from environment variables."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./scoutplan.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Program builder
    DEFAULT_PROGRAM_START_TIME: str = "09:00"
    ACTIVITIES_DEFAULT_PAGE_SIZE: int = 20
    ACTIVITIES_MAX_PAGE_SIZE: int = 100
    PROGRAMS_DEFAULT_PAGE_SIZE: int = 20

    # Query cache (activities, taxonomies, program details)
    QUERY_CACHE_TTL_SECONDS: float = 300.0

    def sqlalchemy_url(self) -> str:
        # Some hosting providers still hand out the legacy postgres:// scheme.
        url = str(self.DATABASE_URL or "").strip()
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql://", 1)
        return url

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
