# backend/agenda/config.py

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/agenda.db"
    redis_url: Optional[str] = None
    log_level: str = "INFO"

    # Availability writes: drop (False) or reject (True) ranges with end <= start
    strict_availability_ranges: bool = False

    booking_lock_timeout_seconds: float = 10.0

    hide_past_slots: bool = False
    min_notice_minutes: int = 0

    admin_page_size_max: int = 200

    google_client_id: str = ""
    google_client_secret: str = ""
    calendar_sync_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite paths are anchored at the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
