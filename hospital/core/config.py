from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_BACKEND_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _BACKEND_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_ssl: bool = False

    # JWT
    secret_key: str
    access_token_expire_minutes: int = 60
    algorithm: str = "HS256"

    # CORS
    cors_origins: str = "http://localhost:5173"

    # Scheduling rules
    slot_duration_minutes: int = 30
    # Minimum free time after a requested start for a booking to be admitted,
    # regardless of the booking's own duration.
    admission_window_minutes: int = 30
    # Schedule grid starts/ends on the window's whole hours (09:15-17:00 -> 09:00..17:00)
    schedule_whole_hour_slots: bool = True
    # Longest date range a single schedule request may cover
    schedule_max_days: int = 366

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
