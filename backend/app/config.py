# backend/app/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/sqlite/detailing.db"
    redis_url: str | None = None

    # Shop hours, shop-local "HH:MM"
    shop_open: str = "09:00"
    shop_close: str = "21:00"
    shop_timezone: str | None = None

    slot_step_minutes: int = 30
    default_duration_minutes: int = 60

    # JSON file with services + incompatible pairs; built-in catalog when unset
    catalog_path: str | None = None

    log_level: str = "INFO"
    create_tables: bool = True

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path is resolved against the repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
