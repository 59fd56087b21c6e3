"""Application configuration via environment variables."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "Caterstaff"
    debug: bool = False
    log_dir: Path = Path.home() / ".logs" / "caterstaff"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all
    public_base_url: str = "http://localhost:8000"  # Used to build links sent to staff

    # Database
    database_url: str = "sqlite:///./caterstaff.db"

    # Single operator account for now
    account_id: int = 1

    # Confirmation workflow
    confirmation_window_days: int = 7
    reminder_delay_hours: int = 24
    reminder_interval_minutes: int = 60
    scheduler_enabled: bool = True


settings = Settings()
