"""Application settings loaded from the environment."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SoundVault service settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_name: str = "soundvault"
    app_version: str = "1.0.0"
    environment: str = "development"
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Database
    database_url: str = "sqlite+aiosqlite:///./soundvault.db"
    database_echo: bool = False

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # Sessions
    session_secret: str = "change-me-in-production"
    session_cookie_name: str = "connect.sid"
    session_max_age_seconds: int = 7 * 24 * 60 * 60
    session_touch_after_seconds: int = 24 * 60 * 60

    # Uploads (sizes in megabytes)
    max_audio_size_mb: int = 50
    max_image_size_mb: int = 5
    blob_chunk_size: int = 255 * 1024

    # Admin seed
    admin_username: str = "admin"
    admin_email: str = "admin@musicplayer.com"
    admin_password: str = "Admin@123456"

    @property
    def max_audio_size(self) -> int:
        return self.max_audio_size_mb * 1024 * 1024

    @property
    def max_image_size(self) -> int:
        return self.max_image_size_mb * 1024 * 1024

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"


app_settings = Settings()
