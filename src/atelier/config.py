from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    api_title: str = Field("Atelier API")
    database_url: str = Field("sqlite:///atelier.db")
    session_secret: str = Field("dev-only-session-secret-change-me-in-production")
    session_algorithm: str = Field("HS256")
    allowed_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5500",
            "http://127.0.0.1:5000",
            "http://localhost:5000",
            "https://avocadohead.github.io",
        ]
    )
    rate_limit: str = Field("100/15 minutes")
    rate_limit_enabled: bool = Field(True)
    upload_dir: str = Field("uploads")
    upload_url_prefix: str = Field("/uploads")
    host: str = Field("0.0.0.0")
    port: int = Field(3000)
    log_level: str = Field("INFO")


settings = Settings()
