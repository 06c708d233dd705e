"""Application configuration using pydantic-settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="", validate_default=True)

    # "development", "production" or "test"
    environment: str = "development"

    # Pool settings tuned for Render + Supabase transaction pooler
    db_ssl_mode: str = "require"
    db_pool_min_size: int = 0
    db_pool_max_size: int = 5  # Supabase free tier has few connections
    db_idle_timeout: float = 0  # 0 keeps idle connections open
    db_max_lifetime: float = 60 * 30
    db_connect_timeout: float = 60  # covers cold starts
    db_application_name: str = "team-management-app"

    # Render drops connections idle for 5 minutes
    keep_alive_interval: float = 4 * 60

    # API settings
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @field_validator("database_url")
    @classmethod
    def require_database_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError(
                "DATABASE_URL is not defined; set it in the environment or the .env file"
            )
        return value

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
