from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


DEFAULT_SESSION_SECRET = "default-secret-key"


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./auth_tracker.db",
        env="DATABASE_URL",
    )

    # Sessions
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET, env="SESSION_SECRET")
    token_expire_seconds: int = Field(default=86400, env="TOKEN_EXPIRE_SECONDS")  # 24 hours
    session_cookie_name: str = Field(default="token", env="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=True, env="SESSION_COOKIE_SECURE")
    session_cookie_samesite: str = Field(default="strict", env="SESSION_COOKIE_SAMESITE")

    # Credentials
    admin_password: str = Field(default="admin-password", env="ADMIN_PASSWORD")
    bcrypt_rounds: int = Field(default=10, env="BCRYPT_ROUNDS")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_json: bool = Field(default=True, env="LOG_JSON")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
