"""
Configuration management for the HRMS auth service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    PORT: int = 5001
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./hrms.db"

    # Token Configuration (defaults are for non-production use only)
    JWT_SECRET: str = "supersecretkey"
    JWT_ALGORITHM: str = "HS256"
    SESSION_DURATION_SECONDS: int = 2 * 60 * 60

    # Password hashing cost
    PASSWORD_HASH_ROUNDS: int = 29000

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
