"""
Environment configuration for the gate-pass tracker.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Hostel Gate Pass", alias="PROJECT_NAME")
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database configuration
    DATABASE_URL: str = "sqlite:///./gatepass.db"
    DATABASE_ECHO: bool = False

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False

    # Credentials
    PASSWORD_MIN_LENGTH: int = 6
    PASSWORD_BCRYPT_ROUNDS: int = 12

    # One-time passcode gate; unset limits mean unlimited retries / no expiry
    OTP_LENGTH: int = 6
    OTP_MAX_ATTEMPTS: Optional[int] = None
    OTP_VALIDITY_MINUTES: Optional[int] = None

    # Dashboards
    RECENT_ACTIVITY_LIMIT: int = 5
    UNKNOWN_STUDENT_LABEL: str = "Unknown Student"

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case"""
        return str(v).upper()

    @field_validator('OTP_MAX_ATTEMPTS', 'OTP_VALIDITY_MINUTES', mode='before')
    @classmethod
    def blank_means_unlimited(cls, v):
        """Treat empty strings and non-positive values from .env as unset"""
        if v in ("", None):
            return None
        if int(v) <= 0:
            return None
        return v

    @field_validator('OTP_LENGTH')
    @classmethod
    def validate_otp_length(cls, v: int) -> int:
        if not 4 <= v <= 10:
            raise ValueError("OTP_LENGTH must be between 4 and 10")
        return v

    @field_validator('PASSWORD_BCRYPT_ROUNDS')
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("PASSWORD_BCRYPT_ROUNDS must be between 4 and 31")
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
