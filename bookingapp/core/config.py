"""
Application settings and configuration
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Basic app settings
    APP_NAME: str = Field(default="Service Booking Scheduler API")
    DEBUG: bool = Field(default=False)

    # Database settings
    DATABASE_URL: str = Field(default="sqlite:///./booking.db")

    # JWT Authentication settings
    JWT_SECRET_KEY: str = Field(
        default="change-this-jwt-secret-in-production-use-long-random-string"
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)

    # Monitoring settings
    LOG_LEVEL: str = Field(default="INFO")

    # Scheduling defaults
    DEFAULT_SLOT_INTERVAL: int = Field(default=15)  # minutes between candidate starts
    DEFAULT_WORK_START: str = Field(default="09:00")  # used when work hours are not enforced
    DEFAULT_WORK_END: str = Field(default="18:00")
    DEFAULT_SERVICE_DURATION: int = Field(default=60)
    DEFAULT_TRAVEL_BUFFER: int = Field(default=30)  # at-home bookings
    WAITLIST_MAX_MATCHES: int = Field(default=10)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
