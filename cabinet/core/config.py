from pydantic_settings import BaseSettings
from typing import Optional, List
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Cabinet Portal"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Remote practice backend - every endpoint, notifications included, hangs off this base
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:3000")
    NOTIFICATIONS_PATH: str = "/api/notifications"
    HTTP_TIMEOUT: Optional[float] = 5.0

    # Session tokens issued by the portal
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_MINUTES: int = 8 * 60

    # Redis (session revocation and rate limiting)
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: int = 3600

    # Scheduling
    APPOINTMENT_TIME_SLOTS: List[str] = [
        "08:00", "08:30", "09:00", "09:30", "10:00", "10:30",
        "11:00", "11:30", "14:00", "14:30", "15:00", "15:30",
        "16:00", "16:30", "17:00", "17:30", "18:00",
    ]

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8080", "http://testserver"]

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
