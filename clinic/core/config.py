from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    APP_NAME: str = "Clinic Management"
    VERSION: str = "1.0.0"
    SECRET_KEY: str = "change-me-in-production-use-strong-random-key"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    DATABASE_URL: str = "sqlite:///./clinic.db"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://localhost:5000",
    ]
    LOG_LEVEL: str = "INFO"

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Identity assignment: attempts before a duplicate id surfaces as a conflict
    IDENTITY_MAX_ATTEMPTS: int = 3

    # Dashboard / notifications
    RECENT_ACTIVITY_WINDOW_HOURS: int = 24
    RECENT_ACTIVITY_PER_KIND: int = 5
    NOTIFICATION_TTL_DAYS: int = 30
    URGENT_NOTIFICATION_CAP: int = 3

    SEED_DEMO_DATA: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
