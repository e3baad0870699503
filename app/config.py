from pydantic_settings import BaseSettings
from typing import List, Optional, Union
from pydantic import field_validator


class Settings(BaseSettings):
    APP_NAME: str = "Udyam Union Backend"
    APP_ENV: str = "development"
    APP_DEBUG: bool = True
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:5173"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            # Handle comma-separated string from environment variables
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # postgresql+asyncpg://... in production, sqlite+aiosqlite:///... locally
    DATABASE_URL: str

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days, sellers stay logged in on mobile
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 10080

    # Document uploads (local disk)
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # Phone OTP (delivery is mocked and only logged)
    OTP_EXPIRE_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 3
    OTP_CLEANUP_INTERVAL_MINUTES: int = 10

    SCHEDULER_ENABLED: bool = True

    # Overrides the APP_DEBUG-derived level (DEBUG, INFO, WARNING, ...)
    LOG_LEVEL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
