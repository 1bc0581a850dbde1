from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://zenith_user:zenith_password@db:5432/zenith_db"
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    # Drops and recreates every table on startup; development only
    RESET_DATABASE: bool = False

    SECRET_KEY: str = "SECRET_KEY_FOR_ZENITHFIT"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_IMAGE_MODEL: str = "gemini-2.0-flash-preview-image-generation"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_TIMEOUT_SECONDS: float = 60.0
    CHAT_HISTORY_LIMIT: int = 10

    MINIO_ENDPOINT: str = "minio:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_BUCKET: str = "meal-photos"
    MINIO_SECURE: bool = False
    STORE_MEAL_PHOTOS: bool = False
    MEAL_PHOTO_URL_TTL: int = 7 * 24 * 3600

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    @property
    def REFRESH_SECRET_KEY(self) -> str:
        return self.SECRET_KEY + "_refresh"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

settings = Settings()
