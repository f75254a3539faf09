"""
HomeMarket Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "HomeMarket API"
    PROJECT_DESCRIPTION: str = "Real-estate marketplace: listings, media approval, viewings and photography jobs"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///homemarket_local.db"

    # ==================== Security & Authentication ====================
    SECRET_KEY: str = "change-this-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    BCRYPT_ROUNDS: int = 12

    # ==================== CORS & Frontend ====================
    FRONTEND_URL: str = "http://localhost:3000"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ==================== Uploads ====================
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_FILES: int = 20
    THUMBNAIL_WIDTH: int = 600
    THUMBNAIL_QUALITY: int = 75

    # ==================== Notifications ====================
    ADMIN_NOTIFY_LIMIT: int = 50

    # ==================== Seed Admin ====================
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "System Admin"
    ADMIN_PHONE: str = "0000000000"

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Database Connection Pool ====================
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Pagination ====================
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra environment variables
        validate_default=True,
    )


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create default settings instance
settings = get_settings()


# ==================== Helper Functions ====================
def get_cors_origins() -> List[str]:
    """Get CORS allowed origins"""
    origins = list(settings.ALLOWED_ORIGINS)
    if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
        origins.append(settings.FRONTEND_URL)
    return origins
