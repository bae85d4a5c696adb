"""
Core configuration for the Université Quiz backend
Reads environment variables (and an optional .env file)
"""

import secrets
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    APP_NAME: str = "Université Quiz"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Quiz, grades and leaderboard API for university students"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    PORT: int = Field(default=8000)
    HOST: str = Field(default="0.0.0.0")

    # API Settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Université Quiz Backend"

    # Session tokens
    JWT_ACCESS_SECRET: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    JWT_REFRESH_SECRET: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL_MIN: int = Field(default=15)
    REFRESH_TOKEN_TTL_DAYS: int = Field(default=7)
    BCRYPT_ROUNDS: int = Field(default=12)

    # Auth cookies
    ACCESS_COOKIE_NAME: str = "access_token"
    REFRESH_COOKIE_NAME: str = "refresh_token"
    COOKIE_SECURE: bool = Field(default=True)
    COOKIE_SAMESITE: str = Field(default="none")

    # Admin panel
    ADMIN_CODE: Optional[str] = Field(default=None)
    ADMIN_TOKEN_TTL_SEC: int = Field(default=3600)
    ADMIN_SWEEP_INTERVAL_SEC: int = Field(default=600)
    ADMIN_TOKEN_STORE: str = Field(default="memory")  # memory | redis

    # Grades
    RESULTS_REQUIRE_OWNERSHIP: bool = Field(default=False)

    # Database
    DATABASE_URL: Optional[str] = Field(default=None)
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)
    DB_POOL_PRE_PING: bool = Field(default=True)

    # Redis (admin token store)
    REDIS_URL: Optional[str] = Field(default=None)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)

    # CORS
    BACKEND_CORS_ORIGINS: str = Field(default="http://localhost:5173,http://localhost:3000")

    # Email (contact form)
    SMTP_HOST: Optional[str] = Field(default=None)
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: Optional[str] = Field(default=None)
    SMTP_PASSWORD: Optional[str] = Field(default=None)
    SMTP_TIMEOUT: int = Field(default=10)
    EMAIL_FROM: str = Field(default="no-reply@universite-quiz.app")
    CONTACT_INBOX: str = Field(default="contact@universite-quiz.app")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_TO_FILE: bool = Field(default=True)
    LOG_DIR: str = Field(default="logs")
    LOG_FILE: str = Field(default="logs/app.log")
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # Sentry / metrics
    SENTRY_DSN: Optional[str] = Field(default=None)
    METRICS_ENABLED: bool = Field(default=True)
    SECURITY_HEADERS_ENABLED: bool = Field(default=True)

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_AUTH: str = Field(default="20/15 minutes")
    RATE_LIMIT_QUIZ: str = Field(default="100/15 minutes")

    def get_db_url(self) -> str:
        """Get database URL with proper formatting"""
        if self.DATABASE_URL:
            # Handle Heroku/Railway style postgres:// URLs
            db_url = self.DATABASE_URL
            if db_url.startswith("postgres://"):
                db_url = db_url.replace("postgres://", "postgresql://", 1)
            return db_url

        # Default for development
        return "sqlite:///./universite_quiz.db"

    def get_redis_url(self) -> str:
        """Get Redis URL"""
        if self.REDIS_URL:
            return self.REDIS_URL
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as list"""
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
