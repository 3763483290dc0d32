"""Configuration settings for Budget Keeper."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./budget_keeper.db")

    # Tokens (activation, remember-me, password reset)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "")
    PASSWORD_RESET_EXPIRE_MINUTES: int = int(os.getenv("PASSWORD_RESET_EXPIRE_MINUTES", "120"))
    REMEMBER_LOGIN_DAYS: int = int(os.getenv("REMEMBER_LOGIN_DAYS", "30"))

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "480"))

    # Mail
    MAIL_BACKEND: str = os.getenv("MAIL_BACKEND", "console")  # smtp, console
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str | None = os.getenv("SMTP_USER")
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "no-reply@budget-keeper.local")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
    TEMPLATE_DIR: str = os.getenv("TEMPLATE_DIR", "templates")

    # Application
    APP_BASE_URL: str = os.getenv("APP_BASE_URL", "http://localhost:8000")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        if not self.SECRET_KEY:
            self.SECRET_KEY = secrets.token_hex(32)
            self._generated_secret = True
        else:
            self._generated_secret = False

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self._generated_secret:
            errors.append(
                "SECRET_KEY is not set - using auto-generated key (stored token hashes won't match after restart)"
            )
        if self.MAIL_BACKEND not in ("smtp", "console"):
            errors.append(f"Unknown MAIL_BACKEND '{self.MAIL_BACKEND}' - falling back to console")
        if self.MAIL_BACKEND == "smtp" and not self.SMTP_HOST:
            errors.append("MAIL_BACKEND is smtp but SMTP_HOST is not set")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
