"""
Ideaji – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──
    APP_NAME: str = "Ideaji"
    DEBUG: bool = True
    ENVIRONMENT: str = "development"
    APP_BASE_URL: str = "http://localhost:8000"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./ideaji.db"

    # ── JWT ──
    SECRET_KEY: str = "change-me-to-a-random-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # ── OAuth — Google ──
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""

    # ── Email (SMTP) ──
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    MAIL_FROM: str = "noreply@ideaji.com"
    VERIFICATION_TOKEN_HOURS: int = 24

    # ── AI analysis (OpenAI-compatible chat completions) ──
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "gpt-4"
    AI_REQUEST_TIMEOUT: float = 60.0

    # ── Gamification ──
    IDEA_SUBMISSION_POINTS: int = 50


settings = Settings()
