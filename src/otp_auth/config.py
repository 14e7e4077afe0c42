"""OTP Auth service — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./otp_auth.db"

    # ── OTP policy ────────────────────────────────────────
    otp_validity_minutes: int = 10
    otp_invalidate_on_issue: bool = True

    # ── SMTP ──────────────────────────────────────────────
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    email_from: str = "no-reply@example.com"

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Auth"
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
