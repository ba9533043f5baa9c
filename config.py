import os
from pathlib import Path

from dotenv import load_dotenv

# load .env next to this file into process env vars
load_dotenv(Path(__file__).resolve().parent / ".env")


def _as_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in ("1", "true", "yes", "y", "on")


def _as_int(name: str, default: int) -> int:
    try:
        return int(str(os.getenv(name, default)).strip())
    except ValueError:
        return default


def _as_list(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default) or ""
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    # App
    ENV: str = os.getenv("ENV", "development").strip().lower()
    PORT: int = _as_int("PORT", 3001)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # SMTP (Gmail App Password by default)
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com").strip()
    SMTP_PORT: int = _as_int("SMTP_PORT", 587)
    SMTP_USE_TLS: bool = _as_bool("SMTP_USE_TLS", False)
    SMTP_TIMEOUT: int = _as_int("SMTP_TIMEOUT", 20)
    EMAIL_USER: str = os.getenv("EMAIL_USER", "").strip()
    EMAIL_PASS: str = os.getenv("EMAIL_PASS", "").strip()
    OPERATOR_EMAIL: str = (os.getenv("OPERATOR_EMAIL") or os.getenv("EMAIL_USER", "")).strip()
    EMAIL_DRY_RUN: bool = _as_bool("EMAIL_DRY_RUN", False)

    # Templates
    BRAND_NAME: str = os.getenv("BRAND_NAME", "DesignX").strip()
    SEND_CLIENT_CONFIRMATION: bool = _as_bool("SEND_CLIENT_CONFIRMATION", True)

    # CORS
    ALLOWED_ORIGINS: list[str] = _as_list("ALLOWED_ORIGINS", "http://localhost:3000")

    # Rate limiting on POST /send-email
    RATE_LIMIT_MAX: int = _as_int("RATE_LIMIT_MAX", 5)
    RATE_LIMIT_WINDOW_SECONDS: int = _as_int("RATE_LIMIT_WINDOW_SECONDS", 15 * 60)
    # Only behind a reverse proxy that appends X-Forwarded-For
    TRUST_PROXY: bool = _as_bool("TRUST_PROXY", False)

    # Keep-alive ping (empty URL disables it)
    KEEP_ALIVE_URL: str = os.getenv("KEEP_ALIVE_URL", "").strip()
    KEEP_ALIVE_INTERVAL_SECONDS: int = _as_int("KEEP_ALIVE_INTERVAL_SECONDS", 14 * 60)

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def allow_any_origin(self) -> bool:
        return "*" in self.ALLOWED_ORIGINS


settings = Settings()
