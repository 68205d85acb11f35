import os
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    """Process configuration. Built once at startup and handed to create_app()."""

    mongo_uri: Optional[str] = None
    database_name: str = "jobportal"

    jwt_secret: str
    jwt_email_secret: str
    jwt_algorithm: str = "HS256"
    session_ttl: timedelta = timedelta(hours=24)
    email_token_ttl: timedelta = timedelta(hours=24)

    public_base_url: str = "http://localhost:5000"
    frontend_url: Optional[str] = None
    allowed_origins: List[str] = []
    cookie_secure: bool = False

    # SMTP
    mail_username: str = ""
    mail_password: str = ""
    mail_from_name: str = "JobBoard"
    mail_provider: str = "auto"
    smtp_host: str = "smtp.example.com"
    smtp_port: int = 587

    log_level: str = "INFO"


def _split(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Read .env (if present) and the environment into a Settings object."""
    if env_file is None:
        env_file = Path(__file__).resolve().parent.parent / ".env"
    if env_file.exists():
        load_dotenv(dotenv_path=env_file)
    else:
        load_dotenv()

    jwt_secret = os.getenv("JWT_SECRET")
    jwt_email_secret = os.getenv("JWT_EMAIL_SECRET")
    if not jwt_secret or not jwt_email_secret:
        raise ValueError("JWT_SECRET and JWT_EMAIL_SECRET must both be set! Check your .env file.")

    return Settings(
        mongo_uri=os.getenv("MONGO_URI"),
        database_name=os.getenv("DATABASE_NAME", "jobportal"),
        jwt_secret=jwt_secret,
        jwt_email_secret=jwt_email_secret,
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:5000"),
        frontend_url=os.getenv("FRONTEND_URL") or None,
        allowed_origins=_split(os.getenv("ALLOWED_ORIGINS", "")),
        cookie_secure=os.getenv("APP_ENV", "") == "production",
        mail_username=os.getenv("MAIL_USERNAME", ""),
        mail_password=os.getenv("MAIL_PASSWORD", ""),
        mail_from_name=os.getenv("MAIL_FROM_NAME", "JobBoard"),
        mail_provider=os.getenv("MAIL_PROVIDER", "auto").lower(),
        smtp_host=os.getenv("SMTP_HOST", "smtp.example.com"),
        smtp_port=int(os.getenv("SMTP_PORT", 587)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
