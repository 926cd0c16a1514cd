# barbershop/config.py

import os
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

INSECURE_JWT_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - dev fallback only

REQUIRED_ENV = ["ADMIN_EMAIL", "ADMIN_PASSWORD", "JWT_SECRET"]
OPTIONAL_ENV = [
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_SHEET_ID",
    "EMAIL_HOST",
    "EMAIL_PORT",
    "EMAIL_USER",
    "EMAIL_PASS",
    "CLIENT_URL",
]


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_bool(key: str, default: bool) -> bool:
    value = _env(key)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _env_int(key: str, default: int) -> int:
    value = _env(key)
    return int(value) if value is not None else default


def _env_float(key: str, default: float) -> float:
    value = _env(key)
    return float(value) if value is not None else default


def env_presence() -> dict:
    """Which known variables are set, without their values."""
    return {key: _env(key) is not None for key in REQUIRED_ENV + OPTIONAL_ENV}


@dataclass
class Settings:
    environment: str = "development"

    # Admin panel
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None
    jwt_secret: str = INSECURE_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24

    # Google Sheets
    google_service_account_email: Optional[str] = None
    google_private_key: Optional[str] = None
    google_sheet_id: Optional[str] = None
    # existing spreadsheets use this tab name
    appointments_sheet: str = "appoiments"
    messages_sheet: str = "messages"
    services_sheet: str = "services"
    work_sheet: str = "work"

    # SMTP
    email_host: Optional[str] = None
    email_port: int = 587
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_use_tls: bool = True
    shop_name: str = "Barbershop"

    client_url: str = "http://localhost:3000"
    upload_dir: str = "uploads"
    default_barber: str = "default_barber"

    # Background work
    reconcile_delay_seconds: float = 0.2
    task_retry_attempts: int = 3
    task_retry_delay_seconds: float = 1.0
    strict_status_transitions: bool = False

    @property
    def sheets_configured(self) -> bool:
        return bool(
            self.google_sheet_id
            and self.google_service_account_email
            and self.google_private_key
        )

    @property
    def email_configured(self) -> bool:
        return bool(self.email_host and self.email_user and self.email_pass)

    @classmethod
    def from_env(cls) -> "Settings":
        jwt_secret = _env("JWT_SECRET")
        if not jwt_secret:
            warnings.warn(
                "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
                RuntimeWarning,
                stacklevel=2,
            )
            jwt_secret = INSECURE_JWT_SECRET

        private_key = _env("GOOGLE_PRIVATE_KEY")
        if private_key:
            private_key = private_key.replace("\\n", "\n")

        return cls(
            environment=_env("APP_ENV", "development"),
            admin_email=_env("ADMIN_EMAIL"),
            admin_password=_env("ADMIN_PASSWORD"),
            admin_password_hash=_env("ADMIN_PASSWORD_HASH"),
            jwt_secret=jwt_secret,
            jwt_expire_hours=_env_int("JWT_EXPIRE_HOURS", 24),
            google_service_account_email=_env("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
            google_private_key=private_key,
            google_sheet_id=_env("GOOGLE_SHEET_ID"),
            appointments_sheet=_env("APPOINTMENTS_SHEET", "appoiments"),
            messages_sheet=_env("MESSAGES_SHEET", "messages"),
            services_sheet=_env("SERVICES_SHEET", "services"),
            work_sheet=_env("WORK_SHEET", "work"),
            email_host=_env("EMAIL_HOST"),
            email_port=_env_int("EMAIL_PORT", 587),
            email_user=_env("EMAIL_USER"),
            email_pass=_env("EMAIL_PASS"),
            email_use_tls=_env_bool("EMAIL_USE_TLS", True),
            shop_name=_env("SHOP_NAME", "Barbershop"),
            client_url=_env("CLIENT_URL", "http://localhost:3000"),
            upload_dir=_env("UPLOAD_DIR", "uploads"),
            default_barber=_env("DEFAULT_BARBER", "default_barber"),
            reconcile_delay_seconds=_env_float("RECONCILE_DELAY_SECONDS", 0.2),
            task_retry_attempts=_env_int("TASK_RETRY_ATTEMPTS", 3),
            task_retry_delay_seconds=_env_float("TASK_RETRY_DELAY_SECONDS", 1.0),
            strict_status_transitions=_env_bool("STRICT_STATUS_TRANSITIONS", False),
        )
