from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


class ConfigurationError(RuntimeError):
    pass


def _get_first_set(*env_names: str) -> str:
    for env_name in env_names:
        value = os.getenv(env_name, "").strip()
        if value:
            return value
    return ""


def _normalize_database_url(raw_url: str) -> str:
    if not raw_url:
        return raw_url
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql+psycopg2://", 1)
    if raw_url.startswith("postgresql://") and "+" not in raw_url.split("://", 1)[0]:
        return raw_url.replace("postgresql://", "postgresql+psycopg2://", 1)
    return raw_url


def _with_sslmode_if_needed(db_url: str) -> str:
    if not db_url or "sslmode=" in db_url or not db_url.startswith("postgresql"):
        return db_url
    lowered = db_url.lower()
    if "localhost" in lowered or "127.0.0.1" in lowered:
        return db_url
    sep = "&" if "?" in db_url else "?"
    return f"{db_url}{sep}sslmode=require"


def _build_database_url() -> str:
    explicit = _get_first_set("SUPABASE_DB_URL", "DATABASE_URL")
    if explicit:
        return _with_sslmode_if_needed(_normalize_database_url(explicit))

    # Local dev fallback when no store URL is set.
    sqlite_file = Path(os.getenv("SQLITE_DB_PATH", "./app.db")).as_posix()
    if sqlite_file.startswith("/"):
        return f"sqlite:///{sqlite_file}"
    return f"sqlite:///./{sqlite_file.lstrip('./')}"


@dataclass(frozen=True)
class Settings:
    app_name: str = os.getenv("APP_NAME", "food_delivery_backend")
    app_debug: bool = os.getenv("APP_DEBUG", "false").lower() == "true"
    app_host: str = os.getenv("APP_HOST", "0.0.0.0")
    app_port: int = int(os.getenv("APP_PORT", "8000"))

    database_url: str = _build_database_url()

    paystack_secret_key: str = os.getenv("PAYSTACK_SECRET_KEY", "")
    paystack_base_url: str = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co").rstrip("/")
    paystack_timeout_seconds: float = float(os.getenv("PAYSTACK_TIMEOUT_SECONDS", "15"))

    notification_provider: str = os.getenv("NOTIFICATION_PROVIDER", "fcm").strip().lower()
    firebase_project_id: str = os.getenv("FIREBASE_PROJECT_ID", "")
    firebase_server_key: str = os.getenv("FIREBASE_SERVER_KEY", "")
    fcm_base_url: str = os.getenv("FCM_BASE_URL", "https://fcm.googleapis.com/v1").rstrip("/")
    fcm_timeout_seconds: float = float(os.getenv("FCM_TIMEOUT_SECONDS", "10"))

    promo_batch_size: int = int(os.getenv("PROMO_BATCH_SIZE", "500"))
    # 30 km/h is 0.5 km per minute.
    driver_average_speed_kmh: float = float(os.getenv("DRIVER_AVERAGE_SPEED_KMH", "30"))


settings = Settings()


def get_settings() -> Settings:
    return settings
