"""Configuration for the hospital CMS admin API.

Domain constants live at module level; deployment settings come from the
environment (optionally a .env file) through get_settings().
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

DAYS_OF_WEEK = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

TIME_OPTIONS = [
    "09:00 AM",
    "10:00 AM",
    "11:00 AM",
    "12:00 PM",
    "01:00 PM",
    "02:00 PM",
    "03:00 PM",
    "04:00 PM",
    "05:00 PM",
    "06:00 PM",
    "07:00 PM",
    "08:00 PM",
]

# Pagination
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 1000

STORE_BACKENDS = ("appwrite", "memory")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Deployment settings read from environment variables."""

    appwrite_endpoint: Optional[str] = None
    appwrite_project_id: Optional[str] = None
    appwrite_api_key: Optional[str] = None
    appwrite_database_id: Optional[str] = None
    doctors_collection_id: str = "doctors"
    users_collection_id: str = "users_data"
    time_slots_collection_id: str = "timeSlots"

    store_backend: str = "appwrite"

    http_timeout: int = 15
    http_max_retries: int = 3
    circuit_failure_threshold: int = 5
    circuit_timeout: int = 60
    fetch_batch_size: int = 100

    log_level: str = "INFO"

    admin_auth_enabled: bool = False
    admin_database_url: str = "sqlite:///admin_keys.db"

    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    def validate_store(self) -> None:
        """
        Check that the selected store backend is fully configured.

        Raises:
            ValueError: If the backend is unknown or Appwrite settings are missing
        """
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown STORE_BACKEND '{self.store_backend}'. "
                f"Expected one of: {', '.join(STORE_BACKENDS)}"
            )

        if self.store_backend == "appwrite":
            missing = [
                name for name, value in (
                    ("APPWRITE_ENDPOINT", self.appwrite_endpoint),
                    ("APPWRITE_PROJECT_ID", self.appwrite_project_id),
                    ("APPWRITE_DATABASE_ID", self.appwrite_database_id),
                )
                if not value
            ]
            if missing:
                raise ValueError(
                    f"Missing Appwrite configuration: {', '.join(missing)}"
                )


def load_settings() -> Settings:
    """Build Settings from the current environment (after loading .env)."""
    load_dotenv()

    return Settings(
        appwrite_endpoint=os.getenv("APPWRITE_ENDPOINT"),
        appwrite_project_id=os.getenv("APPWRITE_PROJECT_ID"),
        appwrite_api_key=os.getenv("APPWRITE_API_KEY"),
        appwrite_database_id=os.getenv("APPWRITE_DATABASE_ID"),
        doctors_collection_id=os.getenv("APPWRITE_DOCTORS_COLLECTION_ID", "doctors"),
        users_collection_id=os.getenv("APPWRITE_USERS_COLLECTION_ID", "users_data"),
        time_slots_collection_id=os.getenv("APPWRITE_TIME_SLOTS_COLLECTION_ID", "timeSlots"),
        store_backend=os.getenv("STORE_BACKEND", "appwrite").strip().lower(),
        http_timeout=int(os.getenv("HTTP_TIMEOUT", "15")),
        http_max_retries=int(os.getenv("HTTP_MAX_RETRIES", "3")),
        circuit_failure_threshold=int(os.getenv("CIRCUIT_FAILURE_THRESHOLD", "5")),
        circuit_timeout=int(os.getenv("CIRCUIT_TIMEOUT", "60")),
        fetch_batch_size=int(os.getenv("FETCH_BATCH_SIZE", "100")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        admin_auth_enabled=_env_bool("ADMIN_AUTH_ENABLED"),
        admin_database_url=os.getenv("ADMIN_DATABASE_URL", "sqlite:///admin_keys.db"),
        cors_origins=_env_list("CORS_ORIGINS", ["http://localhost:3000"]),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get process-wide settings (cached singleton)."""
    return load_settings()
