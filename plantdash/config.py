"""Application configuration objects."""

import os
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Config:
    """Base configuration for the plant production API."""

    TESTING = False

    # -------------------------
    # Data source
    # -------------------------
    # Serve synthetic data instead of proxying to LabVIEW
    USE_MOCK_DATA = _env_flag("USE_MOCK_DATA", "true")

    # -------------------------
    # External services
    # -------------------------
    LABVIEW_API_URL = os.getenv("LABVIEW_API_URL", "http://localhost:8080")
    # Milliseconds
    LABVIEW_API_TIMEOUT = int(os.getenv("LABVIEW_API_TIMEOUT", "5000"))
    LABVIEW_EXPORT_TIMEOUT = int(os.getenv("LABVIEW_EXPORT_TIMEOUT", "30000"))

    # -------------------------
    # Security
    # -------------------------
    ALLOWED_API_KEYS = _env_list("ALLOWED_API_KEYS")
    # Test-only escape hatch
    AUTH_DISABLED = _env_flag("AUTH_DISABLED")
    CORS_ORIGIN = _env_list("CORS_ORIGIN", "http://localhost:5173")

    # -------------------------
    # Runtime
    # -------------------------
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    PORT = int(os.getenv("PORT", "5000"))
    POLLING_INTERVAL = int(os.getenv("POLLING_INTERVAL", "5000"))

    # -------------------------
    # Mock catalogue
    # -------------------------
    DEFAULT_FILTERS: Dict[str, str] = {
        "plant": "pune",
        "line": "fcpv",
        "station": "all",
        "shift": "all",
        "dateRange": "today",
    }


class TestingConfig(Config):
    TESTING = True
    USE_MOCK_DATA = True
    AUTH_DISABLED = False
    ALLOWED_API_KEYS = ["test-key"]


__all__ = ["Config", "TestingConfig"]
