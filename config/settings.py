from __future__ import annotations

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv

from assistant.core.errors import ConfigurationError


load_dotenv()


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    # Expo dev server (iOS simulator)
    "http://localhost:19006",
    "http://127.0.0.1:19006",
    "http://localhost:19000",
    "http://127.0.0.1:19000",
    # Capacitor / Ionic shells
    "capacitor://localhost",
    "ionic://localhost",
    "http://localhost",
    "https://localhost",
]

# Private LAN ranges: 192.168.x.x, 10.x.x.x, 172.16-31.x.x (any port)
DEFAULT_CORS_ORIGIN_REGEX = (
    r"^http://("
    r"192\.168\.\d+\.\d+"
    r"|10\.\d+\.\d+\.\d+"
    r"|172\.(1[6-9]|2[0-9]|3[0-1])\.\d+\.\d+"
    r"):\d+$"
)


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.gemini_api_key: Optional[str] = os.getenv("GEMINI_API_KEY") or os.getenv(
            "GOOGLE_API_KEY"
        )
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("PORT", "8080"))
        self.request_timeout: Optional[float] = _optional_float(os.getenv("REQUEST_TIMEOUT"))
        self.cors_origins: List[str] = (
            _split_csv(os.getenv("CORS_ORIGINS")) or list(DEFAULT_CORS_ORIGINS)
        )
        self.cors_origin_regex: Optional[str] = os.getenv(
            "CORS_ORIGIN_REGEX", DEFAULT_CORS_ORIGIN_REGEX
        ) or None
        self.service_name: str = os.getenv("SERVICE_NAME", "Fetchr Pet Assistant API")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def require_api_key(self) -> str:
        if not self.gemini_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY not set. Please configure it in environment or .env"
            )
        return self.gemini_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
