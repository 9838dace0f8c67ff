"""Client configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_BASE_URL = "http://127.0.0.1:3000"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_WORKERS = 4


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def redact_secret(secret: str | None) -> str:
    """Return a non-recoverable placeholder for sensitive values."""
    if not secret:
        return "<empty>"
    return "<redacted>"


@dataclass(frozen=True)
class ClientSettings:
    """Runtime settings for backend calls."""

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    credential_path: str | None = None

    def __post_init__(self) -> None:
        if not self.base_url.rstrip("/"):
            raise ValueError("base_url is required")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")

    def safe_for_logging(self) -> dict[str, str | int | float | None]:
        """Return client settings safe for logs."""
        return {
            "base_url": self.base_url,
            "timeout_seconds": self.timeout_seconds,
            "max_workers": self.max_workers,
            "credential_path": self.credential_path,
        }


@lru_cache(maxsize=1)
def get_client_settings() -> ClientSettings:
    """Load client settings from the environment."""
    return ClientSettings(
        base_url=os.getenv("USERNET_BASE_URL", DEFAULT_BASE_URL),
        timeout_seconds=_get_float_env("USERNET_HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS),
        max_workers=_get_int_env("USERNET_MAX_WORKERS", DEFAULT_MAX_WORKERS),
        credential_path=os.getenv("USERNET_CREDENTIAL_PATH") or None,
    )
