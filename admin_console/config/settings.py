"""Admin console configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised console settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    api_url: str = "http://localhost:5000"
    api_base_path: str = "/api"
    api_token: str = ""
    request_timeout: float = 30.0

    default_page_size: int = 10
    max_page_size: int = 100

    @property
    def api_root(self) -> str:
        """Base URL every endpoint path is resolved against."""

        return self.api_url.rstrip("/") + "/" + self.api_base_path.strip("/")


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        api_url=os.getenv("ADMIN_API_URL", "http://localhost:5000"),
        api_base_path=os.getenv("ADMIN_API_BASE_PATH", "/api"),
        api_token=os.getenv("ADMIN_API_TOKEN", ""),
        request_timeout=float(os.getenv("ADMIN_API_TIMEOUT", "30")),
        default_page_size=int(os.getenv("ADMIN_DEFAULT_PAGE_SIZE", "10")),
        max_page_size=int(os.getenv("ADMIN_MAX_PAGE_SIZE", "100")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
