"""Settings loader for the closet client."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate environment variables from a .env file if present."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(slots=True, frozen=True)
class ClosetSettings:
    """Settings required by the wardrobe store and the classification call."""

    aitunnel_api_key: str = ""
    aitunnel_base_url: str = "https://api.aitunnel.ru/v1"
    vision_model: str = "gemini-2.5-flash"
    storage_root: str = "storage"
    storage_key: str = "chicpick_dresses"
    request_timeout: float = 30.0
    image_max_side: int = 800
    image_quality: int = 70
    log_level: str = "INFO"
    log_file: str = ""


def _build_settings() -> ClosetSettings:
    _load_env_file()
    return ClosetSettings(
        aitunnel_api_key=os.getenv("AITUNNEL_API_KEY", ""),
        aitunnel_base_url=os.getenv("AITUNNEL_BASE_URL", "https://api.aitunnel.ru/v1"),
        vision_model=os.getenv("CHICPICK_VISION_MODEL", "gemini-2.5-flash"),
        storage_root=os.getenv("CHICPICK_STORAGE_ROOT", "storage"),
        storage_key=os.getenv("CHICPICK_STORAGE_KEY", "chicpick_dresses"),
        request_timeout=float(os.getenv("CHICPICK_REQUEST_TIMEOUT", "30")),
        image_max_side=int(os.getenv("CHICPICK_IMAGE_MAX_SIDE", "800")),
        image_quality=int(os.getenv("CHICPICK_IMAGE_QUALITY", "70")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("CHICPICK_LOG_FILE", ""),
    )


@lru_cache(maxsize=1)
def get_settings() -> ClosetSettings:
    """Return cached settings instance."""

    return _build_settings()
