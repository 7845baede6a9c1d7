"""Runtime settings read from the environment (and a local ``.env``)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from a11y_scanner.core.logger import get_logger

load_dotenv()

logger = get_logger(__name__)

DEFAULT_PORT = 3000
DEFAULT_NAV_TIMEOUT_MS = 45_000
DEFAULT_FOCUS_MAX_STEPS = 300
DEFAULT_MAX_CONCURRENT_SCANS = 4
DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"
DEFAULT_OPENAPI_PATH = Path(__file__).resolve().parent.parent / "openapi.json"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    json_logs: bool = True
    nav_timeout_ms: int = DEFAULT_NAV_TIMEOUT_MS
    focus_max_steps: int = DEFAULT_FOCUS_MAX_STEPS
    max_concurrent_scans: int = DEFAULT_MAX_CONCURRENT_SCANS
    axe_script_url: str = DEFAULT_AXE_SCRIPT_URL
    axe_script_path: Optional[str] = None
    openapi_path: Path = DEFAULT_OPENAPI_PATH
    expose_stack: bool = False


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("invalid integer setting, using default", setting=name, value=raw, default=default)
        return default
    return max(value, 1)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def load_settings() -> Settings:
    """Build a Settings instance from the current environment."""
    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", DEFAULT_PORT),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        json_logs=_env_bool("JSON_LOGS", True),
        nav_timeout_ms=_env_int("A11Y_NAV_TIMEOUT_MS", DEFAULT_NAV_TIMEOUT_MS),
        focus_max_steps=_env_int("A11Y_FOCUS_MAX_STEPS", DEFAULT_FOCUS_MAX_STEPS),
        max_concurrent_scans=_env_int("A11Y_MAX_CONCURRENT_SCANS", DEFAULT_MAX_CONCURRENT_SCANS),
        axe_script_url=os.getenv("A11Y_AXE_SCRIPT_URL") or DEFAULT_AXE_SCRIPT_URL,
        axe_script_path=os.getenv("A11Y_AXE_SCRIPT_PATH") or None,
        openapi_path=Path(os.getenv("A11Y_OPENAPI_PATH") or DEFAULT_OPENAPI_PATH),
        expose_stack=_env_bool("A11Y_EXPOSE_STACK", False),
    )
