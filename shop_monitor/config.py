"""Configuration loader.

Reads environment variables and `.env` to configure the service.  Settings
are re-read by the orchestrator at the start of every cycle.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

_ENV_FILE = Path(__file__).resolve().parents[1] / ".env"

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; ShopMonitorBot/1.0)"


def _read_env(env_file: Optional[Path]) -> Dict[str, str]:
    """Values from `.env` overlaid with the real environment (which wins).

    The file is read fresh on every call, so edits apply on the next cycle.
    """
    env: Dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        env.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    env.update(os.environ)
    return env


def _get_env(env: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    return env.get(name, default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Product sitemap (or sitemap index) listing the pages to watch.
    sitemap_url: Optional[str]
    # Only sitemap URLs containing this substring are treated as products.
    product_path_filter: str = "/shop/"
    poll_interval_seconds: int = 300
    state_file_path: str = "products_state.json"
    alert_log_path: str = "alerts.log"
    # When unset, alerts are only written to the alert log.
    discord_webhook_url: Optional[str] = None
    # Upload images to Discord as attachments (avoids hotlink blocks).
    discord_attach_images: bool = False
    currency_symbol: str = "€"
    request_timeout: int = 20
    user_agent: str = DEFAULT_USER_AGENT
    # Seed an empty state without emitting any alert.
    silent_first_run: bool = False
    log_level: str = "INFO"


def load_settings(env_file: Optional[Path] = _ENV_FILE) -> Settings:
    """Build a Settings object from the environment (and `.env`, if present)."""
    env = _read_env(env_file)
    return Settings(
        sitemap_url=_get_env(env, "SITEMAP_URL"),
        product_path_filter=_get_env(env, "PRODUCT_PATH_FILTER", "/shop/") or "",
        poll_interval_seconds=_parse_int(_get_env(env, "POLL_INTERVAL_SECONDS"), 300),
        state_file_path=_get_env(env, "STATE_FILE_PATH", "products_state.json"),
        alert_log_path=_get_env(env, "ALERT_LOG_PATH", "alerts.log"),
        discord_webhook_url=_get_env(env, "DISCORD_WEBHOOK_URL") or None,
        discord_attach_images=_parse_bool(_get_env(env, "DISCORD_ATTACH_IMAGES"), False),
        currency_symbol=_get_env(env, "CURRENCY_SYMBOL", "€"),
        request_timeout=_parse_int(_get_env(env, "REQUEST_TIMEOUT"), 20),
        user_agent=_get_env(env, "USER_AGENT", DEFAULT_USER_AGENT),
        silent_first_run=_parse_bool(_get_env(env, "SILENT_FIRST_RUN"), False),
        log_level=_get_env(env, "LOG_LEVEL", "INFO"),
    )


# ---- Validation --------------------------------------------------------------

def validate(settings: Settings) -> None:
    """Validate required configuration parameters."""
    if not settings.sitemap_url:
        raise RuntimeError(
            "SITEMAP_URL must be set. See .env.example for details."
        )
    if settings.poll_interval_seconds <= 0:
        raise RuntimeError("POLL_INTERVAL_SECONDS must be a positive number of seconds.")


__all__ = ["Settings", "load_settings", "validate", "DEFAULT_USER_AGENT"]
