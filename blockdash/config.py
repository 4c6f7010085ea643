"""Environment-driven settings for the block dashboard.

Values are read once per process from the environment (and a `.env` file
when present).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

ALCHEMY_NETWORKS = {
    "mainnet": "eth-mainnet",
    "sepolia": "eth-sepolia",
    "holesky": "eth-holesky",
}
ALCHEMY_URL_TEMPLATE = "https://{host}.g.alchemy.com/v2/{api_key}"

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    alchemy_api_key: str = ""
    network: str = "mainnet"
    provider_url: str = ""
    refresh_interval_seconds: float = 15.0
    ui_refresh_seconds: float = 2.0
    request_timeout_seconds: float = 10.0
    display_timezone: str = "CET"
    show_stale_on_error: bool = True
    log_level: str = "INFO"

    @property
    def rpc_url(self) -> str | None:
        """JSON-RPC endpoint, or None when no credentials are configured."""
        if self.provider_url:
            return self.provider_url
        if not self.alchemy_api_key:
            return None
        return ALCHEMY_URL_TEMPLATE.format(host=ALCHEMY_NETWORKS[self.network], api_key=self.alchemy_api_key)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.display_timezone)


def _float(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    if environ is None:
        load_dotenv()
        environ = os.environ
    settings = Settings(
        alchemy_api_key=environ.get("ALCHEMY_API_KEY", "").strip(),
        network=environ.get("ETH_NETWORK", "mainnet").strip().lower(),
        provider_url=environ.get("PROVIDER_URL", "").strip(),
        refresh_interval_seconds=_float(environ, "REFRESH_INTERVAL_SECONDS", "15"),
        ui_refresh_seconds=_float(environ, "UI_REFRESH_SECONDS", "2"),
        request_timeout_seconds=_float(environ, "REQUEST_TIMEOUT_SECONDS", "10"),
        display_timezone=environ.get("DISPLAY_TIMEZONE", "CET").strip(),
        show_stale_on_error=environ.get("SHOW_STALE_ON_ERROR", "true").strip().lower() in _TRUE_VALUES,
        log_level=environ.get("LOG_LEVEL", "INFO").strip().upper(),
    )
    validate_settings(settings)
    return settings


def validate_settings(settings: Settings) -> None:
    if settings.network not in ALCHEMY_NETWORKS:
        raise ConfigError(f"ETH_NETWORK must be one of {sorted(ALCHEMY_NETWORKS)}, got {settings.network!r}")
    if settings.refresh_interval_seconds <= 0:
        raise ConfigError("REFRESH_INTERVAL_SECONDS must be > 0")
    if settings.ui_refresh_seconds <= 0:
        raise ConfigError("UI_REFRESH_SECONDS must be > 0")
    if settings.request_timeout_seconds <= 0:
        raise ConfigError("REQUEST_TIMEOUT_SECONDS must be > 0")
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ConfigError(f"LOG_LEVEL {settings.log_level!r} is not a logging level")
    try:
        ZoneInfo(settings.display_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"DISPLAY_TIMEZONE {settings.display_timezone!r} is not a known zone") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
