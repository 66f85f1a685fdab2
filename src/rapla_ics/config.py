"""Environment based settings for the proxy and the command line tool."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .cache import DEFAULT_TTL_SECONDS
from .parser import DetailFormat
from .rapla_ics import DEFAULT_BASE_URL

load_dotenv()


@dataclass
class Settings:
    base_url: str = DEFAULT_BASE_URL
    weeks_back: int = 52
    pages: int = 104
    detail_format: DetailFormat = DetailFormat.ANCHOR
    cache_enabled: bool = True
    cache_ttl: int = DEFAULT_TTL_SECONDS
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.warning("Invalid %s %r, falling back to %d", name, raw, default)
        return default
    if value < 0:
        logging.warning("Negative %s %r, falling back to %d", name, raw, default)
        return default
    return value


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_detail_format(default: DetailFormat) -> DetailFormat:
    raw = os.getenv("RAPLA_DETAIL_FORMAT")
    if not raw:
        return default
    try:
        return DetailFormat(raw.strip().lower())
    except ValueError:
        logging.warning("Invalid RAPLA_DETAIL_FORMAT %r, falling back to %s", raw, default.value)
        return default


def get_settings() -> Settings:
    defaults = Settings()
    return Settings(
        base_url=os.getenv("RAPLA_BASE_URL", defaults.base_url),
        weeks_back=_get_int("RAPLA_WEEKS_BACK", defaults.weeks_back),
        pages=_get_int("RAPLA_PAGES", defaults.pages),
        detail_format=_get_detail_format(defaults.detail_format),
        cache_enabled=_get_bool("RAPLA_CACHE_ENABLED", defaults.cache_enabled),
        cache_ttl=_get_int("RAPLA_CACHE_TTL", defaults.cache_ttl),
        host=os.getenv("RAPLA_HOST", defaults.host),
        port=_get_int("RAPLA_PORT", defaults.port),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
