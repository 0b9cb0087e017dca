"""Process settings loaded once at startup from the environment and an optional JSON file."""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional

from dotenv import load_dotenv

from screening.exceptions import ConfigurationError

load_dotenv()

LOGGER = logging.getLogger(__name__)

DEFAULT_SCREENER_URL = "https://api.trmlabs.com/public/v2/screening/addresses"

# setting name -> (environment variable, JSON config key)
_SOURCES: Dict[str, tuple] = {
    "database_url": ("DATABASE_URL", "db_url"),
    "screener_api_key": ("SCREENING_KEY", "screener_api_key"),
    "screener_url": ("SCREENING_API_URL", "screener_url"),
    "risk_score_limit": ("RISK_SCORE_LIMIT", "risk_score_limit"),
    "whitelisted_addresses": ("WHITELISTED_ADDRESSES", "whitelisted_addresses"),
    "request_batch_size": ("REQUEST_BATCH_SIZE", "request_batch_size"),
    "api_batch_size": ("SCREENING_API_BATCH_SIZE", "api_batch_size"),
    "clearance_ttl_seconds": ("CLEARANCE_CACHE_TTL_SECONDS", "clearance_ttl_seconds"),
    "clearance_max_entries": ("CLEARANCE_CACHE_MAX_ENTRIES", "clearance_max_entries"),
    "api_timeout_seconds": ("SCREENING_API_TIMEOUT", "api_timeout_seconds"),
    "api_max_workers": ("SCREENING_API_MAX_WORKERS", "api_max_workers"),
}

_REQUIRED = ("database_url", "screener_api_key")


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration."""

    database_url: str
    screener_api_key: str
    screener_url: str = DEFAULT_SCREENER_URL
    risk_score_limit: float = 10
    whitelisted_addresses: FrozenSet[str] = field(default_factory=frozenset)
    request_batch_size: int = 100
    api_batch_size: int = 5
    clearance_ttl_seconds: float = 7200
    clearance_max_entries: int = 1000
    api_timeout_seconds: float = 30
    api_max_workers: int = 1

    def __repr__(self) -> str:
        return (
            f"Settings(screener_url={self.screener_url!r}, risk_score_limit={self.risk_score_limit}, "
            f"whitelisted={len(self.whitelisted_addresses)}, request_batch_size={self.request_batch_size}, "
            f"api_batch_size={self.api_batch_size}, clearance_ttl_seconds={self.clearance_ttl_seconds})"
        )


def _read_config_file(path: str) -> Dict[str, Any]:
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file {config_path} is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a JSON object")
    return payload


def _positive_int(name: str, value: Any) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {number}")
    return number


def _number(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    return number


def _positive_float(name: str, value: Any) -> float:
    number = _number(name, value)
    if number <= 0:
        raise ConfigurationError(f"{name} must be positive, got {number}")
    return number


def _address_set(value: Any) -> FrozenSet[str]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        raise ConfigurationError("whitelisted_addresses must be a list or a comma separated string")
    return frozenset(str(item).strip() for item in items if str(item).strip())


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[str] = None,
) -> Settings:
    """Build settings from the environment, letting a JSON config file override it."""
    environ = os.environ if environ is None else environ
    config_file = config_file or environ.get("SCREENING_CONFIG_FILE")

    raw: Dict[str, Any] = {}
    for name, (env_key, _json_key) in _SOURCES.items():
        value = environ.get(env_key)
        if value not in (None, ""):
            raw[name] = value

    if config_file:
        file_values = _read_config_file(config_file)
        for name, (_env_key, json_key) in _SOURCES.items():
            if json_key in file_values and file_values[json_key] is not None:
                raw[name] = file_values[json_key]
        LOGGER.info("Loaded screening configuration file %s", config_file)

    missing = [_SOURCES[name][0] for name in _REQUIRED if not raw.get(name)]
    if missing:
        raise ConfigurationError(
            "Missing screening configuration. Please supply the following settings: "
            + ", ".join(missing)
        )

    values: Dict[str, Any] = {
        "database_url": str(raw["database_url"]),
        "screener_api_key": str(raw["screener_api_key"]),
    }
    if "screener_url" in raw:
        values["screener_url"] = str(raw["screener_url"])
    if "risk_score_limit" in raw:
        values["risk_score_limit"] = _number("risk_score_limit", raw["risk_score_limit"])
    if "whitelisted_addresses" in raw:
        values["whitelisted_addresses"] = _address_set(raw["whitelisted_addresses"])
    for name in ("request_batch_size", "api_batch_size", "clearance_max_entries", "api_max_workers"):
        if name in raw:
            values[name] = _positive_int(name, raw[name])
    for name in ("clearance_ttl_seconds", "api_timeout_seconds"):
        if name in raw:
            values[name] = _positive_float(name, raw[name])

    return Settings(**values)


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _SETTINGS

    if _SETTINGS is None:
        try:
            _SETTINGS = load_settings()
        except ConfigurationError as exc:
            LOGGER.error("Invalid screening configuration: %s", exc)
            raise
        LOGGER.info("Screening configuration loaded: %r", _SETTINGS)

    return _SETTINGS


__all__ = ["Settings", "load_settings", "get_settings", "DEFAULT_SCREENER_URL"]
