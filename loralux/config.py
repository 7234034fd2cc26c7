"""Pydantic Settings: loads daemon configuration from the environment or a file."""

from __future__ import annotations

import json
import math
import re
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from loralux.scrape.models import ScrapeTarget

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SERVER_ADDRESS = "http://localhost:8080"
DEFAULT_SCRAPE_ENDPOINT = "/scrape"
DEFAULT_SCRAPE_INTERVAL = timedelta(seconds=5)
DEFAULT_READ_TIMEOUT = timedelta(seconds=10)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# zap levels: dpanic, panic and fatal (3..5) all map to CRITICAL
ZAP_MIN_LEVEL = -1
ZAP_MAX_LEVEL = 5
_ZAP_LEVELS = {-1: "DEBUG", 0: "INFO", 1: "WARNING", 2: "ERROR"}

# camelCase keys accepted in JSON/YAML config files
_FILE_KEYS = {
    "logLevel": "log_level",
    "serverAddress": "server_address",
    "scrapeEndpoint": "scrape_endpoint",
    "scrapeInterval": "scrape_interval",
    "readTimeout": "read_timeout",
}

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class ConfigError(Exception):
    """Raised when configuration cannot be collected or does not validate."""


def parse_duration(value: Any) -> timedelta:
    """Parse ``"5s"``, ``"1m30s"``, ``"250ms"`` or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            raise ValueError(f"invalid duration {value!r}")
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration {value!r}")

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValueError(f"invalid duration {value!r}")
        return timedelta(seconds=seconds)

    seconds = 0.0
    pos = 0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=seconds)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LORALUX_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = DEFAULT_LOG_LEVEL
    server_address: str = DEFAULT_SERVER_ADDRESS
    scrape_endpoint: str = DEFAULT_SCRAPE_ENDPOINT
    scrape_interval: timedelta = DEFAULT_SCRAPE_INTERVAL
    read_timeout: timedelta = DEFAULT_READ_TIMEOUT

    @field_validator("log_level", mode="before")
    @classmethod
    def _zap_log_level(cls, value: Any) -> Any:
        """Accept the numeric zap levels used by older config files (-1 debug .. 5 fatal)."""
        if isinstance(value, str) and value.strip().lstrip("-").isdigit():
            value = int(value)
        if isinstance(value, int) and not isinstance(value, bool):
            if not ZAP_MIN_LEVEL <= value <= ZAP_MAX_LEVEL:
                raise ValueError(f"log level must be [{ZAP_MIN_LEVEL}, {ZAP_MAX_LEVEL}]")
            return _ZAP_LEVELS.get(value, "CRITICAL")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("server_address")
    @classmethod
    def _check_server_address(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("server address must be a valid absolute URI")
        return value

    @field_validator("scrape_endpoint")
    @classmethod
    def _check_scrape_endpoint(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("scrape endpoint must be supplied and start with a /")
        return value

    @field_validator("scrape_interval", "read_timeout", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> timedelta:
        return parse_duration(value)

    @field_validator("scrape_interval", "read_timeout")
    @classmethod
    def _check_positive(cls, value: timedelta, info: ValidationInfo) -> timedelta:
        if value <= timedelta(0):
            raise ValueError(f"{info.field_name.replace('_', ' ')} must be > 0ms")
        return value

    @classmethod
    def from_file(cls, path: str | Path) -> Settings:
        """Load settings from a JSON or YAML file; absent keys keep their defaults.

        The environment is not consulted.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"open config file: {exc}") from exc

        suffix = path.suffix.lower()
        try:
            if suffix == ".json":
                raw = json.loads(text)
            elif suffix in (".yaml", ".yml"):
                raw = yaml.safe_load(text)
            else:
                raise ConfigError(f"unsupported config file extension {suffix!r}")
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigError(f"decode {suffix.lstrip('.')} file: {exc}") from exc

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError("config file must contain a mapping at the top level")

        data: dict[str, Any] = {}
        for key, value in raw.items():
            name = _FILE_KEYS.get(key, key)
            if name in data:
                raise ConfigError(f"config file sets {name!r} more than once")
            data[name] = value
        try:
            return _FileSettings(**data)
        except ValidationError as exc:
            raise ConfigError(f"validate configuration: {exc}") from exc

    def scrape_target(self) -> ScrapeTarget:
        return ScrapeTarget.from_address(
            self.server_address,
            self.scrape_endpoint,
            self.read_timeout.total_seconds(),
        )


class _FileSettings(Settings):
    """Settings built from init kwargs alone, without env vars or .env."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"validate configuration: {exc}") from exc


def load_settings(env_file: str | None = None) -> Settings:
    """Collect settings from *env_file* when given, otherwise from the environment."""
    if env_file:
        return Settings.from_file(env_file)
    return get_settings()
