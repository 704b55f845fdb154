"""
Configuration management for aggfetch.

Runtime settings come from environment variables (optionally a ``.env``
file); the list of symbols for a run comes from a YAML, TOML or JSON file.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Mapping

import toml
import yaml
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aggfetch.core.exceptions import ConfigError
from aggfetch.core.http_adapter import BASE_URL
from aggfetch.core.models import Granularity

DEFAULT_PAGE_LIMIT = 5_000
DEFAULT_CONCURRENCY_LIMIT = 10
DEFAULT_PAGE_DELAY_MS = 20

_ALLOWED_FILE_SUFFIXES = {".yaml", ".yml", ".toml", ".json"}


class AggFetchSettings(BaseSettings):
    """Runtime settings for a fetch run."""

    model_config = SettingsConfigDict(
        env_prefix="AGGFETCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    polygon_api_key: str | None = Field(
        None,
        validation_alias=AliasChoices("POLYGON_API_KEY", "AGGFETCH_POLYGON_API_KEY"),
        description="Bearer token for the aggregates API",
    )
    base_url: str = Field(BASE_URL, description="Base URL of the aggregates API")
    timeout: float = Field(30.0, description="Transport timeout in seconds")
    concurrency_limit: int = Field(
        DEFAULT_CONCURRENCY_LIMIT, gt=0, description="Symbols fetched at the same time"
    )
    page_delay_ms: int = Field(
        DEFAULT_PAGE_DELAY_MS, ge=0, description="Pause after each persisted page"
    )
    page_limit: int = Field(DEFAULT_PAGE_LIMIT, gt=0, description="Records requested per page")
    log_level: str = Field("INFO", description="Log level")


class RunConfig(BaseModel):
    """Everything one fetch run needs besides credentials."""

    symbols: list[str] = Field(default_factory=list)
    granularity: Granularity = Granularity.MINUTE
    output_root: Path
    range_start: datetime
    range_end: datetime
    page_limit: int = DEFAULT_PAGE_LIMIT


def load_symbols(path: str | Path) -> list[str]:
    """Load the ``tickers`` list from a YAML, TOML or JSON file."""

    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigError("Config file does not exist.", path=file_path)

    suffix = file_path.suffix.lower()
    if suffix not in _ALLOWED_FILE_SUFFIXES:
        raise ConfigError(
            "Unsupported config file type.",
            path=file_path,
            details={"suffix": suffix},
        )

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read file: {exc}", path=file_path) from exc

    config: Any
    try:
        if suffix in {".yaml", ".yml"}:
            config = yaml.safe_load(content)
        elif suffix == ".toml":
            config = toml.loads(content)
        else:
            config = json.loads(content)
    except (yaml.YAMLError, toml.TomlDecodeError, ValueError) as exc:
        raise ConfigError(f"Failed to parse {suffix[1:].upper()}: {exc}", path=file_path) from exc

    if not isinstance(config, Mapping):
        raise ConfigError("Config must be a mapping at the top level.", path=file_path)

    return symbols_from_mapping(config, path=file_path)


def symbols_from_mapping(config: Mapping[str, Any], path: str | Path | None = None) -> list[str]:
    """Extract a de-duplicated symbol list from ``tickers`` (or ``symbols``)."""

    raw = config.get("tickers", config.get("symbols"))
    if not isinstance(raw, list):
        raise ConfigError(
            "Config requires a 'tickers' list.",
            path=path,
            details={"provided_type": type(raw).__name__},
        )

    symbols: list[str] = []
    seen: set[str] = set()
    for index, value in enumerate(raw):
        if not isinstance(value, str):
            raise ConfigError(
                "Ticker entries must be strings.",
                path=path,
                details={"index": index},
            )
        symbol = value.strip()
        if symbol and symbol not in seen:
            seen.add(symbol)
            symbols.append(symbol)
    return symbols


def parse_date(value: str | date | datetime, name: str = "date") -> datetime:
    """Turn ``YYYY-MM-DD`` (or a date) into midnight UTC."""

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ConfigError(
                f"couldn't construct date from --{name} argument: {value!r}",
                details={"argument": name},
            ) from exc
    return datetime.combine(value, time(0, 0), tzinfo=timezone.utc)


def build_run_config(
    *,
    config_path: str | Path,
    granularity: Granularity | str,
    output_root: str | Path,
    start: str | date | datetime,
    end: str | date | datetime,
    page_limit: int = DEFAULT_PAGE_LIMIT,
) -> RunConfig:
    """Assemble a :class:`RunConfig` from command line values."""

    try:
        resolved = Granularity(granularity)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in Granularity)
        raise ConfigError(
            f"Unsupported granularity '{granularity}'. Allowed values: {allowed}",
            details={"granularity": str(granularity)},
        ) from exc

    return RunConfig(
        symbols=load_symbols(config_path),
        granularity=resolved,
        output_root=Path(output_root),
        range_start=parse_date(start, "from"),
        range_end=parse_date(end, "to"),
        page_limit=page_limit,
    )


__all__ = [
    "AggFetchSettings",
    "DEFAULT_CONCURRENCY_LIMIT",
    "DEFAULT_PAGE_DELAY_MS",
    "DEFAULT_PAGE_LIMIT",
    "RunConfig",
    "build_run_config",
    "load_symbols",
    "parse_date",
    "symbols_from_mapping",
]
