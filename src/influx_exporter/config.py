"""Configuration loading and validation for influx_exporter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class InfluxConfig:
    """InfluxDB connection settings as they are persisted."""

    host: str = "localhost"
    port: int = 8086
    user: str | None = None
    password: str | None = None
    database: str = "solarreader"
    ssl: bool = False
    read_timeout_ms: int = 5000


@dataclass
class CollectorConfig:
    """System resource collector settings."""

    enabled: bool = True
    interval_seconds: float = 10.0
    cpu: bool = True
    memory: bool = True


@dataclass
class ExporterAppConfig:
    """Top-level influx_exporter configuration."""

    name: str = "influx"
    influx: InfluxConfig = field(default_factory=InfluxConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using INFLUX_EXPORTER_ prefix."""
    env_map = {
        "INFLUX_EXPORTER_NAME": (("name",), str),
        "INFLUX_EXPORTER_HOST": (("influx", "host"), str),
        "INFLUX_EXPORTER_PORT": (("influx", "port"), int),
        "INFLUX_EXPORTER_USER": (("influx", "user"), str),
        "INFLUX_EXPORTER_PASSWORD": (("influx", "password"), str),
        "INFLUX_EXPORTER_DATABASE": (("influx", "database"), str),
        "INFLUX_EXPORTER_SSL": (("influx", "ssl"), _to_bool),
        "INFLUX_EXPORTER_READ_TIMEOUT_MS": (("influx", "read_timeout_ms"), int),
        "INFLUX_EXPORTER_COLLECTOR_INTERVAL": (("collector", "interval_seconds"), float),
    }
    for env_key, (path, convert) in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            obj[path[-1]] = convert(value)
    return data


def _dict_to_config(data: dict[str, Any]) -> ExporterAppConfig:
    """Convert a raw dictionary to an ExporterAppConfig dataclass."""
    influx_data = data.get("influx") or {}
    collector_data = data.get("collector") or {}

    return ExporterAppConfig(
        name=data.get("name", "influx"),
        influx=InfluxConfig(**{
            k: v for k, v in influx_data.items()
            if k in InfluxConfig.__dataclass_fields__
        }),
        collector=CollectorConfig(**{
            k: v for k, v in collector_data.items()
            if k in CollectorConfig.__dataclass_fields__
        }),
    )


def load_config(path: str | Path | None = None) -> ExporterAppConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``influx_exporter.yaml`` in the current directory if *path* is None.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("influx_exporter.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
