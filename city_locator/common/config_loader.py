"""Configuration loading and validation."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from city_locator.common.errors import ConfigError
from city_locator.common.fs import read_yaml
from city_locator.common.schema import validate_locator_config

CONFIG_FILENAME = "locator.yml"

DEFAULT_CONFIG: dict[str, Any] = {
    "dataset": {"path": "data/uscities.csv", "separator": ",", "encoding": "utf-8"},
    "parsing": {"numeric_policy": "strict", "duplicate_zip_policy": "warn"},
    "crs": {"source_epsg": 4326},
    "http": {"connect_timeout": 20, "read_timeout": 120, "max_attempts": 5},
}


@dataclass(frozen=True)
class LocatorConfig:
    dataset_path: str
    separator: str
    encoding: str
    numeric_policy: str
    duplicate_zip_policy: str
    source_epsg: int
    connect_timeout: float
    read_timeout: float
    max_attempts: int

    @classmethod
    def from_dict(cls, cfg: dict) -> "LocatorConfig":
        return cls(
            dataset_path=cfg["dataset"]["path"],
            separator=cfg["dataset"]["separator"],
            encoding=cfg["dataset"]["encoding"],
            numeric_policy=cfg["parsing"]["numeric_policy"],
            duplicate_zip_policy=cfg["parsing"]["duplicate_zip_policy"],
            source_epsg=cfg["crs"]["source_epsg"],
            connect_timeout=float(cfg["http"]["connect_timeout"]),
            read_timeout=float(cfg["http"]["read_timeout"]),
            max_attempts=cfg["http"]["max_attempts"],
        )


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_mapping(path: Path) -> dict:
    try:
        payload = read_yaml(path)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return payload


def load_config(
    config_path: Path | None = None,
    *,
    overlay_path: Path | None = None,
    allow_unknown: bool = False,
) -> LocatorConfig:
    """Build the effective config: defaults, then the config file, then the overlay."""
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is not None and config_path.exists():
        cfg = _deep_merge(cfg, _read_mapping(config_path))
    if overlay_path is not None:
        if not overlay_path.exists():
            raise ConfigError(f"Overlay config not found: {overlay_path}")
        cfg = _deep_merge(cfg, _read_mapping(overlay_path))
    return LocatorConfig.from_dict(validate_locator_config(cfg, allow_unknown=allow_unknown))


def load_config_from_dir(config_dir: Path, *, overlay_path: Path | None = None) -> LocatorConfig:
    return load_config(config_dir / CONFIG_FILENAME, overlay_path=overlay_path)
