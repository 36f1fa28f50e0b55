"""Minimal strict schema for YAML config validation."""

from __future__ import annotations

from city_locator.common.constants import DUPLICATE_ZIP_POLICIES, NUMERIC_POLICIES
from city_locator.common.errors import ConfigError

SECTION_KEYS = {
    "dataset": {"path", "separator", "encoding"},
    "parsing": {"numeric_policy", "duplicate_zip_policy"},
    "crs": {"source_epsg"},
    "http": {"connect_timeout", "read_timeout", "max_attempts"},
}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_choice(value, choices: tuple[str, ...], ctx: str) -> None:
    if value not in choices:
        raise ConfigError(f"{ctx} must be one of {', '.join(choices)}, got {value!r}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number, got {value!r}")


def validate_locator_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    if not isinstance(cfg, dict):
        raise ConfigError("locator config must be a mapping")
    _assert_required_keys(cfg, set(SECTION_KEYS), "locator config")
    _assert_no_unknown_keys(cfg, set(SECTION_KEYS), "locator config", allow_unknown)

    for section, keys in SECTION_KEYS.items():
        if not isinstance(cfg[section], dict):
            raise ConfigError(f"{section} must be a mapping")
        _assert_required_keys(cfg[section], keys, section)
        _assert_no_unknown_keys(cfg[section], keys, section, allow_unknown)

    separator = cfg["dataset"]["separator"]
    if not isinstance(separator, str) or len(separator) != 1:
        raise ConfigError(f"dataset.separator must be a single character, got {separator!r}")
    if not isinstance(cfg["dataset"]["path"], str) or not cfg["dataset"]["path"]:
        raise ConfigError("dataset.path must be a non-empty string")

    _assert_choice(cfg["parsing"]["numeric_policy"], NUMERIC_POLICIES, "parsing.numeric_policy")
    _assert_choice(cfg["parsing"]["duplicate_zip_policy"], DUPLICATE_ZIP_POLICIES, "parsing.duplicate_zip_policy")

    epsg = cfg["crs"]["source_epsg"]
    if isinstance(epsg, bool) or not isinstance(epsg, int):
        raise ConfigError(f"crs.source_epsg must be an integer EPSG code, got {epsg!r}")

    _assert_positive_number(cfg["http"]["connect_timeout"], "http.connect_timeout")
    _assert_positive_number(cfg["http"]["read_timeout"], "http.read_timeout")
    attempts = cfg["http"]["max_attempts"]
    if isinstance(attempts, bool) or not isinstance(attempts, int) or attempts < 1:
        raise ConfigError(f"http.max_attempts must be an integer >= 1, got {attempts!r}")

    return cfg
