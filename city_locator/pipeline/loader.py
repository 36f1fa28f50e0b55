"""Dataset loading: raw lines in, populated location catalog out."""

from __future__ import annotations

import logging
import math
import time
from pathlib import Path

from city_locator.common.config_loader import LocatorConfig
from city_locator.common.constants import LOCATION_FIELDS, NUMERIC_FIELDS
from city_locator.common.errors import DatasetError, MalformedInputError
from city_locator.common.fs import read_lines
from city_locator.common.geo import WGS84_EPSG, build_wgs84_transformer, transform_to_wgs84
from city_locator.common.http import HttpClient, RetryConfig, TimeoutConfig
from city_locator.common.logging import log_event
from city_locator.common.time_utils import elapsed_ms
from city_locator.pipeline.catalog import LocationCatalog
from city_locator.pipeline.decode import RawRecord, decode_header, decode_rows
from city_locator.pipeline.location import Location


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_dataset_lines(source: str, config: LocatorConfig) -> list[str]:
    if is_remote(source):
        client = HttpClient(
            timeout=TimeoutConfig(connect=config.connect_timeout, read=config.read_timeout),
            retry=RetryConfig(max_attempts=config.max_attempts),
        )
        with client:
            text = client.get_text(source, encoding=config.encoding)
        return text.lstrip("\ufeff").splitlines()

    path = Path(source)
    try:
        return read_lines(path, encoding=config.encoding)
    except FileNotFoundError as exc:
        raise DatasetError(f"Dataset not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DatasetError(f"Cannot read dataset {path}: {exc}") from exc


def _check_header(header: list[str]) -> None:
    missing = [field for field in LOCATION_FIELDS if field not in header]
    if missing:
        raise MalformedInputError(f"Dataset header is missing columns: {', '.join(missing)}")


def build_locations(
    rows: list[RawRecord],
    config: LocatorConfig,
    logger: logging.Logger,
) -> list[Location]:
    # fail on an unsupported CRS before any row is parsed
    build_wgs84_transformer(config.source_epsg)
    locations: list[Location] = []
    for row in rows:
        location = Location.from_raw(row, numeric_policy=config.numeric_policy)
        bad = [name for name in NUMERIC_FIELDS if math.isnan(getattr(location, name))]
        if bad:
            log_event(
                logger,
                f"location {location.id} has unparsable numeric fields: {', '.join(bad)}",
                level=logging.WARNING,
                stage="load",
                event="INVALID_NUMERIC_FIELD",
                status="warning",
            )
        if "lat" in bad or "lng" in bad:
            locations.append(location)
            continue
        if config.source_epsg != WGS84_EPSG:
            location = location.with_coordinates(*transform_to_wgs84(location.lat, location.lng, config.source_epsg))
        if not location.has_valid_coordinates():
            log_event(
                logger,
                f"location {location.id} has out of range coordinates: {location.lat}, {location.lng}",
                level=logging.WARNING,
                stage="load",
                event="COORDINATE_OUT_OF_RANGE",
                status="warning",
            )
        locations.append(location)
    return locations


def load_catalog(source: str, config: LocatorConfig, logger: logging.Logger) -> LocationCatalog:
    started_at = time.monotonic()
    log_event(logger, f"loading dataset from {source}", stage="load", event="DATASET_LOAD_START", status="ok")

    lines = read_dataset_lines(source, config)
    _check_header(decode_header(lines, config.separator))
    rows = decode_rows(lines, config.separator)
    locations = build_locations(rows, config, logger)
    catalog = LocationCatalog(locations, duplicate_zip_policy=config.duplicate_zip_policy, logger=logger)

    log_event(
        logger,
        "dataset loaded",
        stage="load",
        event="DATASET_LOAD_END",
        status="ok",
        rows_in=len(rows),
        rows_out=len(catalog),
        duration_ms=elapsed_ms(started_at),
    )
    return catalog
