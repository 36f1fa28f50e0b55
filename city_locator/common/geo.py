"""Great-circle distance and coordinate reference system helpers."""

from __future__ import annotations

import math
from functools import lru_cache

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from city_locator.common.constants import EARTH_RADIUS_MILES
from city_locator.common.errors import ConfigError

WGS84_EPSG = 4326


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in statute miles between two points given in degrees.

    https://en.wikipedia.org/wiki/Haversine_formula
    """
    rlat1 = math.radians(lat1)
    rlat2 = math.radians(lat2)
    dlat = rlat2 - rlat1
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    # rounding can push a a hair past 1.0 for antipodal points
    return 2 * EARTH_RADIUS_MILES * math.asin(math.sqrt(min(a, 1.0)))


def valid_lat_lon(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


@lru_cache(maxsize=None)
def build_wgs84_transformer(source_epsg: int) -> Transformer | None:
    """Transformer into WGS84 for ``source_epsg``, or None when no transform is needed."""
    if source_epsg == WGS84_EPSG:
        return None
    try:
        return Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(WGS84_EPSG), always_xy=True)
    except (CRSError, ProjError) as exc:
        raise ConfigError(f"Unsupported source CRS: EPSG:{source_epsg}") from exc


def transform_to_wgs84(lat: float, lon: float, source_epsg: int) -> tuple[float, float]:
    transformer = build_wgs84_transformer(source_epsg)
    if transformer is None:
        return lat, lon
    transformed_lon, transformed_lat = transformer.transform(lon, lat)
    return transformed_lat, transformed_lon
