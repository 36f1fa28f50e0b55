"""Typed location records built from decoded dataset rows."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Mapping

from city_locator.common.constants import NUMERIC_POLICIES, TRUE_TOKEN
from city_locator.common.errors import InvalidNumericFieldError
from city_locator.common.geo import haversine_miles, valid_lat_lon


def parse_float(raw: str, *, field: str, record_id: str | None = None, numeric_policy: str = "strict") -> float:
    """Parse a numeric column.

    ``strict`` rejects anything that is not a finite number. ``nan`` keeps the
    permissive behaviour where unparsable or non-finite values become NaN.
    """
    if numeric_policy not in NUMERIC_POLICIES:
        raise ValueError(f"Unknown numeric policy: {numeric_policy}")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        if numeric_policy == "nan":
            return math.nan
        raise InvalidNumericFieldError(field, raw, record_id) from None
    if not math.isfinite(value):
        if numeric_policy == "nan":
            return math.nan
        raise InvalidNumericFieldError(field, raw, record_id)
    return value


def parse_flag(raw: str) -> bool:
    return raw == TRUE_TOKEN


def parse_zips(raw: str) -> frozenset[str]:
    return frozenset(token.strip() for token in raw.split(" ") if token.strip())


def _format_coordinate(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class Location:
    city: str
    city_ascii: str
    state_id: str
    state_name: str
    county_fips: str
    county_name: str
    lat: float
    lng: float
    population: float
    density: float
    source: str
    military: bool
    incorporated: bool
    timezone: str
    ranking: str
    zips: frozenset[str]
    id: str

    @classmethod
    def from_raw(cls, raw: Mapping[str, str], *, numeric_policy: str = "strict") -> "Location":
        def text(key: str) -> str:
            return (raw.get(key) or "").strip()

        record_id = text("id")

        def number(key: str) -> float:
            return parse_float(text(key), field=key, record_id=record_id, numeric_policy=numeric_policy)

        return cls(
            city=text("city"),
            city_ascii=text("city_ascii"),
            state_id=text("state_id"),
            state_name=text("state_name"),
            county_fips=text("county_fips"),
            county_name=text("county_name"),
            lat=number("lat"),
            lng=number("lng"),
            population=number("population"),
            density=number("density"),
            source=text("source"),
            military=parse_flag(text("military")),
            incorporated=parse_flag(text("incorporated")),
            timezone=text("timezone"),
            ranking=text("ranking"),
            zips=parse_zips(text("zips")),
            id=record_id,
        )

    def with_coordinates(self, lat: float, lng: float) -> "Location":
        return replace(self, lat=lat, lng=lng)

    def has_valid_coordinates(self) -> bool:
        return valid_lat_lon(self.lat, self.lng)

    def distance_from(self, other: "Location") -> float:
        return haversine_miles(self.lat, self.lng, other.lat, other.lng)

    def short_view(self) -> str:
        return f"{self.city} ({self.state_name}): {_format_coordinate(self.lat)}, {_format_coordinate(self.lng)}, {self.timezone}"
