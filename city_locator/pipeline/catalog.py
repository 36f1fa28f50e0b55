"""In-memory location catalog with postal-code index and nearest-city queries."""

from __future__ import annotations

import logging
import math
from typing import Iterable, Iterator

from city_locator.common.constants import DUPLICATE_ZIP_POLICIES
from city_locator.common.errors import MalformedInputError, NotFoundError
from city_locator.common.geo import haversine_miles
from city_locator.common.logging import log_event
from city_locator.pipeline.location import Location


class LocationCatalog:
    """Read-only collection of locations.

    Nearest neighbours are found by an exhaustive scan and memoised per record
    id in ``_nearest``; locations themselves are never mutated.
    """

    def __init__(
        self,
        locations: Iterable[Location],
        *,
        duplicate_zip_policy: str = "warn",
        logger: logging.Logger | None = None,
    ) -> None:
        if duplicate_zip_policy not in DUPLICATE_ZIP_POLICIES:
            raise ValueError(f"Unknown duplicate zip policy: {duplicate_zip_policy}")
        self.logger = logger or logging.getLogger("city_locator")
        self.locations: list[Location] = list(locations)
        self.distance_computations = 0
        self._by_id: dict[str, Location] = {}
        self._by_zip: dict[str, Location] = {}
        self._nearest: dict[str, tuple[str, float]] = {}

        for location in self.locations:
            if location.id in self._by_id:
                raise MalformedInputError(f"Duplicate location id: {location.id!r}")
            self._by_id[location.id] = location
            for code in sorted(location.zips):
                previous = self._by_zip.get(code)
                if previous is not None:
                    self._on_duplicate_zip(code, previous, location, duplicate_zip_policy)
                self._by_zip[code] = location

    def _on_duplicate_zip(self, code: str, previous: Location, current: Location, policy: str) -> None:
        if policy == "error":
            raise MalformedInputError(
                f"Postal code {code} claimed by locations {previous.id!r} and {current.id!r}"
            )
        if policy == "warn":
            log_event(
                self.logger,
                f"postal code {code} moved from location {previous.id} to {current.id}",
                level=logging.WARNING,
                stage="catalog",
                event="DUPLICATE_ZIP",
                status="warning",
                zip=code,
            )

    def __len__(self) -> int:
        return len(self.locations)

    def __iter__(self) -> Iterator[Location]:
        return iter(self.locations)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip() in self._by_zip

    def lookup_by_postal_code(self, code: str) -> Location:
        location = self._by_zip.get(code.strip())
        if location is None:
            raise NotFoundError(f"Zip code {code} not found.")
        return location

    def nearest_to(self, code: str) -> Location:
        return self.nearest_with_distance(code)[0]

    def nearest_with_distance(self, code: str) -> tuple[Location, float]:
        current = self.lookup_by_postal_code(code)
        cached = self._nearest.get(current.id)
        if cached is not None:
            cached_id, cached_distance = cached
            return self._by_id[cached_id], cached_distance

        closest: Location | None = None
        best = float("inf")
        for candidate in self.locations:
            if candidate.id == current.id:
                continue
            distance = haversine_miles(current.lat, current.lng, candidate.lat, candidate.lng)
            self.distance_computations += 1
            if not math.isfinite(distance):
                continue
            # strict comparison keeps the first candidate seen on ties
            if closest is None or distance < best:
                closest = candidate
                best = distance

        if closest is None:
            raise NotFoundError(f"No other location with usable coordinates near {current.city} ({current.id})")
        self._nearest[current.id] = (closest.id, best)
        return closest, best
