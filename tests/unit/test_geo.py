import math

import pytest

from city_locator.common.errors import ConfigError
from city_locator.common.geo import (
    build_wgs84_transformer,
    haversine_miles,
    transform_to_wgs84,
    valid_lat_lon,
)


def test_haversine_zero_for_identical_points():
    assert haversine_miles(40.7128, -74.006, 40.7128, -74.006) == 0


def test_haversine_is_symmetric():
    a = haversine_miles(40.7128, -74.006, 34.0522, -118.2437)
    b = haversine_miles(34.0522, -118.2437, 40.7128, -74.006)
    assert a == pytest.approx(b, rel=1e-9)


def test_haversine_new_york_to_los_angeles():
    assert haversine_miles(40.7128, -74.006, 34.0522, -118.2437) == pytest.approx(2445.6, abs=1.0)


def test_haversine_one_degree_of_latitude():
    expected = 3958.8 * math.pi / 180
    assert haversine_miles(40.0, -75.0, 41.0, -75.0) == pytest.approx(expected, rel=1e-9)


def test_haversine_antipodal_points_are_finite():
    distance = haversine_miles(0.0, 0.0, 0.0, 180.0)
    assert distance == pytest.approx(math.pi * 3958.8, rel=1e-9)


def test_valid_lat_lon_bounds():
    assert valid_lat_lon(90, 180)
    assert not valid_lat_lon(90.1, 0)
    assert not valid_lat_lon(0, -180.5)
    assert not valid_lat_lon(None, 0)
    assert not valid_lat_lon(math.nan, 0)


def test_transform_is_identity_for_wgs84():
    assert build_wgs84_transformer(4326) is None
    assert transform_to_wgs84(40.0, -75.0, 4326) == (40.0, -75.0)


def test_transform_from_web_mercator():
    from pyproj import Transformer

    x, y = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True).transform(-75.0, 40.0)

    lat, lon = transform_to_wgs84(y, x, 3857)

    assert lat == pytest.approx(40.0, abs=1e-6)
    assert lon == pytest.approx(-75.0, abs=1e-6)


def test_unknown_epsg_raises_config_error():
    with pytest.raises(ConfigError):
        build_wgs84_transformer(999999)
