import logging
import math
from dataclasses import replace
from pathlib import Path

import pytest

from city_locator.common.config_loader import DEFAULT_CONFIG, LocatorConfig
from city_locator.common.errors import DatasetError, InvalidNumericFieldError, MalformedInputError
from city_locator.pipeline import loader
from city_locator.pipeline.loader import is_remote, load_catalog, read_dataset_lines

HEADER = (
    '"city","city_ascii","state_id","state_name","county_fips","county_name","lat","lng",'
    '"population","density","source","military","incorporated","timezone","ranking","zips","id"'
)


def _row(id_: str, city: str, lat: str, lng: str, zips: str, population: str = "1000") -> str:
    return (
        f'"{city}","{city}","PA","Pennsylvania","42101","Philadelphia","{lat}","{lng}",'
        f'"{population}","100","polygon","FALSE","TRUE","America/New_York","2","{zips}","{id_}"'
    )


def _config(**overrides) -> LocatorConfig:
    return replace(LocatorConfig.from_dict(DEFAULT_CONFIG), **overrides)


def _write(tmp_path: Path, lines: list[str], encoding: str = "utf-8") -> Path:
    path = tmp_path / "uscities.csv"
    path.write_text("\n".join(lines) + "\n", encoding=encoding)
    return path


@pytest.fixture
def logger():
    return logging.getLogger("test_loader")


def test_load_catalog_from_file(tmp_path: Path, logger):
    path = _write(
        tmp_path,
        [HEADER, _row("1", "X", "40.0", "-75.0", "10001"), _row("2", "Y", "40.1", "-75.0", "10002 10004")],
    )

    catalog = load_catalog(str(path), _config(), logger)

    assert len(catalog) == 2
    assert catalog.lookup_by_postal_code("10004").city == "Y"
    assert catalog.lookup_by_postal_code("10001").incorporated is True


def test_load_catalog_strips_byte_order_mark(tmp_path: Path, logger):
    path = _write(tmp_path, [HEADER, _row("1", "X", "40.0", "-75.0", "10001")], encoding="utf-8-sig")
    catalog = load_catalog(str(path), _config(), logger)
    assert catalog.lookup_by_postal_code("10001").id == "1"


def test_load_catalog_logs_start_and_end(tmp_path: Path, logger, caplog):
    path = _write(tmp_path, [HEADER, _row("1", "X", "40.0", "-75.0", "10001")])

    with caplog.at_level(logging.INFO, logger="test_loader"):
        load_catalog(str(path), _config(), logger)

    events = [record.event for record in caplog.records]
    assert events == ["DATASET_LOAD_START", "DATASET_LOAD_END"]
    assert caplog.records[-1].rows_out == 1


def test_missing_dataset_raises_dataset_error(tmp_path: Path, logger):
    with pytest.raises(DatasetError):
        load_catalog(str(tmp_path / "absent.csv"), _config(), logger)


def test_empty_dataset_raises_malformed_input(tmp_path: Path, logger):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    with pytest.raises(MalformedInputError):
        load_catalog(str(path), _config(), logger)


def test_header_missing_columns_raises(tmp_path: Path, logger):
    path = _write(tmp_path, ["city,lat,lng", "X,40,-75"])
    with pytest.raises(MalformedInputError, match="zips"):
        load_catalog(str(path), _config(), logger)


def test_strict_numeric_policy_fails_load(tmp_path: Path, logger):
    path = _write(tmp_path, [HEADER, _row("1", "X", "40.0", "-75.0", "10001", population="many")])
    with pytest.raises(InvalidNumericFieldError):
        load_catalog(str(path), _config(), logger)


def test_nan_numeric_policy_loads_and_warns(tmp_path: Path, logger, caplog):
    path = _write(tmp_path, [HEADER, _row("1", "X", "40.0", "-75.0", "10001", population="many")])

    with caplog.at_level(logging.WARNING, logger="test_loader"):
        catalog = load_catalog(str(path), _config(numeric_policy="nan"), logger)

    assert len(catalog) == 1
    assert [record.event for record in caplog.records] == ["INVALID_NUMERIC_FIELD"]


def test_nan_numeric_policy_warns_on_infinite_values(tmp_path: Path, logger, caplog):
    path = _write(tmp_path, [HEADER, _row("1", "X", "inf", "-75.0", "10001")])

    with caplog.at_level(logging.WARNING, logger="test_loader"):
        catalog = load_catalog(str(path), _config(numeric_policy="nan"), logger)

    assert math.isnan(catalog.lookup_by_postal_code("10001").lat)
    assert [record.event for record in caplog.records] == ["INVALID_NUMERIC_FIELD"]


def test_out_of_range_coordinates_are_logged(tmp_path: Path, logger, caplog):
    path = _write(
        tmp_path,
        [HEADER, _row("1", "X", "95.0", "-75.0", "10001"), _row("2", "Y", "40.0", "-75.0", "10002")],
    )

    with caplog.at_level(logging.WARNING, logger="test_loader"):
        catalog = load_catalog(str(path), _config(), logger)

    assert len(catalog) == 2
    assert [record.event for record in caplog.records] == ["COORDINATE_OUT_OF_RANGE"]


def test_source_crs_is_transformed_to_wgs84(tmp_path: Path, logger):
    from pyproj import Transformer

    x, y = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True).transform(-75.0, 40.0)
    path = _write(tmp_path, [HEADER, _row("1", "X", repr(y), repr(x), "10001")])

    catalog = load_catalog(str(path), _config(source_epsg=3857), logger)
    location = catalog.lookup_by_postal_code("10001")

    assert location.lat == pytest.approx(40.0, abs=1e-6)
    assert location.lng == pytest.approx(-75.0, abs=1e-6)


def test_remote_source_uses_http_client(monkeypatch):
    fetched = {}

    def fake_get_text(self, url, **kwargs):
        fetched["url"] = url
        return "\ufeffcity,zips\r\nX,10001\r\n"

    monkeypatch.setattr(loader.HttpClient, "get_text", fake_get_text)

    lines = read_dataset_lines("https://example.test/uscities.csv", _config())

    assert fetched["url"] == "https://example.test/uscities.csv"
    assert lines == ["city,zips", "X,10001"]


def test_is_remote():
    assert is_remote("https://example.test/a.csv")
    assert is_remote("http://example.test/a.csv")
    assert not is_remote("data/uscities.csv")
