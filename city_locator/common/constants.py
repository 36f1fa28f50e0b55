"""Application constants."""

USER_AGENT = "city-locator/1.0 (+dataset fetch)"
EARTH_RADIUS_MILES = 3958.8
TRUE_TOKEN = "TRUE"
LOCATION_FIELDS = (
    "city",
    "city_ascii",
    "state_id",
    "state_name",
    "county_fips",
    "county_name",
    "lat",
    "lng",
    "population",
    "density",
    "source",
    "military",
    "incorporated",
    "timezone",
    "ranking",
    "zips",
    "id",
)
NUMERIC_FIELDS = ("lat", "lng", "population", "density")
NUMERIC_POLICIES = ("strict", "nan")
DUPLICATE_ZIP_POLICIES = ("overwrite", "warn", "error")
EXIT_SUCCESS = 0
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "stage",
    "event",
    "status",
    "zip",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
