"""Domain errors and failure typing."""


class LocatorError(Exception):
    """Base class for city locator failures."""

    error_code = "LOCATOR_ERROR"


class ConfigError(LocatorError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class DatasetError(LocatorError):
    """Raised when the dataset cannot be read or fetched."""

    error_code = "DATASET_ERROR"


class MalformedInputError(LocatorError):
    """Raised when the dataset cannot be decoded into location records."""

    error_code = "MALFORMED_INPUT"


class InvalidNumericFieldError(MalformedInputError):
    """Raised when a numeric column holds something that is not a finite number."""

    error_code = "INVALID_NUMERIC_FIELD"

    def __init__(self, field: str, value: str, record_id: str | None = None) -> None:
        self.field = field
        self.value = value
        self.record_id = record_id
        where = f" in record {record_id}" if record_id else ""
        super().__init__(f"Invalid numeric value for {field!r}{where}: {value!r}")


class NotFoundError(LocatorError):
    """Raised when a queried postal code (or a neighbour) does not exist."""

    error_code = "NOT_FOUND"


class UsageError(LocatorError):
    """Raised for missing or invalid command line input."""

    error_code = "USAGE_ERROR"
