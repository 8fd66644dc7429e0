"""Domain errors and failure typing."""


class OfficeGeoError(Exception):
    """Base class for officegeo failures."""

    error_code = "OFFICEGEO_ERROR"


class ConfigError(OfficeGeoError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class InputError(OfficeGeoError):
    """Raised when an input file cannot be accepted (too large, unreadable)."""

    error_code = "INPUT_ERROR"


class CapacityError(OfficeGeoError):
    """Raised when an import would push a collection past its record limit."""

    error_code = "CAPACITY_ERROR"

    def __init__(self, label: str, current: int, attempted: int, limit: int) -> None:
        self.label = label
        self.current = current
        self.attempted = attempted
        self.limit = limit
        super().__init__(
            f"Import would exceed the maximum of {limit} {label} "
            f"(current: {current}, attempting to add: {attempted})"
        )


class StorageError(OfficeGeoError):
    """Raised when persisted state cannot be written."""

    error_code = "STORAGE_ERROR"
