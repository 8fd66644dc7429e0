"""Application constants."""

USER_AGENT = "officegeo/1.0 (+local postcode geocoding)"
COMMANDS = (
    "import-offices",
    "import-employees",
    "seed",
    "clear",
    "list",
    "distances",
    "upgrade-accuracy",
)
COLLECTIONS = ("offices", "employees")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20

MAX_OFFICES = 20
MAX_EMPLOYEES = 1000
MAX_FILE_SIZE_MB = 5
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024

EARTH_RADIUS_KM = 6371.0
# Straight-line to road distance multipliers (urban, regional, motorway).
CIRCUITY_FACTOR_SHORT = 1.4
CIRCUITY_FACTOR_MEDIUM = 1.35
CIRCUITY_FACTOR_LONG = 1.25
CIRCUITY_SHORT_LIMIT_KM = 20.0
CIRCUITY_MEDIUM_LIMIT_KM = 100.0

STORAGE_VERSION = 1
STORAGE_KEYS = {
    "offices": "offices-v1",
    "employees": "employees-v1",
}
API_KEY_ENV_VAR = "OFFICEGEO_API_KEY"

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "command",
    "collection",
    "source",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
