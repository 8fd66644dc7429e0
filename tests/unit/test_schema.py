import copy

import pytest

from officegeo.common.errors import ConfigError
from officegeo.common.schema import validate_settings_config

BASE_SETTINGS = {
    "gazetteer": {"path": None, "source_epsg": 4326},
    "storage": {"backend": "file", "directory": "state"},
    "remote_geocoder": {
        "endpoint": "https://example.test",
        "country_filter": "countrycode:de",
        "rate_limit_per_sec": 5,
        "timeout_seconds": 20,
    },
    "logging": {"level": "INFO"},
}


def test_validate_settings_accepts_valid_shape():
    validated = validate_settings_config(copy.deepcopy(BASE_SETTINGS))
    assert validated["storage"]["backend"] == "file"


def test_validate_settings_rejects_unknown_key_by_default():
    bad = copy.deepcopy(BASE_SETTINGS)
    bad["unexpected"] = True
    with pytest.raises(ConfigError):
        validate_settings_config(bad)


def test_validate_settings_allows_unknown_when_enabled():
    okay = copy.deepcopy(BASE_SETTINGS)
    okay["extra"] = 1
    okay["storage"]["encryption"] = "external"
    validate_settings_config(okay, allow_unknown=True)


def test_validate_settings_rejects_missing_section():
    bad = copy.deepcopy(BASE_SETTINGS)
    del bad["remote_geocoder"]
    with pytest.raises(ConfigError, match="remote_geocoder"):
        validate_settings_config(bad)


@pytest.mark.parametrize("rate", [0, -1, "fast", True])
def test_validate_settings_rejects_non_positive_rate(rate):
    bad = copy.deepcopy(BASE_SETTINGS)
    bad["remote_geocoder"]["rate_limit_per_sec"] = rate
    with pytest.raises(ConfigError):
        validate_settings_config(bad)


def test_validate_settings_requires_integer_epsg():
    bad = copy.deepcopy(BASE_SETTINGS)
    bad["gazetteer"]["source_epsg"] = "EPSG:25832"
    with pytest.raises(ConfigError):
        validate_settings_config(bad)
