"""Configuration schema checks."""

from __future__ import annotations

from officegeo.common.errors import ConfigError

STORAGE_BACKENDS = {"file", "memory"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive_number(value, ctx: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{ctx} must be a positive number")


def validate_settings_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"gazetteer", "storage", "remote_geocoder", "logging"}
    _assert_required_keys(cfg, top_required, "settings")
    _assert_no_unknown_keys(cfg, top_required, "settings", allow_unknown)

    _assert_required_keys(cfg["gazetteer"], {"path", "source_epsg"}, "gazetteer")
    _assert_no_unknown_keys(cfg["gazetteer"], {"path", "source_epsg"}, "gazetteer", allow_unknown)
    epsg = cfg["gazetteer"]["source_epsg"]
    if isinstance(epsg, bool) or not isinstance(epsg, int):
        raise ConfigError("gazetteer.source_epsg must be an integer EPSG code")

    _assert_required_keys(cfg["storage"], {"backend", "directory"}, "storage")
    _assert_no_unknown_keys(cfg["storage"], {"backend", "directory"}, "storage", allow_unknown)
    if cfg["storage"]["backend"] not in STORAGE_BACKENDS:
        backends = ", ".join(sorted(STORAGE_BACKENDS))
        raise ConfigError(f"storage.backend must be one of: {backends}")

    remote_keys = {"endpoint", "country_filter", "rate_limit_per_sec", "timeout_seconds"}
    _assert_required_keys(cfg["remote_geocoder"], remote_keys, "remote_geocoder")
    _assert_no_unknown_keys(cfg["remote_geocoder"], remote_keys, "remote_geocoder", allow_unknown)
    _assert_positive_number(cfg["remote_geocoder"]["rate_limit_per_sec"], "remote_geocoder.rate_limit_per_sec")
    _assert_positive_number(cfg["remote_geocoder"]["timeout_seconds"], "remote_geocoder.timeout_seconds")

    _assert_required_keys(cfg["logging"], {"level"}, "logging")
    _assert_no_unknown_keys(cfg["logging"], {"level"}, "logging", allow_unknown)

    return cfg
