"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from officegeo.common.errors import ConfigError
from officegeo.common.fs import read_yaml
from officegeo.common.schema import validate_settings_config

SETTINGS_FILENAME = "settings.yml"


@dataclass(frozen=True)
class Settings:
    gazetteer_path: Path | None
    gazetteer_source_epsg: int
    storage_backend: str
    storage_directory: Path
    remote_endpoint: str
    remote_country_filter: str
    remote_rate_limit_per_sec: float
    remote_timeout_seconds: float
    log_level: str


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_settings(
    config_dir: Path,
    *,
    data_dir: Path | None = None,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> Settings:
    overlay_path = None
    if overlay_config_dir is not None:
        overlay_path = overlay_config_dir / SETTINGS_FILENAME
    cfg = validate_settings_config(
        _load_yaml_with_overlay(config_dir / SETTINGS_FILENAME, overlay_path),
        allow_unknown=allow_unknown,
    )

    gazetteer_path = None
    if cfg["gazetteer"]["path"]:
        gazetteer_path = Path(cfg["gazetteer"]["path"])
        if not gazetteer_path.is_absolute():
            gazetteer_path = config_dir / gazetteer_path

    storage_directory = Path(cfg["storage"]["directory"])
    if not storage_directory.is_absolute() and data_dir is not None:
        storage_directory = data_dir / storage_directory

    remote = cfg["remote_geocoder"]
    return Settings(
        gazetteer_path=gazetteer_path,
        gazetteer_source_epsg=int(cfg["gazetteer"]["source_epsg"]),
        storage_backend=cfg["storage"]["backend"],
        storage_directory=storage_directory,
        remote_endpoint=remote["endpoint"],
        remote_country_filter=remote["country_filter"],
        remote_rate_limit_per_sec=float(remote["rate_limit_per_sec"]),
        remote_timeout_seconds=float(remote["timeout_seconds"]),
        log_level=str(cfg["logging"]["level"]),
    )
