"""Bundled postcode gazetteer: 5-digit postcode -> centroid and place name."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pyproj import CRS, Transformer

from officegeo.common.errors import ConfigError
from officegeo.common.postcode import is_well_formed_postcode, normalise_postcode

DEFAULT_GAZETTEER_PATH = Path(__file__).resolve().parents[1] / "data" / "plz_de.csv"
GAZETTEER_HEADERS = ("postcode", "lat", "lon", "place")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GazetteerEntry:
    lat: float
    lon: float
    place: str


@dataclass(frozen=True)
class Gazetteer:
    entries: Mapping[str, GazetteerEntry]
    source_path: Path | None = None
    skipped_rows: int = 0

    def get(self, postcode: str) -> GazetteerEntry | None:
        return self.entries.get(postcode)

    def __contains__(self, postcode: object) -> bool:
        return postcode in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_mapping(cls, entries: Mapping[str, GazetteerEntry]) -> Gazetteer:
        return cls(entries=MappingProxyType(dict(entries)))


def _safe_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _valid_lat_lon(lat: float, lon: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _build_transformer(source_epsg: int) -> Transformer | None:
    if source_epsg == 4326:
        return None
    try:
        return Transformer.from_crs(CRS.from_epsg(source_epsg), CRS.from_epsg(4326), always_xy=True)
    except Exception as exc:
        raise ConfigError(f"Unsupported gazetteer CRS: EPSG:{source_epsg}") from exc


def load_gazetteer(path: Path, *, source_epsg: int = 4326) -> Gazetteer:
    """Load a ``postcode,lat,lon,place`` CSV.

    For projected source CRSs the ``lat`` column holds northing and ``lon``
    easting; both are transformed to WGS84 once at load time. Rows with a
    malformed postcode or unusable coordinates are skipped, and the first
    occurrence of a duplicated postcode wins.
    """
    if not path.exists():
        raise ConfigError(f"Missing gazetteer file: {path}")

    transformer = _build_transformer(source_epsg)
    entries: dict[str, GazetteerEntry] = {}
    skipped = 0

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        missing = set(GAZETTEER_HEADERS) - set(reader.fieldnames or [])
        if missing:
            raise ConfigError(f"Gazetteer {path.name} is missing columns: {', '.join(sorted(missing))}")

        for row in reader:
            postcode = normalise_postcode(row.get("postcode"))
            lat = _safe_float(row.get("lat"))
            lon = _safe_float(row.get("lon"))
            if not is_well_formed_postcode(postcode) or lat is None or lon is None:
                skipped += 1
                continue
            if transformer is not None:
                lon, lat = transformer.transform(lon, lat)
            if not _valid_lat_lon(lat, lon) or postcode in entries:
                skipped += 1
                continue
            entries[postcode] = GazetteerEntry(lat=lat, lon=lon, place=(row.get("place") or "").strip())

    if skipped:
        logger.debug("gazetteer %s: skipped %d rows", path.name, skipped)

    return Gazetteer(entries=MappingProxyType(entries), source_path=path, skipped_rows=skipped)


@lru_cache(maxsize=1)
def load_default_gazetteer() -> Gazetteer:
    return load_gazetteer(DEFAULT_GAZETTEER_PATH)
