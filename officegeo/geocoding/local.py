"""Offline geocoding against the postcode gazetteer.

Lookups never touch the network and never raise for unknown postcodes: a
miss is reported as ``coords=None, city=None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from officegeo.common.models import Coordinate, GeocodeAccuracy
from officegeo.common.postcode import normalise_postcode
from officegeo.geocoding.gazetteer import Gazetteer, load_default_gazetteer


@dataclass(frozen=True)
class LocalGeocodeResult:
    postcode: str
    coords: Coordinate | None
    city: str | None
    accuracy: GeocodeAccuracy = GeocodeAccuracy.POSTCODE_CENTROID


class LocalGeocoder:
    def __init__(self, gazetteer: Gazetteer | None = None) -> None:
        self.gazetteer = gazetteer if gazetteer is not None else load_default_gazetteer()

    def geocode_by_postcode(self, postcode: str) -> LocalGeocodeResult:
        normalised = normalise_postcode(postcode)
        entry = self.gazetteer.get(normalised)
        if entry is None:
            return LocalGeocodeResult(postcode=normalised, coords=None, city=None)
        return LocalGeocodeResult(
            postcode=normalised,
            coords=Coordinate(lat=entry.lat, lon=entry.lon),
            city=entry.place or None,
        )

    def batch_geocode_by_postcode(self, postcodes: Iterable[str]) -> list[LocalGeocodeResult]:
        return [self.geocode_by_postcode(postcode) for postcode in postcodes]

    def is_valid_postcode(self, postcode: str) -> bool:
        return normalise_postcode(postcode) in self.gazetteer
