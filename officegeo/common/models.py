"""Data models shared by the geocoding, import and store layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Generic, TypeVar


class GeocodeStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class GeocodeAccuracy(str, Enum):
    POSTCODE_CENTROID = "postcode-centroid"
    ADDRESS = "address"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90 <= self.lat <= 90 and -180 <= self.lon <= 180):
            raise ValueError(f"Coordinate out of range: lat={self.lat}, lon={self.lon}")

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> Coordinate | None:
        if not payload:
            return None
        return cls(lat=float(payload["lat"]), lon=float(payload["lon"]))


def _check_status(coords: Coordinate | None, status: GeocodeStatus) -> None:
    if status is GeocodeStatus.SUCCESS and coords is None:
        raise ValueError("geocode status 'success' requires coordinates")
    if status is GeocodeStatus.FAILED and coords is not None:
        raise ValueError("geocode status 'failed' must not carry coordinates")


@dataclass(frozen=True)
class Office:
    id: str
    name: str
    postcode: str
    street: str | None = None
    city: str | None = None
    coords: Coordinate | None = None
    geocode_status: GeocodeStatus = GeocodeStatus.PENDING

    def __post_init__(self) -> None:
        _check_status(self.coords, self.geocode_status)

    def with_geocode(self, coords: Coordinate | None, status: GeocodeStatus) -> Office:
        return replace(self, coords=coords, geocode_status=status)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["coords"] = self.coords.to_dict() if self.coords else None
        payload["geocode_status"] = self.geocode_status.value
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Office:
        return cls(
            id=payload["id"],
            name=payload["name"],
            postcode=payload["postcode"],
            street=payload.get("street"),
            city=payload.get("city"),
            coords=Coordinate.from_dict(payload.get("coords")),
            geocode_status=GeocodeStatus(payload.get("geocode_status", "pending")),
        )


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    postcode: str
    team: str
    street: str | None = None
    city: str | None = None
    department: str | None = None
    role: str | None = None
    assigned_office: str | None = None
    coords: Coordinate | None = None
    geocode_accuracy: GeocodeAccuracy = GeocodeAccuracy.POSTCODE_CENTROID
    geocode_status: GeocodeStatus = GeocodeStatus.PENDING

    def __post_init__(self) -> None:
        _check_status(self.coords, self.geocode_status)

    def with_geocode(self, coords: Coordinate | None, status: GeocodeStatus) -> Employee:
        return replace(self, coords=coords, geocode_status=status)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["coords"] = self.coords.to_dict() if self.coords else None
        payload["geocode_accuracy"] = self.geocode_accuracy.value
        payload["geocode_status"] = self.geocode_status.value
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Employee:
        return cls(
            id=payload["id"],
            name=payload["name"],
            postcode=payload["postcode"],
            team=payload["team"],
            street=payload.get("street"),
            city=payload.get("city"),
            department=payload.get("department"),
            role=payload.get("role"),
            assigned_office=payload.get("assigned_office"),
            coords=Coordinate.from_dict(payload.get("coords")),
            geocode_accuracy=GeocodeAccuracy(payload.get("geocode_accuracy", "postcode-centroid")),
            geocode_status=GeocodeStatus(payload.get("geocode_status", "pending")),
        )


@dataclass(frozen=True)
class ValidationError:
    """Row-level validation failure; row 1 is the header, so data starts at 2."""

    row: int
    errors: list[str]
    data: dict[str, str]


T = TypeVar("T")


@dataclass
class CsvParseResult(Generic[T]):
    valid: list[T] = field(default_factory=list)
    invalid: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
