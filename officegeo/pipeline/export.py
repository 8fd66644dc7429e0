"""Distance report CSV export."""

from __future__ import annotations

from pathlib import Path

from officegeo.common.fs import write_csv
from officegeo.pipeline.filters import DistanceRow

DISTANCE_HEADERS = [
    "employee_id",
    "employee_name",
    "team",
    "postcode",
    "geocode_status",
    "geocode_accuracy",
    "office_name",
    "matched_by",
    "straight_km",
    "road_km",
    "display",
]


def _serialize_row(row: DistanceRow) -> dict:
    employee = row.employee
    return {
        "employee_id": employee.id,
        "employee_name": employee.name,
        "team": employee.team,
        "postcode": employee.postcode,
        "geocode_status": employee.geocode_status.value,
        "geocode_accuracy": employee.geocode_accuracy.value,
        "office_name": row.office.name if row.office else "",
        "matched_by": row.matched_by,
        "straight_km": "" if row.straight_km is None else round(row.straight_km, 3),
        "road_km": "" if row.road_km is None else round(row.road_km, 3),
        "display": row.display,
    }


def write_distance_csv(path: Path, rows: list[DistanceRow]) -> Path:
    write_csv(path, DISTANCE_HEADERS, [_serialize_row(row) for row in rows])
    return path
