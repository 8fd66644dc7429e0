"""Employee filtering and employee-to-office distance rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from officegeo.common.models import Employee, GeocodeStatus, Office
from officegeo.pipeline.distance import distance_between, estimate_road_distance, format_distance


@dataclass(frozen=True)
class DistanceRow:
    employee: Employee
    office: Office | None
    straight_km: float | None
    road_km: float | None
    display: str
    matched_by: str  # assigned / nearest / none


def filter_employees(
    employees: Iterable[Employee],
    *,
    team: str | None = None,
    department: str | None = None,
    office: str | None = None,
    query: str = "",
) -> list[Employee]:
    """Geocoded employees matching every given filter; ``query`` is a name substring."""
    needle = query.strip().lower()
    out: list[Employee] = []
    for employee in employees:
        if employee.geocode_status is not GeocodeStatus.SUCCESS:
            continue
        if team and employee.team != team:
            continue
        if department and employee.department != department:
            continue
        if office and employee.assigned_office != office:
            continue
        if needle and needle not in employee.name.lower():
            continue
        out.append(employee)
    return out


def nearest_office(employee: Employee, offices: Sequence[Office]) -> tuple[Office | None, float | None]:
    best: Office | None = None
    best_km: float | None = None
    for office in offices:
        km = distance_between(employee.coords, office.coords)
        if km is None:
            continue
        if best_km is None or km < best_km:
            best, best_km = office, km
    return best, best_km


def _assigned_office(employee: Employee, offices: Sequence[Office]) -> Office | None:
    if not employee.assigned_office:
        return None
    for office in offices:
        if office.name == employee.assigned_office and office.coords is not None:
            return office
    return None


def employee_distance_rows(
    employees: Iterable[Employee],
    offices: Sequence[Office],
    *,
    use_road_estimate: bool = False,
) -> list[DistanceRow]:
    """One row per employee against the assigned office, else the nearest one.

    ``assigned_office`` is a free-text name; a name with no geocoded office of
    that name falls back to the nearest office.
    """
    rows: list[DistanceRow] = []
    for employee in employees:
        office = _assigned_office(employee, offices)
        if office is not None:
            km = distance_between(employee.coords, office.coords)
            matched_by = "assigned"
        else:
            office, km = nearest_office(employee, offices)
            matched_by = "nearest" if office is not None else "none"
        rows.append(
            DistanceRow(
                employee=employee,
                office=office,
                straight_km=km,
                road_km=estimate_road_distance(km) if km is not None else None,
                display=format_distance(km, use_road_estimate),
                matched_by=matched_by,
            )
        )
    return rows
