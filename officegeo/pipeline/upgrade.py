"""Upgrade postcode-centroid employees to address accuracy via the remote geocoder."""

from __future__ import annotations

from dataclasses import dataclass, replace

from officegeo.common.models import Employee, GeocodeAccuracy, GeocodeStatus
from officegeo.geocoding.remote import ProgressCallback, RemoteGeocoder
from officegeo.store.records import RecordStore

COUNTRY_SUFFIX = "Germany"


@dataclass(frozen=True)
class UpgradeSummary:
    attempted: int
    upgraded: int
    failed: int
    errors: list[str]


def upgradable_employees(employees) -> list[Employee]:
    return [
        employee
        for employee in employees
        if employee.street and employee.geocode_accuracy is not GeocodeAccuracy.ADDRESS
    ]


def full_address(employee: Employee) -> str:
    locality = " ".join(part for part in (employee.postcode, employee.city) if part)
    return ", ".join(part for part in (employee.street, locality, COUNTRY_SUFFIX) if part)


def upgrade_employee_accuracy(
    store: RecordStore[Employee],
    geocoder: RemoteGeocoder,
    on_progress: ProgressCallback | None = None,
) -> UpgradeSummary:
    """Failed lookups leave the employee's centroid coordinates untouched."""
    candidates = upgradable_employees(store)
    results = geocoder.batch_geocode([full_address(employee) for employee in candidates], on_progress)

    upgraded = 0
    errors: list[str] = []
    for employee, result in zip(candidates, results):
        if result.status is GeocodeStatus.SUCCESS and result.coords is not None:
            store.replace(
                replace(
                    employee,
                    coords=result.coords,
                    geocode_status=GeocodeStatus.SUCCESS,
                    geocode_accuracy=GeocodeAccuracy.ADDRESS,
                )
            )
            upgraded += 1
        else:
            errors.append(f"{employee.name}: {result.error}")

    return UpgradeSummary(
        attempted=len(candidates),
        upgraded=upgraded,
        failed=len(candidates) - upgraded,
        errors=errors,
    )
