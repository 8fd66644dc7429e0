"""Import pipeline: CSV text -> validated, locally geocoded records."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence, TypeVar

from officegeo.common.errors import CapacityError
from officegeo.common.ids import new_record_id
from officegeo.common.logging import log_event
from officegeo.common.models import (
    CsvParseResult,
    Employee,
    GeocodeAccuracy,
    GeocodeStatus,
    Office,
    ValidationError,
)
from officegeo.geocoding.local import LocalGeocoder
from officegeo.pipeline.csv_parser import (
    CanonicalField,
    ParsedRow,
    extract_city,
    extract_postcode,
    extract_street,
    parse_csv,
)
from officegeo.pipeline.validate import (
    Invalid,
    Valid,
    ValidatedEmployee,
    ValidatedOffice,
    ValidationOutcome,
    validate_employee,
    validate_office,
)
from officegeo.store.records import RecordStore

R = TypeVar("R", Office, Employee)


def _office_candidate(row: Mapping[str, str]) -> dict[str, str | None]:
    return {
        "name": row.get(CanonicalField.NAME.value),
        "postcode": extract_postcode(row),
        "street": extract_street(row),
        "city": extract_city(row),
    }


def _employee_candidate(row: Mapping[str, str]) -> dict[str, str | None]:
    candidate = _office_candidate(row)
    candidate.update(
        {
            "team": row.get(CanonicalField.TEAM.value),
            "department": row.get(CanonicalField.DEPARTMENT.value),
            "role": row.get(CanonicalField.ROLE.value),
            "assigned_office": row.get(CanonicalField.ASSIGNED_OFFICE.value),
        }
    )
    return candidate


def build_office(payload: ValidatedOffice, geocoder: LocalGeocoder) -> Office:
    located = geocoder.geocode_by_postcode(payload.postcode)
    return Office(
        id=new_record_id(),
        name=payload.name,
        postcode=payload.postcode,
        street=payload.street,
        city=payload.city or located.city,
        coords=located.coords,
        geocode_status=GeocodeStatus.SUCCESS if located.coords else GeocodeStatus.FAILED,
    )


def build_employee(payload: ValidatedEmployee, geocoder: LocalGeocoder) -> Employee:
    located = geocoder.geocode_by_postcode(payload.postcode)
    return Employee(
        id=new_record_id(),
        name=payload.name,
        postcode=payload.postcode,
        team=payload.team,
        street=payload.street,
        city=payload.city or located.city,
        department=payload.department,
        role=payload.role,
        assigned_office=payload.assigned_office,
        coords=located.coords,
        geocode_accuracy=GeocodeAccuracy.POSTCODE_CENTROID,
        geocode_status=GeocodeStatus.SUCCESS if located.coords else GeocodeStatus.FAILED,
    )


def create_office(
    fields: Mapping[str, str | None], geocoder: LocalGeocoder | None = None
) -> ValidationOutcome[Office]:
    """Manual entry: validate a single form submission and geocode it."""
    outcome = validate_office(fields)
    if isinstance(outcome, Invalid):
        return outcome
    return Valid(build_office(outcome.payload, geocoder or LocalGeocoder()))


def create_employee(
    fields: Mapping[str, str | None], geocoder: LocalGeocoder | None = None
) -> ValidationOutcome[Employee]:
    outcome = validate_employee(fields)
    if isinstance(outcome, Invalid):
        return outcome
    return Valid(build_employee(outcome.payload, geocoder or LocalGeocoder()))


def _run_import(
    text: str,
    *,
    collection: str,
    to_candidate: Callable[[Mapping[str, str]], dict[str, str | None]],
    validate: Callable[[Mapping[str, str | None]], ValidationOutcome],
    build: Callable[[object, LocalGeocoder], R],
    geocoder: LocalGeocoder,
    logger: logging.Logger | None,
) -> CsvParseResult[R]:
    parsed = parse_csv(text)
    result: CsvParseResult[R] = CsvParseResult(warnings=list(parsed.warnings))

    for row in parsed.rows:
        outcome = validate(to_candidate(row.data))
        if isinstance(outcome, Invalid):
            result.invalid.append(_validation_error(row, outcome))
            continue
        result.valid.append(build(outcome.payload, geocoder))

    if logger is not None:
        failed = sum(1 for record in result.valid if record.geocode_status is GeocodeStatus.FAILED)
        log_event(
            logger,
            f"parsed {collection} csv: {len(result.invalid)} invalid rows, {failed} postcodes not found",
            collection=collection,
            event="IMPORT_PARSED",
            status="ok" if not result.invalid and not failed else "partial",
            rows_in=len(parsed.rows),
            rows_out=len(result.valid),
        )
    return result


def _validation_error(row: ParsedRow, outcome: Invalid) -> ValidationError:
    return ValidationError(row=row.row_number, errors=list(outcome.errors), data=dict(row.data))


def parse_office_csv(
    text: str,
    geocoder: LocalGeocoder | None = None,
    *,
    logger: logging.Logger | None = None,
) -> CsvParseResult[Office]:
    return _run_import(
        text,
        collection="offices",
        to_candidate=_office_candidate,
        validate=validate_office,
        build=build_office,
        geocoder=geocoder or LocalGeocoder(),
        logger=logger,
    )


def parse_employee_csv(
    text: str,
    geocoder: LocalGeocoder | None = None,
    *,
    logger: logging.Logger | None = None,
) -> CsvParseResult[Employee]:
    return _run_import(
        text,
        collection="employees",
        to_candidate=_employee_candidate,
        validate=validate_employee,
        build=build_employee,
        geocoder=geocoder or LocalGeocoder(),
        logger=logger,
    )


def check_capacity(current: int, incoming: int, limit: int, label: str) -> None:
    if current + incoming > limit:
        raise CapacityError(label, current=current, attempted=incoming, limit=limit)


def commit_import(store: RecordStore[R], records: Sequence[R], *, limit: int) -> int:
    """Check the collection limit, then merge; nothing is written on violation."""
    check_capacity(len(store), len(records), limit, store.collection)
    return store.add_many(records)
