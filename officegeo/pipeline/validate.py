"""Per-row schema validation for office and employee imports.

Validation never raises for bad data. Each row yields either ``Valid`` with a
trimmed payload or ``Invalid`` listing every violated rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Mapping, TypeVar, Union

from officegeo.common.postcode import is_well_formed_postcode

P = TypeVar("P")


@dataclass(frozen=True)
class ValidatedOffice:
    name: str
    postcode: str
    street: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class ValidatedEmployee:
    name: str
    postcode: str
    team: str
    street: str | None = None
    city: str | None = None
    department: str | None = None
    role: str | None = None
    assigned_office: str | None = None


@dataclass(frozen=True)
class Valid(Generic[P]):
    payload: P


@dataclass(frozen=True)
class Invalid:
    errors: list[str]


ValidationOutcome = Union[Valid[P], Invalid]


def _text(candidate: Mapping[str, str | None], key: str) -> str:
    return (candidate.get(key) or "").strip()


def _optional(candidate: Mapping[str, str | None], key: str) -> str | None:
    return _text(candidate, key) or None


def _required(candidate: Mapping[str, str | None], key: str, label: str, errors: list[str]) -> str:
    value = _text(candidate, key)
    if not value:
        errors.append(f"{key}: {label} is required")
    return value


def _postcode(candidate: Mapping[str, str | None], errors: list[str]) -> str:
    """Only outer whitespace is trimmed; "10 115" is rejected rather than repaired."""
    value = _text(candidate, "postcode")
    if not value:
        errors.append("postcode: Postcode is required")
    elif not is_well_formed_postcode(value):
        errors.append("postcode: Postcode must be exactly 5 digits")
    return value


def validate_office(candidate: Mapping[str, str | None]) -> ValidationOutcome[ValidatedOffice]:
    errors: list[str] = []
    name = _required(candidate, "name", "Name", errors)
    postcode = _postcode(candidate, errors)
    if errors:
        return Invalid(errors=errors)
    return Valid(
        ValidatedOffice(
            name=name,
            postcode=postcode,
            street=_optional(candidate, "street"),
            city=_optional(candidate, "city"),
        )
    )


def validate_employee(candidate: Mapping[str, str | None]) -> ValidationOutcome[ValidatedEmployee]:
    errors: list[str] = []
    name = _required(candidate, "name", "Name", errors)
    postcode = _postcode(candidate, errors)
    team = _required(candidate, "team", "Team", errors)
    if errors:
        return Invalid(errors=errors)
    return Valid(
        ValidatedEmployee(
            name=name,
            postcode=postcode,
            team=team,
            street=_optional(candidate, "street"),
            city=_optional(candidate, "city"),
            department=_optional(candidate, "department"),
            role=_optional(candidate, "role"),
            assigned_office=_optional(candidate, "assigned_office"),
        )
    )
