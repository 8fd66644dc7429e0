"""CSV tokenising with delimiter detection and German/English header aliases."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from enum import Enum

from officegeo.common.constants import MAX_FILE_SIZE_BYTES
from officegeo.common.postcode import find_embedded_postcode

BOM = "\ufeff"
DELIMITER_CANDIDATES = (",", ";", "\t")
_STREET_TRAILING_CHARS = " ,\t"


class CanonicalField(str, Enum):
    NAME = "name"
    POSTCODE = "postcode"
    STREET = "street"
    CITY = "city"
    ADDRESS = "address"
    TEAM = "team"
    DEPARTMENT = "department"
    ROLE = "role"
    ASSIGNED_OFFICE = "assignedoffice"


HEADER_ALIASES: dict[str, CanonicalField] = {
    "name": CanonicalField.NAME,
    "postcode": CanonicalField.POSTCODE,
    "postal code": CanonicalField.POSTCODE,
    "zip": CanonicalField.POSTCODE,
    "zipcode": CanonicalField.POSTCODE,
    "plz": CanonicalField.POSTCODE,
    "postleitzahl": CanonicalField.POSTCODE,
    "street": CanonicalField.STREET,
    "strasse": CanonicalField.STREET,
    "straße": CanonicalField.STREET,
    "city": CanonicalField.CITY,
    "stadt": CanonicalField.CITY,
    "ort": CanonicalField.CITY,
    "address": CanonicalField.ADDRESS,
    "adresse": CanonicalField.ADDRESS,
    "anschrift": CanonicalField.ADDRESS,
    "team": CanonicalField.TEAM,
    "department": CanonicalField.DEPARTMENT,
    "abteilung": CanonicalField.DEPARTMENT,
    "role": CanonicalField.ROLE,
    "rolle": CanonicalField.ROLE,
    "assignedoffice": CanonicalField.ASSIGNED_OFFICE,
    "assigned office": CanonicalField.ASSIGNED_OFFICE,
    "office": CanonicalField.ASSIGNED_OFFICE,
    "buero": CanonicalField.ASSIGNED_OFFICE,
    "büro": CanonicalField.ASSIGNED_OFFICE,
}


@dataclass(frozen=True)
class ParsedRow:
    row_number: int
    data: dict[str, str]


@dataclass
class ParsedCsv:
    headers: list[str] = field(default_factory=list)
    rows: list[ParsedRow] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def normalise_header(header: str) -> str:
    return header.lstrip(BOM).strip().lower()


def canonicalize_header(header: str) -> str:
    normalised = normalise_header(header)
    alias = HEADER_ALIASES.get(normalised)
    return alias.value if alias is not None else normalised


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line
    return ""


def sniff_delimiter(text: str) -> str:
    """Pick the candidate that splits the header line into the most columns."""
    line = _first_line(text)
    best, best_count = DELIMITER_CANDIDATES[0], 1
    for candidate in DELIMITER_CANDIDATES:
        count = len(next(csv.reader([line], delimiter=candidate), []))
        if count > best_count:
            best, best_count = candidate, count
    return best


def _is_blank(values: list[str]) -> bool:
    return all(not value.strip() for value in values)


def parse_csv(text: str) -> ParsedCsv:
    """A single field may be as large as a whole accepted input file."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    result = ParsedCsv()
    if not text.strip():
        return result

    if csv.field_size_limit() < MAX_FILE_SIZE_BYTES:
        csv.field_size_limit(MAX_FILE_SIZE_BYTES)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=sniff_delimiter(text))
    header_seen = False
    column_keep: list[bool] = []
    data_index = 0

    try:
        for values in reader:
            if not values or _is_blank(values):
                continue

            if not header_seen:
                header_seen = True
                seen: set[str] = set()
                for raw_header in values:
                    canonical = canonicalize_header(raw_header)
                    if canonical in seen:
                        result.warnings.append(f"Duplicate column '{canonical}' ignored")
                        column_keep.append(False)
                        continue
                    seen.add(canonical)
                    column_keep.append(True)
                    result.headers.append(canonical)
                continue

            row_number = data_index + 2
            data_index += 1
            expected = len(column_keep)
            if len(values) < expected:
                result.warnings.append(
                    f"Row {row_number}: Too few fields: expected {expected} fields but parsed {len(values)}"
                )
                values = values + [""] * (expected - len(values))
            elif len(values) > expected:
                result.warnings.append(
                    f"Row {row_number}: Too many fields: expected {expected} fields but parsed {len(values)}"
                )
                values = values[:expected]

            kept = [value for value, keep in zip(values, column_keep) if keep]
            result.rows.append(ParsedRow(row_number=row_number, data=dict(zip(result.headers, kept))))
    except csv.Error as exc:
        result.warnings.append(f"Row {data_index + 2}: {exc}; remaining rows skipped")

    return result


def _column(row: dict[str, str], name: CanonicalField) -> str:
    return (row.get(name.value) or "").strip()


def extract_postcode(row: dict[str, str]) -> str:
    dedicated = _column(row, CanonicalField.POSTCODE)
    if dedicated:
        return dedicated
    match = find_embedded_postcode(_column(row, CanonicalField.ADDRESS))
    return match.group(1) if match else ""


def extract_street(row: dict[str, str]) -> str | None:
    dedicated = _column(row, CanonicalField.STREET)
    if dedicated:
        return dedicated
    address = _column(row, CanonicalField.ADDRESS)
    match = find_embedded_postcode(address)
    if match is None:
        return None
    return address[: match.start()].rstrip(_STREET_TRAILING_CHARS) or None


def extract_city(row: dict[str, str]) -> str | None:
    dedicated = _column(row, CanonicalField.CITY)
    if dedicated:
        return dedicated
    address = _column(row, CanonicalField.ADDRESS)
    match = find_embedded_postcode(address)
    if match is None:
        return None
    return address[match.end():].strip().lstrip(",").strip() or None
