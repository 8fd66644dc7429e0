"""German five-digit postcode normalisation and extraction."""

from __future__ import annotations

import re

GERMAN_POSTCODE_RE = re.compile(r"^[0-9]{5}$")
# First standalone five-digit token, e.g. "Hauptstr. 5, 10115 Berlin".
_EMBEDDED_POSTCODE_RE = re.compile(r"(?<![0-9])([0-9]{5})(?![0-9])")
_WHITESPACE_RE = re.compile(r"\s+")


def normalise_postcode(raw: str | None) -> str:
    if raw is None:
        return ""
    return _WHITESPACE_RE.sub("", raw.strip())


def is_well_formed_postcode(value: str) -> bool:
    return bool(GERMAN_POSTCODE_RE.match(value))


def find_embedded_postcode(text: str | None) -> re.Match[str] | None:
    if not text:
        return None
    return _EMBEDDED_POSTCODE_RE.search(text)
