"""Filesystem helpers."""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Iterable, Mapping

from officegeo.common.constants import MAX_FILE_SIZE_BYTES, MAX_FILE_SIZE_MB
from officegeo.common.errors import InputError


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_yaml(path: Path):
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_text_atomic(path: Path, text: str) -> None:
    ensure_dir(path.parent)
    tmp_path = path.with_name(f".{path.name}.tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        f.write(text)
    os.replace(tmp_path, path)


def read_csv_text(path: Path, max_bytes: int = MAX_FILE_SIZE_BYTES) -> str:
    """Read an import file, enforcing the size limit and stripping a UTF-8 BOM."""
    if not path.exists():
        raise InputError(f"Missing CSV input: {path}")
    size = path.stat().st_size
    if size > max_bytes:
        raise InputError(
            f"File {path.name} is {size / (1024 * 1024):.1f} MB; the maximum is {MAX_FILE_SIZE_MB} MB"
        )
    try:
        return path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InputError(f"File {path.name} is not valid UTF-8") from exc


def write_csv(path: Path, headers: list[str], rows: Iterable[Mapping[str, object]]) -> None:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=headers, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
