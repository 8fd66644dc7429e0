"""Authoritative office/employee collections with id-keyed merge semantics.

Each store owns one collection and writes the whole collection back to its
storage strategy after every mutation as::

    {"version": 1, "state": {"records": [...], "initialized": true}}

A payload that cannot be decoded is treated as a cold start, never as an error.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Generic, Iterable, Iterator, TypeVar

from officegeo.common.constants import STORAGE_KEYS, STORAGE_VERSION
from officegeo.common.models import Coordinate, Employee, GeocodeStatus, Office
from officegeo.store.storage import KeyValueStorage

R = TypeVar("R", Office, Employee)

logger = logging.getLogger(__name__)


class RecordStore(Generic[R]):
    def __init__(self, storage: KeyValueStorage, key: str, record_type: type[R], collection: str) -> None:
        self.storage = storage
        self.key = key
        self.record_type = record_type
        self.collection = collection
        self._records: list[R] = []
        self._initialized = False

    @property
    def records(self) -> tuple[R, ...]:
        return tuple(self._records)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[R]:
        return iter(tuple(self._records))

    def get(self, record_id: str) -> R | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def load(self) -> bool:
        """Restore persisted state; returns False on a cold start."""
        self._records, self._initialized = [], False
        raw = self.storage.get_item(self.key)
        if raw is None:
            return False
        try:
            payload = json.loads(raw)
            if payload.get("version") != STORAGE_VERSION:
                raise ValueError(f"unsupported version {payload.get('version')!r}")
            state = payload["state"]
            records = [self.record_type.from_dict(item) for item in state["records"]]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("discarding unreadable %s state: %s", self.collection, exc)
            return False
        self._records = records
        self._initialized = bool(state.get("initialized", True))
        return True

    def _persist(self) -> None:
        payload = {
            "version": STORAGE_VERSION,
            "state": {
                "records": [record.to_dict() for record in self._records],
                "initialized": self._initialized,
            },
        }
        self.storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))

    def set_all(self, records: Iterable[R]) -> None:
        self._records = list(records)
        self._persist()

    def add_many(self, records: Iterable[R]) -> int:
        """Append records whose id is not yet present; existing entries win."""
        existing_ids = {record.id for record in self._records}
        added = 0
        for record in records:
            if record.id in existing_ids:
                continue
            existing_ids.add(record.id)
            self._records.append(record)
            added += 1
        if added:
            self._persist()
        return added

    def update_geocode(self, record_id: str, coords: Coordinate | None, status: GeocodeStatus) -> bool:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                self._records[index] = record.with_geocode(coords, status)
                self._persist()
                return True
        return False

    def replace(self, record: R) -> bool:
        for index, existing in enumerate(self._records):
            if existing.id == record.id:
                self._records[index] = record
                self._persist()
                return True
        return False

    def set_initialized(self, value: bool) -> None:
        self._initialized = value
        self._persist()

    def clear(self) -> None:
        self._records = []
        self._initialized = False
        self._persist()


@dataclass(frozen=True)
class Stores:
    offices: RecordStore[Office]
    employees: RecordStore[Employee]


def open_stores(storage: KeyValueStorage) -> Stores:
    stores = Stores(
        offices=RecordStore(storage, STORAGE_KEYS["offices"], Office, "offices"),
        employees=RecordStore(storage, STORAGE_KEYS["employees"], Employee, "employees"),
    )
    stores.offices.load()
    stores.employees.load()
    return stores
