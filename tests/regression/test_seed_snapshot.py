from __future__ import annotations

import pytest

from officegeo.pipeline.seed import generate_seed_employees
from officegeo.store.records import open_stores
from officegeo.store.storage import MemoryStorage


def _without_ids(records):
    out = []
    for record in records:
        payload = record.to_dict()
        payload.pop("id")
        out.append(payload)
    return out


@pytest.mark.regression
def test_seed_employees_survive_storage_round_trip_unchanged():
    storage = MemoryStorage()
    stores = open_stores(storage)
    seeded = generate_seed_employees()
    stores.employees.set_all(seeded)
    stores.employees.set_initialized(True)

    reopened = open_stores(storage)

    assert list(reopened.employees) == seeded
    assert reopened.employees.is_initialized
    assert _without_ids(reopened.employees) == _without_ids(generate_seed_employees())


@pytest.mark.regression
def test_seed_default_distribution_is_stable():
    employees = generate_seed_employees()
    first = employees[0]
    assert len(employees) == 45
    assert first.assigned_office in {"Frankfurt HQ", "Berlin Office", "Munich Office", "Hamburg Office", "Duesseldorf Office"}
    assert len({employee.postcode for employee in employees}) > 5
