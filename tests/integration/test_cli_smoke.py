from pathlib import Path

import pytest

from officegeo.cli import parse_args, run_command
from officegeo.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, STORAGE_KEYS
from officegeo.store.records import open_stores
from officegeo.store.storage import JsonFileStorage


def _run(data_dir: Path, *argv: str) -> int:
    return run_command(parse_args([*argv, "--config-dir", "config", "--data-dir", str(data_dir), "--run-id", "run-test"]))


def _stores(data_dir: Path):
    return open_stores(JsonFileStorage(data_dir / "state"))


@pytest.mark.integration
def test_seed_list_and_clear_round_trip(tmp_path: Path, capsys):
    data_dir = tmp_path / "data"

    assert _run(data_dir, "seed") == EXIT_SUCCESS
    assert (data_dir / "state" / f"{STORAGE_KEYS['offices']}.json").exists()
    assert (data_dir / "logs" / "run-test.log.jsonl").exists()

    stores = _stores(data_dir)
    assert len(stores.offices) == 5
    assert len(stores.employees) == 45
    assert stores.offices.is_initialized

    assert _run(data_dir, "list", "--collection", "offices") == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "# offices: 5 records (initialized)" in out
    assert "Frankfurt HQ" in out

    assert _run(data_dir, "clear", "--collection", "employees") == EXIT_SUCCESS
    stores = _stores(data_dir)
    assert len(stores.offices) == 5
    assert len(stores.employees) == 0
    assert not stores.employees.is_initialized


@pytest.mark.integration
def test_import_employees_reports_partial_rows(tmp_path: Path):
    data_dir = tmp_path / "data"
    csv_path = tmp_path / "mitarbeiter.csv"
    csv_path.write_text(
        "Name;PLZ;Team;Straße;Büro\n"
        "Max Mustermann;10115;Data;Invalidenstraße 116;Berlin Office\n"
        "Erika Muster;1011;Data;;\n"
        "Otto Normal;99999;QA;;\n",
        encoding="utf-8",
    )

    assert _run(data_dir, "import-employees", str(csv_path)) == EXIT_PARTIAL

    employees = _stores(data_dir).employees.records
    assert [employee.name for employee in employees] == ["Max Mustermann", "Otto Normal"]
    assert employees[0].city == "Berlin"
    assert employees[0].street == "Invalidenstraße 116"
    assert employees[0].assigned_office == "Berlin Office"
    assert employees[1].geocode_status.value == "failed"


@pytest.mark.integration
def test_import_offices_rejected_when_capacity_exceeded(tmp_path: Path):
    data_dir = tmp_path / "data"
    csv_path = tmp_path / "offices.csv"
    rows = "\n".join(f"Office {index},10115" for index in range(16))
    csv_path.write_text(f"name,postcode\n{rows}\n", encoding="utf-8")

    assert _run(data_dir, "seed") == EXIT_SUCCESS
    assert _run(data_dir, "import-offices", str(csv_path)) == EXIT_HARD_FAIL
    assert len(_stores(data_dir).offices) == 5


@pytest.mark.integration
def test_import_without_file_is_hard_failure(tmp_path: Path):
    assert _run(tmp_path / "data", "import-offices") == EXIT_HARD_FAIL


@pytest.mark.integration
def test_distances_export_writes_csv(tmp_path: Path):
    data_dir = tmp_path / "data"
    output = tmp_path / "report" / "distances.csv"

    assert _run(data_dir, "seed") == EXIT_SUCCESS
    assert _run(data_dir, "distances", "--road-estimate", "--output", str(output)) == EXIT_SUCCESS

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("employee_id,employee_name,team")
    assert len(lines) == 46
