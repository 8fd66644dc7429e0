"""CLI entrypoint for the office/employee postcode geocoding pipeline."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from officegeo.common.config_loader import Settings, load_settings
from officegeo.common.constants import (
    API_KEY_ENV_VAR,
    COLLECTIONS,
    COMMANDS,
    EXIT_HARD_FAIL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    MAX_EMPLOYEES,
    MAX_OFFICES,
)
from officegeo.common.errors import OfficeGeoError
from officegeo.common.fs import read_csv_text
from officegeo.common.ids import generate_run_id
from officegeo.common.logging import build_logger, log_event
from officegeo.common.models import CsvParseResult, GeocodeStatus
from officegeo.geocoding.gazetteer import load_default_gazetteer, load_gazetteer
from officegeo.geocoding.local import LocalGeocoder
from officegeo.geocoding.remote import GeocodeProgress, RemoteGeocoder
from officegeo.pipeline.distance import format_distance
from officegeo.pipeline.export import write_distance_csv
from officegeo.pipeline.filters import employee_distance_rows, filter_employees
from officegeo.pipeline.importer import commit_import, parse_employee_csv, parse_office_csv
from officegeo.pipeline.seed import generate_seed_employees, generate_seed_offices
from officegeo.pipeline.upgrade import upgrade_employee_accuracy
from officegeo.store.records import Stores, open_stores
from officegeo.store.storage import build_storage


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("file", nargs="?", default=None, help="CSV file for import commands")
    parser.add_argument("--collection", default="all", choices=[*COLLECTIONS, "all"])
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"])
    parser.add_argument("--road-estimate", action="store_true")
    parser.add_argument("--output", default=None, help="write the distance report to this CSV path")
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--team", default=None)
    parser.add_argument("--department", default=None)
    parser.add_argument("--office", default=None)
    parser.add_argument("--search", default="")
    return parser.parse_args(argv)


def _build_geocoder(settings: Settings) -> LocalGeocoder:
    if settings.gazetteer_path is None:
        return LocalGeocoder(load_default_gazetteer())
    return LocalGeocoder(load_gazetteer(settings.gazetteer_path, source_epsg=settings.gazetteer_source_epsg))


def _report_parse_result(logger: logging.Logger, run_id: str, collection: str, result: CsvParseResult) -> bool:
    for warning in result.warnings:
        logger.warning(warning, extra={"run_id": run_id, "collection": collection, "event": "PARSE_WARNING"})
    for error in result.invalid:
        logger.warning(
            f"row {error.row}: {'; '.join(error.errors)}",
            extra={"run_id": run_id, "collection": collection, "event": "ROW_INVALID", "status": "error"},
        )
    failed = sum(1 for record in result.valid if record.geocode_status is GeocodeStatus.FAILED)
    return bool(result.invalid or result.warnings or failed)


def _run_import(args, stores: Stores, geocoder: LocalGeocoder, logger: logging.Logger, run_id: str) -> int:
    if not args.file:
        raise OfficeGeoError(f"{args.command} requires a CSV file argument")
    text = read_csv_text(Path(args.file))
    if args.command == "import-offices":
        collection, store, limit = "offices", stores.offices, MAX_OFFICES
        result = parse_office_csv(text, geocoder, logger=logger)
    else:
        collection, store, limit = "employees", stores.employees, MAX_EMPLOYEES
        result = parse_employee_csv(text, geocoder, logger=logger)

    partial = _report_parse_result(logger, run_id, collection, result)
    added = commit_import(store, result.valid, limit=limit)
    log_event(
        logger,
        f"imported {added} {collection}",
        run_id=run_id,
        command=args.command,
        collection=collection,
        event="IMPORT_COMMIT",
        status="partial" if partial else "ok",
        rows_in=len(result.valid) + len(result.invalid),
        rows_out=added,
    )
    return EXIT_PARTIAL if partial else EXIT_SUCCESS


def _selected(args) -> list[str]:
    return list(COLLECTIONS) if args.collection == "all" else [args.collection]


def _run_list(args, stores: Stores) -> int:
    for collection in _selected(args):
        store = getattr(stores, collection)
        state = "initialized" if store.is_initialized else "uninitialized"
        print(f"# {collection}: {len(store)} records ({state})")
        for record in store:
            city = record.city or ""
            print(f"{record.id}\t{record.name}\t{record.postcode}\t{city}\t{record.geocode_status.value}")
    return EXIT_SUCCESS


def _run_distances(args, stores: Stores, logger: logging.Logger, run_id: str) -> int:
    employees = filter_employees(
        stores.employees,
        team=args.team,
        department=args.department,
        office=args.office,
        query=args.search,
    )
    rows = employee_distance_rows(employees, stores.offices.records, use_road_estimate=args.road_estimate)
    if args.output:
        path = write_distance_csv(Path(args.output), rows)
        log_event(logger, f"wrote distance report to {path}", run_id=run_id, event="EXPORT", rows_out=len(rows))
    else:
        for row in rows:
            office_name = row.office.name if row.office else format_distance(None)
            print(f"{row.employee.name}\t{row.employee.team}\t{office_name}\t{row.display}")
    return EXIT_SUCCESS


def _run_upgrade(args, settings: Settings, stores: Stores, logger: logging.Logger, run_id: str) -> int:
    api_key = args.api_key or os.environ.get(API_KEY_ENV_VAR)

    def _progress(progress: GeocodeProgress) -> None:
        if progress.status == "processing":
            return
        log_event(
            logger,
            f"geocoded {progress.current}/{progress.total}",
            run_id=run_id,
            source="remote",
            event="REMOTE_GEOCODE",
            status=progress.status,
        )

    with RemoteGeocoder(
        api_key,
        endpoint=settings.remote_endpoint,
        country_filter=settings.remote_country_filter,
        rate_limit_per_sec=settings.remote_rate_limit_per_sec,
        timeout_seconds=settings.remote_timeout_seconds,
    ) as geocoder:
        summary = upgrade_employee_accuracy(stores.employees, geocoder, _progress)

    log_event(
        logger,
        f"upgraded {summary.upgraded}/{summary.attempted} employees to address accuracy",
        run_id=run_id,
        command=args.command,
        collection="employees",
        event="UPGRADE_END",
        status="partial" if summary.failed else "ok",
        rows_in=summary.attempted,
        rows_out=summary.upgraded,
    )
    return EXIT_PARTIAL if summary.failed else EXIT_SUCCESS


def execute_command(args, settings: Settings, stores: Stores, geocoder: LocalGeocoder, logger, run_id: str) -> int:
    if args.command in ("import-offices", "import-employees"):
        return _run_import(args, stores, geocoder, logger, run_id)
    if args.command == "seed":
        stores.offices.set_all(generate_seed_offices())
        stores.offices.set_initialized(True)
        stores.employees.set_all(generate_seed_employees(geocoder))
        stores.employees.set_initialized(True)
        return EXIT_SUCCESS
    if args.command == "clear":
        for collection in _selected(args):
            getattr(stores, collection).clear()
        return EXIT_SUCCESS
    if args.command == "list":
        return _run_list(args, stores)
    if args.command == "distances":
        return _run_distances(args, stores, logger, run_id)
    if args.command == "upgrade-accuracy":
        return _run_upgrade(args, settings, stores, logger, run_id)
    raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    data_dir = Path(args.data_dir)

    settings = load_settings(config_dir, data_dir=data_dir, overlay_config_dir=overlay_config_dir)
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level or settings.log_level)
    log_event(logger, "command start", run_id=run_id, command=args.command, event="COMMAND_START", status="ok")

    try:
        geocoder = _build_geocoder(settings)
        stores = open_stores(build_storage(settings))
        exit_code = execute_command(args, settings, stores, geocoder, logger, run_id)
    except OfficeGeoError as exc:
        log_event(
            logger,
            str(exc),
            run_id=run_id,
            command=args.command,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    log_event(logger, "command end", run_id=run_id, command=args.command, event="COMMAND_END", status="ok")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except OfficeGeoError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
