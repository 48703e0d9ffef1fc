"""CLI entrypoint for the BoM précis forecast and agricultural bulletin feeds."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

from bomfeeds.common.config_loader import Settings, load_settings
from bomfeeds.common.constants import ALL_REGIONS, COMMANDS, EXIT_BAD_INPUT, EXIT_HARD_FAIL, EXIT_SUCCESS
from bomfeeds.common.errors import InputError, PipelineError
from bomfeeds.common.http import HttpClient
from bomfeeds.common.logging import build_logger, close_logger, log_event
from bomfeeds.common.time_utils import elapsed_ms, generate_run_id
from bomfeeds.pipeline.bulletin import BULLETIN_COLUMNS
from bomfeeds.pipeline.export import write_table_csv
from bomfeeds.pipeline.forecast import FORECAST_COLUMNS
from bomfeeds.pipeline.locations import load_location_table
from bomfeeds.pipeline.orchestrate import (
    FeedSource,
    HttpFeedSource,
    get_ag_bulletin,
    get_precis_forecast,
    resolve_region,
)
from bomfeeds.pipeline.reports import summarise_rows, write_run_summary
from bomfeeds.pipeline.stations import StationIndex


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--region", default=ALL_REGIONS)
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lon", type=float, default=None)
    parser.add_argument("--name", default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--max-workers", type=int, default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    args = parser.parse_args(argv)
    if args.command == "station":
        has_point = args.lat is not None and args.lon is not None
        if not has_point and not args.name:
            parser.error("station requires --lat and --lon, or --name")
    return args


def _fetch_rows(
    args: argparse.Namespace,
    settings: Settings,
    logger: logging.Logger,
    source: FeedSource,
) -> tuple[list[dict], str, tuple[str, ...], str]:
    max_workers = args.max_workers or settings.max_workers
    if args.command == "precis":
        towns = load_location_table(settings.forecast_towns_path)
        rows = get_precis_forecast(args.region, source, towns, max_workers=max_workers, logger=logger)
        return rows, "aac", FORECAST_COLUMNS, settings.precis_filename
    stations = load_location_table(settings.bulletin_stations_path)
    rows = get_ag_bulletin(args.region, source, stations, max_workers=max_workers, logger=logger)
    return rows, "site", BULLETIN_COLUMNS, settings.bulletin_filename


def run_station(args: argparse.Namespace, settings: Settings, logger: logging.Logger) -> int:
    stations = load_location_table(settings.bulletin_stations_path)
    index = StationIndex(stations, name_cutoff=settings.name_cutoff, logger=logger)
    if args.name:
        match = index.match_name(args.name)
    else:
        match = index.nearest(args.lat, args.lon)
    print(json.dumps(match.to_dict(), ensure_ascii=False))
    return EXIT_SUCCESS


def run_feed_command(
    args: argparse.Namespace,
    settings: Settings,
    logger: logging.Logger,
    run_id: str,
    source: FeedSource | None = None,
) -> int:
    region = resolve_region(args.region)
    if source is None:
        with HttpClient(timeout=settings.timeout, retry=settings.retry) as client:
            rows, location_key, columns, filename = _fetch_rows(
                args, settings, logger, HttpFeedSource(client, settings.base_url)
            )
    else:
        rows, location_key, columns, filename = _fetch_rows(args, settings, logger, source)

    data_dir = Path(args.data_dir)
    out_path = write_table_csv(data_dir / "out" / filename.format(region=region.lower()), columns, rows)
    joined_column = "town" if args.command == "precis" else "station"
    counts = summarise_rows(rows, location_key=location_key, joined_column=joined_column)
    write_run_summary(
        data_dir,
        run_id=run_id,
        command=args.command,
        region=region,
        output_path=out_path,
        counts=counts,
    )
    if counts["unmatched_locations"]:
        log_event(
            logger,
            f"{len(counts['unmatched_locations'])} locations missing from the reference table",
            level=logging.WARNING,
            run_id=run_id,
            command=args.command,
            region=region,
            event="LOCATIONS_UNMATCHED",
            status="warning",
        )
    return EXIT_SUCCESS


def _run_logged(args: argparse.Namespace, logger: logging.Logger, run_id: str, source: FeedSource | None) -> int:
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    started = time.monotonic()
    log_event(logger, "command start", run_id=run_id, command=args.command, event="COMMAND_START", status="ok")

    try:
        settings = load_settings(config_dir, overlay_config_dir=overlay_config_dir)
        if args.command == "station":
            exit_code = run_station(args, settings, logger)
        else:
            exit_code = run_feed_command(args, settings, logger, run_id, source)
    except InputError as exc:
        log_event(
            logger,
            str(exc),
            level=logging.ERROR,
            run_id=run_id,
            command=args.command,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_BAD_INPUT
    except PipelineError as exc:
        log_event(
            logger,
            str(exc),
            level=logging.ERROR,
            run_id=run_id,
            command=args.command,
            event="COMMAND_FAIL",
            status="error",
            error_code=exc.error_code,
        )
        return EXIT_HARD_FAIL

    log_event(
        logger,
        "command end",
        run_id=run_id,
        command=args.command,
        event="COMMAND_END",
        status="ok",
        duration_ms=elapsed_ms(started),
    )
    return exit_code


def run_command(args: argparse.Namespace, source: FeedSource | None = None) -> int:
    run_id = args.run_id or generate_run_id()
    logger = build_logger(run_id, data_dir=Path(args.data_dir), level=args.log_level)
    try:
        return _run_logged(args, logger, run_id, source)
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
