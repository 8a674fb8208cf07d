#!/usr/bin/env python3
"""Populate a measurement database with deterministic synthetic I/Q blocks."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from lodprep.config import build_config
from lodprep.errors import AcquisitionFailure, ConfigurationError, PersistenceFailure
from lodprep.io.store import Store
from lodprep.io.synthetic import populate
from lodprep.util.exit_codes import ExitCode
from lodprep.util.logging import configure_logging, get_logger, log_exception


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="lodprep-build-db",
        description="Fill the measured_values table with synthetic cos/sin blocks",
    )
    p.add_argument("database", help="SQLite database file to use (created if missing)")
    p.add_argument("-s", "--sensors", type=int, default=5, help="Count of sensors (default 5)")
    p.add_argument("-m", "--measurements", type=int, default=10, help="Count of measurements (default 10)")
    p.add_argument("-b", "--blocks", type=int, default=None, help="Blocks per sensor (default 16)")
    p.add_argument("--config", type=str, default=None, help="JSON file with pipeline settings")
    p.add_argument("--block-size", dest="block_size", type=int, default=None, help="Samples per block N (default 64)")
    p.add_argument("--log-level", dest="log_level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR")

    args = p.parse_args(argv)
    if args.sensors < 1:
        p.error("--sensors must be >= 1")
    if args.measurements < 1:
        p.error("--measurements must be >= 1")
    try:
        args.pipeline_config = build_config(
            config_file=args.config,
            cli_overrides={"block_size": args.block_size, "blocks_per_sensor": args.blocks},
        )
    except ConfigurationError as exc:
        p.error(str(exc))
    return args


def run(args: argparse.Namespace) -> int:
    logger = get_logger(__name__)
    measurement_ids = list(range(1, args.measurements + 1))
    sensor_ids = list(range(1, args.sensors + 1))
    try:
        store = Store(args.database, create=True)
    except AcquisitionFailure:
        log_exception(logger, f"Cannot open database {args.database}", error_type="acquisition", operation="open database")
        return ExitCode.ACQUISITION_ERROR
    try:
        populate(store, args.pipeline_config, measurement_ids, sensor_ids)
    except PersistenceFailure as exc:
        log_exception(logger, "Writing synthetic values failed", error_type="persistence", operation=exc.operation)
        return ExitCode.PERSISTENCE_ERROR
    except Exception:
        log_exception(logger, "Database build aborted", error_type="unexpected")
        return ExitCode.GENERAL_ERROR
    finally:
        store.close()
    logger.info("Finished")
    return ExitCode.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    code = run(args)
    if code != ExitCode.SUCCESS:
        get_logger(__name__).error("Exiting with code %d (%s)", code, ExitCode.message(code))
    return code


if __name__ == "__main__":
    sys.exit(main())
