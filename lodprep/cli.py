#!/usr/bin/env python3
"""lodprep analysis CLI entrypoint: raw I/Q samples -> frequency feature rows."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Optional

from lodprep.analysis.runner import run_analysis
from lodprep.config import PipelineConfig, build_config
from lodprep.errors import AcquisitionFailure, ConfigurationError, PersistenceFailure
from lodprep.io.store import Store
from lodprep.util.exit_codes import ExitCode
from lodprep.util.logging import configure_logging, get_logger, log_exception

_WINDOW_FLAGS = ("hamming", "blackman", "blackman_harris")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        prog="lodprep",
        description="Window raw sensor I/Q blocks and store their FFT magnitudes as training values",
        argument_default=argparse.SUPPRESS,
    )
    p.add_argument("database", help="SQLite database file to use (must exist)")

    group = p.add_mutually_exclusive_group()
    group.add_argument("--hamming", action="store_true", help="Use the Hamming window function")
    group.add_argument("--blackman", action="store_true", help="Use the Blackman window function")
    group.add_argument(
        "--blackman-harris",
        dest="blackman_harris",
        action="store_true",
        help="Use the 4-term Blackman-Harris window function",
    )

    p.add_argument("--config", type=str, help="JSON file with pipeline settings (overridden by flags)")
    p.add_argument("--block-size", dest="block_size", type=int, help="Samples per block N (default 64)")
    p.add_argument(
        "--sampling-interval",
        dest="sampling_interval_s",
        type=float,
        help="Seconds covered by one block of N samples (default 52.39e-3)",
    )
    p.add_argument(
        "--frequency-mode",
        dest="frequency_mode",
        choices=["centered", "uncentered"],
        help="Bin-to-frequency mapping; centered folds upper bins to negative frequencies (default centered)",
    )
    p.add_argument(
        "--measurement",
        dest="measurement_ids",
        type=int,
        action="append",
        help="Measurement id to process; repeat for several (default: all stored)",
    )

    sensors = p.add_mutually_exclusive_group()
    sensors.add_argument("--sensors", dest="sensor_count", type=int, help="Process sensor ids 1..COUNT")
    sensors.add_argument(
        "--sensor",
        dest="sensor_ids",
        type=int,
        action="append",
        help="Sensor id to process; repeat for several (default: all stored)",
    )

    p.add_argument("--workers", type=int, help="Analyse sensors on this many threads (default 1)")
    p.add_argument("--log-level", dest="log_level", type=str, help="DEBUG, INFO, WARNING or ERROR")
    p.add_argument("--log-json", dest="log_json", type=str, help="Append JSON-lines logs to this file")

    args = p.parse_args(argv)

    if getattr(args, "sensor_count", None) is not None and args.sensor_count < 1:
        p.error("--sensors must be >= 1")

    try:
        args.pipeline_config = build_config(
            config_file=getattr(args, "config", None),
            cli_overrides=_cli_overrides(args),
        )
    except ConfigurationError as exc:
        p.error(str(exc))

    return args


def _cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for attr in ("block_size", "sampling_interval_s", "frequency_mode", "measurement_ids", "sensor_ids", "workers"):
        if hasattr(args, attr):
            overrides[attr] = getattr(args, attr)
    if hasattr(args, "sensor_count"):
        overrides["sensor_ids"] = list(range(1, args.sensor_count + 1))
    for flag in _WINDOW_FLAGS:
        if getattr(args, flag, False):
            overrides["window"] = flag.replace("_", "-")
    return overrides


def run(args: argparse.Namespace) -> int:
    """Execute one analysis run and map failures onto exit codes."""
    logger = get_logger(__name__)
    config: PipelineConfig = args.pipeline_config
    try:
        store = Store(args.database)
    except AcquisitionFailure:
        log_exception(logger, f"Cannot open database {args.database}", error_type="acquisition", operation="open database")
        return ExitCode.ACQUISITION_ERROR
    try:
        summary = run_analysis(config, store)
    except AcquisitionFailure as exc:
        log_exception(logger, "Reading raw samples failed", error_type="acquisition", operation=exc.operation)
        return ExitCode.ACQUISITION_ERROR
    except PersistenceFailure as exc:
        log_exception(logger, "Writing feature rows failed", error_type="persistence", operation=exc.operation)
        return ExitCode.PERSISTENCE_ERROR
    except Exception:
        log_exception(logger, "Analysis run aborted", error_type="unexpected")
        return ExitCode.GENERAL_ERROR
    finally:
        store.close()

    print(
        f"[lodprep] measurements={summary.measurements} sensors={summary.sensors_processed} "
        f"skipped={summary.sensors_skipped} empty={summary.sensors_empty} rows={summary.rows_written}",
        flush=True,
    )
    return ExitCode.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(level=getattr(args, "log_level", None), json_file=getattr(args, "log_json", None))
    code = run(args)
    if code != ExitCode.SUCCESS:
        get_logger(__name__).error("Exiting with code %d (%s)", code, ExitCode.message(code))
    return code


if __name__ == "__main__":
    sys.exit(main())
