from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from file_arrival.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    default_config,
    load_config,
)
from file_arrival.logging.init import log_summary, setup_logging
from file_arrival.models.config_models import AppConfig
from file_arrival.services.orchestrator import MODES, ProcessingError, run
from file_arrival.services.scanner import threshold_from_percent
from file_arrival.services.summary import SUMMARY_PREFIX, render_summary_line

"""CLI entrypoint.

    file-arrival STORE [--mode combined|normalize|scan] [--threshold PERCENT]
                       [--day DAYNAME] [--config PATH] [--debug] [--inspect-data]

Scheduled jobs written against the older positional interface keep working;
exactly three bare arguments are read as one of:

    STORE THRESHOLD DAY    combined run
    1 STORE DAY            normalize pass only
    2 STORE THRESHOLD      scan pass only

A legacy THRESHOLD of at most 1 is the score fraction those jobs pass (0.8);
larger values are percentages (80).
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


class UsageError(Exception):
    pass


class ArrivalArgumentParser(argparse.ArgumentParser):
    # argparse 既定の exit(2) は部分失敗コードと衝突するため例外化
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = ArrivalArgumentParser(
        prog="file-arrival",
        description="FILE META registry: normalize transfer methods and detect today's arrivals",
    )
    p.add_argument("store", help="Registry workbook (.xlsx)")
    p.add_argument("--mode", choices=MODES, default="combined", help="Passes to run")
    p.add_argument(
        "--threshold", type=float, default=None,
        help="File name match threshold in percent (0-100, default from config)",
    )
    p.add_argument("--day", default=None, help="Today's day name (default: local weekday)")
    p.add_argument("--config", default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print registry header & first rows then exit")
    return p.parse_args(argv)


def _legacy_namespace(store: str, mode: str, threshold: float | None, day: str | None) -> argparse.Namespace:
    return argparse.Namespace(
        store=store, mode=mode, threshold=threshold, day=day,
        config=None, debug=False, inspect_data=False,
    )


def _parse_legacy_threshold(text: str) -> float:
    """Legacy threshold argument as a percentage.

    Older jobs pass the 0-1 score fraction (``0.8``); values up to 1 are read
    that way, larger values as a percentage (``80``).
    """
    try:
        value = float(text)
    except ValueError as e:
        raise UsageError(f"invalid match threshold: {text!r}") from e
    if 0 <= value <= 1:
        return round(value * 100, 9)
    return value


def parse_legacy_args(argv: list[str]) -> argparse.Namespace | None:
    """Translate the positional interface; None when ``argv`` is not of that form."""
    if len(argv) != 3 or any(a.startswith("-") for a in argv):
        return None
    first, second, third = argv
    if first == "1":
        return _legacy_namespace(second, "normalize", None, third)
    if first == "2":
        return _legacy_namespace(second, "scan", _parse_legacy_threshold(third), None)
    return _legacy_namespace(first, "combined", _parse_legacy_threshold(second), third)


def default_day_name(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%A")


def _load_cli_config(config_arg: str | None) -> AppConfig:
    if config_arg is not None:
        return load_config(Path(config_arg))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _inspect_data(store_path: Path, cfg: AppConfig) -> int:
    from file_arrival.excel.reader import RegistrySheetError, preview_registry, read_registry_frame

    if not store_path.exists():
        print(f"inspect: registry not found: {store_path}")
        return EXIT_FATAL
    try:
        df = read_registry_frame(store_path, cfg.layout.sheet)
        preview = preview_registry(df, cfg.layout)
    except RegistrySheetError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    except Exception as e:  # pragma: no cover
        print(f"inspect: read_error: {e}")
        return EXIT_FATAL

    print(f"FILE: {store_path.name}")
    print(f"  SHEET: {preview.sheet_name} headers={preview.headers}")
    for row in preview.rows:
        # datetime を含む場合は isoformat へ
        safe = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.items()}
        print(f"    {safe}")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] は None と区別する (pytest 引数の混入防止)
    if argv is None:
        argv = sys.argv[1:]
    try:
        args = parse_legacy_args(argv) or _parse_args(argv)
    except UsageError as e:
        logger.error(f"usage: {e}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    try:
        cfg = _load_cli_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    store_path = Path(args.store)
    if args.inspect_data:
        return _inspect_data(store_path, cfg)

    percent = args.threshold if args.threshold is not None else cfg.match_threshold_percent
    try:
        threshold = threshold_from_percent(percent)
    except ValueError as e:
        logger.error(f"usage: {e}")
        return EXIT_FATAL
    day = args.day or default_day_name()

    logger.info(f"Processing registry: {store_path} mode={args.mode}")
    logger.debug(f"day={day} threshold={threshold}")

    try:
        results = run(store_path, cfg, args.mode, today=day, threshold=threshold)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    for result in results:
        log_summary(render_summary_line(result)[len(SUMMARY_PREFIX):])

    if any(not r.saved for r in results):
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
