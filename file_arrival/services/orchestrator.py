from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from file_arrival.excel.row_store import RowStore, RowStoreError, RowStoreSaveError
from file_arrival.logging.error_log import ErrorLogBuffer
from file_arrival.models.config_models import AppConfig
from file_arrival.models.error_record import STORE_LEVEL_ROW, ErrorRecord
from file_arrival.models.processing_result import PassCounts, PassResult
from file_arrival.services.normalizer import normalize_pass
from file_arrival.services.progress import ProgressTracker
from file_arrival.services.scanner import scan_pass

"""Service orchestration for the FILE META arrival checker.

A run opens the registry workbook once. Each pass visits every row in order
and saves the workbook at its end:

    combined  -> normalize pass, then scan pass
    normalize -> normalize pass only
    scan      -> scan pass only

A store that cannot be opened aborts the run (ProcessingError). A failed save
is logged and recorded; the run continues and the pass reports saved=False.
The next pass works on the in-memory workbook, so its save writes the
changes of both passes.
"""

__all__ = [
    "MODES",
    "ProcessingError",
    "run_normalize_pass",
    "run_scan_pass",
    "run",
]

logger = logging.getLogger(__name__)

MODES: tuple[str, ...] = ("combined", "normalize", "scan")


class ProcessingError(Exception):
    """Fatal error that prevents a pass from running."""


def _open_store(path: Path, config: AppConfig, error_log: ErrorLogBuffer) -> RowStore:
    try:
        return RowStore.open(path, config.layout, error_log=error_log)
    except RowStoreError as e:
        error_log.append(
            ErrorRecord.create(
                store=Path(path).name,
                sheet=config.layout.sheet,
                row=STORE_LEVEL_ROW,
                error_type="STORE_OPEN_ERROR",
                message=str(e),
            )
        )
        raise ProcessingError(str(e)) from e


def _run_pass(
    pass_name: str,
    store: RowStore,
    config: AppConfig,
    error_log: ErrorLogBuffer,
    body: Callable[[RowStore, ProgressTracker], PassCounts],
) -> PassResult:
    start_time = datetime.now(UTC)
    errors_before = error_log.total_appended

    logger.info(f"{pass_name}: {store.name} sheet={config.layout.sheet} rows={store.row_count()}")

    with ProgressTracker(store.row_count(), description=pass_name) as progress:
        counts = body(store, progress)
        progress.set_postfix(updated=counts.updated_rows)

    saved = True
    try:
        store.save()
    except RowStoreSaveError as e:
        saved = False
        logger.error(f"save: {e}")
        error_log.append(
            ErrorRecord.create(
                store=store.name,
                sheet=config.layout.sheet,
                row=STORE_LEVEL_ROW,
                error_type="SAVE_ERROR",
                message=str(e),
            )
        )

    end_time = datetime.now(UTC)
    return PassResult(
        pass_name=pass_name,
        store=store.name,
        total_rows=counts.total_rows,
        active_rows=counts.active_rows,
        eligible_rows=counts.eligible_rows,
        updated_rows=counts.updated_rows,
        error_count=error_log.total_appended - errors_before,
        saved=saved,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )


def run_normalize_pass(
    store_path: Path,
    config: AppConfig,
    today: str,
    error_log: ErrorLogBuffer,
    *,
    store: RowStore | None = None,
) -> PassResult:
    """Run the normalize pass; ``store`` reuses a workbook opened by the caller."""
    if store is None:
        store = _open_store(store_path, config, error_log)
    return _run_pass(
        "normalize",
        store,
        config,
        error_log,
        lambda store, progress: normalize_pass(
            store,
            today,
            override_with_code=config.normalize.override_with_code,
            progress=progress,
        ),
    )


def run_scan_pass(
    store_path: Path,
    config: AppConfig,
    threshold: float,
    error_log: ErrorLogBuffer,
    now: datetime | None = None,
    *,
    store: RowStore | None = None,
) -> PassResult:
    """Run the scan pass; ``now`` (local naive) defaults to the pass start."""
    if store is None:
        store = _open_store(store_path, config, error_log)
    if now is None:
        now = datetime.now()
    return _run_pass(
        "scan",
        store,
        config,
        error_log,
        lambda store, progress: scan_pass(
            store,
            threshold,
            now,
            eligible_codes=config.scan.eligible_codes,
            policy=config.scan.directory_policy,
            error_log=error_log,
            progress=progress,
        ),
    )


def run(
    store_path: Path,
    config: AppConfig,
    mode: str = "combined",
    *,
    today: str,
    threshold: float,
    now: datetime | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> list[PassResult]:
    """Run the passes selected by ``mode`` and flush the error log once.

    The workbook is opened once and shared by both passes, so the scan pass
    sees the normalize pass's values (and formula results cached at open)
    even when the intermediate save fails.

    Raises:
        ProcessingError: unknown mode, or the registry could not be opened
    """
    if mode not in MODES:
        raise ProcessingError(f"unknown mode: {mode}")
    if error_log is None:
        error_log = ErrorLogBuffer()

    results: list[PassResult] = []
    try:
        store = _open_store(store_path, config, error_log)
        if mode in ("combined", "normalize"):
            results.append(run_normalize_pass(store_path, config, today, error_log, store=store))
        if mode in ("combined", "scan"):
            results.append(
                run_scan_pass(store_path, config, threshold, error_log, now=now, store=store)
            )
    finally:
        try:
            written = error_log.flush()
        except OSError as e:
            logger.warning(f"error log flush failed: {e}")
        else:
            if written is not None:
                logger.info(f"error log: {written}")
    return results
