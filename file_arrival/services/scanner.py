from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from file_arrival.excel.row_store import RowStore
from file_arrival.logging.error_log import ErrorLogBuffer
from file_arrival.models.error_record import ErrorRecord
from file_arrival.models.processing_result import PassCounts
from file_arrival.models.row_data import FileMetaRow
from file_arrival.models.transfer_method import TransferMethod
from file_arrival.services.arrival import arrived_today, format_timestamp, modified_at
from file_arrival.services.progress import ProgressTracker
from file_arrival.services.similarity import compare_strings

"""Scan pass: detect expected files that arrived today.

For every active row whose transfer method is one of the eligible codes, the
row's directories are listed (non-recursive). An entry matches when its name
scores at least ``threshold`` against the expected file name and it was
modified today. Every match overwrites the previous one (last writer wins);
the final match sets the row to ``Automatic`` and stamps the entry's
modification time.

Directory policies:
- both:     archive directory, then stage directory, each when non-empty
- fallback: archive directory if non-empty, otherwise stage directory
"""

__all__ = [
    "DirectoryEntry",
    "ScanMatch",
    "ScanOutcome",
    "list_directory",
    "select_directories",
    "is_scan_eligible",
    "threshold_from_percent",
    "scan_row",
    "scan_pass",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    name: str
    modified: datetime  # local naive


@dataclass(frozen=True)
class ScanMatch:
    directory: str
    entry: DirectoryEntry
    score: float

    @property
    def timestamp(self) -> str:
        return format_timestamp(self.entry.modified)


@dataclass
class ScanOutcome:
    match: ScanMatch | None = None
    listing_errors: list[tuple[str, str]] = field(default_factory=list)  # (directory, message)


DirectoryLister = Callable[[str], Iterable[DirectoryEntry]]


def list_directory(path: str) -> list[DirectoryEntry]:
    """Immediate entries of ``path`` sorted by name.

    Raises:
        OSError: directory missing, not a directory, or unreadable
    """
    entries = []
    for p in sorted(Path(path).iterdir(), key=lambda p: p.name):
        # lstat: リンク切れシンボリックリンクでも一覧を止めない
        entries.append(DirectoryEntry(name=p.name, modified=modified_at(p.lstat().st_mtime)))
    return entries


def select_directories(row: FileMetaRow, policy: str = "both") -> list[str]:
    archive, stage = row.directories
    if policy == "fallback":
        chosen = archive or stage
        return [chosen] if chosen else []
    if policy == "both":
        return [d for d in (archive, stage) if d]
    raise ValueError(f"unknown directory policy: {policy}")


def is_scan_eligible(row: FileMetaRow, eligible_codes: Iterable[str]) -> bool:
    return row.is_active and row.transfer_method in tuple(eligible_codes)


def threshold_from_percent(percent: float) -> float:
    """Convert an operator supplied 0-100 percentage to the 0-1 score scale."""
    if not 0 <= percent <= 100:
        raise ValueError(f"match threshold must be between 0 and 100 percent: {percent}")
    return percent / 100.0


def scan_row(
    row: FileMetaRow,
    threshold: float,
    now: datetime,
    *,
    policy: str = "both",
    lister: DirectoryLister = list_directory,
) -> ScanOutcome:
    """Scan the row's directories; listing failures count as empty directories."""
    outcome = ScanOutcome()
    for directory in select_directories(row, policy):
        try:
            entries = list(lister(directory))
        except OSError as e:
            logger.warning(f"row={row.row_number} cannot list {directory}: {e}")
            outcome.listing_errors.append((directory, str(e)))
            entries = []

        for entry in entries:
            score = compare_strings(entry.name, row.file_name)
            if score >= threshold and arrived_today(entry.modified, now):
                outcome.match = ScanMatch(directory=directory, entry=entry, score=score)
                logger.info(f"Automatic:{row.file_name} {directory}")
    return outcome


def scan_pass(
    store: RowStore,
    threshold: float,
    now: datetime,
    *,
    eligible_codes: Iterable[str] = (TransferMethod.AUTOMATIC.code,),
    policy: str = "both",
    error_log: ErrorLogBuffer | None = None,
    progress: ProgressTracker | None = None,
    lister: DirectoryLister = list_directory,
) -> PassCounts:
    codes = tuple(eligible_codes)
    counts = PassCounts()
    for row_number in range(1, store.row_count() + 1):
        if progress is not None:
            progress.start_row(row_number)
        counts.total_rows += 1

        row = store.read_row(row_number)
        if row.is_active:
            counts.active_rows += 1
        if is_scan_eligible(row, codes):
            counts.eligible_rows += 1
            outcome = scan_row(row, threshold, now, policy=policy, lister=lister)
            if error_log is not None:
                for directory, message in outcome.listing_errors:
                    error_log.append(
                        ErrorRecord.create(
                            store=store.name,
                            sheet=store.layout.sheet,
                            row=row_number,
                            error_type="DIRECTORY_LIST_ERROR",
                            message=f"{directory}: {message}",
                        )
                    )
            if outcome.match is not None:
                store.write_text(row_number, "transfer_method", TransferMethod.AUTOMATIC.label)
                store.write_text(row_number, "timestamp", outcome.match.timestamp)
                counts.updated_rows += 1

        if progress is not None:
            progress.finish_row()
    return counts
