from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from file_arrival.excel.row_store import RowStore
from file_arrival.logging.error_log import ErrorLogBuffer
from file_arrival.models.config_models import ColumnLayout
from file_arrival.models.row_data import FileMetaRow
from file_arrival.services.arrival import format_timestamp
from file_arrival.services.scanner import (
    DirectoryEntry,
    is_scan_eligible,
    list_directory,
    scan_pass,
    scan_row,
    select_directories,
    threshold_from_percent,
)

NOW = datetime(2024, 6, 14, 16, 30)


def _row(**kw) -> FileMetaRow:
    base = dict(row_number=2, file_name="report_2024.csv", is_active=True, transfer_method="A")
    base.update(kw)
    return FileMetaRow(**base)


def _lister(listing: dict[str, list[DirectoryEntry]]):
    def _list(directory: str) -> list[DirectoryEntry]:
        if directory not in listing:
            raise FileNotFoundError(2, "No such file or directory", directory)
        return listing[directory]
    return _list


def test_list_directory_sorted_non_recursive(tmp_path: Path, touch_file):
    touch_file(tmp_path / "b.csv", NOW)
    touch_file(tmp_path / "a.csv", NOW)
    touch_file(tmp_path / "sub" / "nested.csv", NOW)
    entries = list_directory(str(tmp_path))
    assert [e.name for e in entries] == ["a.csv", "b.csv", "sub"]
    assert entries[0].modified == NOW


def test_list_directory_missing_raises(tmp_path: Path):
    with pytest.raises(OSError):
        list_directory(str(tmp_path / "nope"))


def test_select_directories_policies():
    row = _row(archive_directory="/arch", stage_directory="/stage")
    assert select_directories(row, "both") == ["/arch", "/stage"]
    assert select_directories(row, "fallback") == ["/arch"]
    only_stage = _row(stage_directory="/stage")
    assert select_directories(only_stage, "both") == ["/stage"]
    assert select_directories(only_stage, "fallback") == ["/stage"]
    assert select_directories(_row(), "both") == []
    with pytest.raises(ValueError):
        select_directories(row, "newest")


def test_is_scan_eligible():
    assert is_scan_eligible(_row(transfer_method="A"), ("A",))
    assert not is_scan_eligible(_row(transfer_method="N"), ("A",))
    assert is_scan_eligible(_row(transfer_method="N"), ("A", "N"))
    assert not is_scan_eligible(_row(is_active=False), ("A",))
    assert not is_scan_eligible(_row(transfer_method="Automatic"), ("A",))


def test_threshold_from_percent():
    assert threshold_from_percent(90) == pytest.approx(0.9)
    assert threshold_from_percent(0) == 0.0
    assert threshold_from_percent(100) == 1.0
    with pytest.raises(ValueError):
        threshold_from_percent(101)
    with pytest.raises(ValueError):
        threshold_from_percent(-1)


def test_scan_row_matches_file_modified_today():
    entry = DirectoryEntry("report_2024.csv", NOW - timedelta(hours=2))
    outcome = scan_row(
        _row(stage_directory="/stage"), 0.9, NOW, lister=_lister({"/stage": [entry]})
    )
    assert outcome.match is not None
    assert outcome.match.directory == "/stage"
    assert outcome.match.score == 1.0
    assert outcome.match.timestamp == "06/14/2024 2:30 PM"


def test_scan_row_ignores_yesterday():
    entry = DirectoryEntry("report_2024.csv", NOW - timedelta(days=1))
    outcome = scan_row(
        _row(stage_directory="/stage"), 0.9, NOW, lister=_lister({"/stage": [entry]})
    )
    assert outcome.match is None


def test_scan_row_below_threshold():
    entry = DirectoryEntry("invoice.pdf", NOW)
    outcome = scan_row(
        _row(stage_directory="/stage"), 0.5, NOW, lister=_lister({"/stage": [entry]})
    )
    assert outcome.match is None


def test_scan_row_last_writer_wins_across_directories():
    early = DirectoryEntry("report_2024.csv", NOW.replace(hour=8))
    late = DirectoryEntry("report_2024.csv", NOW.replace(hour=9))
    outcome = scan_row(
        _row(archive_directory="/arch", stage_directory="/stage"),
        0.9,
        NOW,
        lister=_lister({"/arch": [late], "/stage": [early]}),
    )
    # archive -> stage の順で走査、stage の一致が最後
    assert outcome.match is not None
    assert outcome.match.directory == "/stage"
    assert outcome.match.entry is early


def test_scan_row_fallback_policy_skips_stage():
    entry = DirectoryEntry("report_2024.csv", NOW)
    outcome = scan_row(
        _row(archive_directory="/arch", stage_directory="/stage"),
        0.9,
        NOW,
        policy="fallback",
        lister=_lister({"/arch": [], "/stage": [entry]}),
    )
    assert outcome.match is None


def test_scan_row_listing_error_is_treated_as_empty():
    entry = DirectoryEntry("report_2024.csv", NOW)
    outcome = scan_row(
        _row(archive_directory="/missing", stage_directory="/stage"),
        0.9,
        NOW,
        lister=_lister({"/stage": [entry]}),
    )
    assert outcome.match is not None
    assert [d for d, _ in outcome.listing_errors] == ["/missing"]


def test_scan_pass_updates_registry(make_registry, temp_workdir: Path, touch_file):
    now = datetime.now()
    touch_file(temp_workdir / "stage" / "report_2024.csv", now)
    touch_file(temp_workdir / "archive" / "old_report.csv", now - timedelta(days=1))
    path = make_registry(
        [
            {
                "file_name": "report_2024.csv", "is_active": True, "transfer_method": "A",
                "stage_directory": str(temp_workdir / "stage"),
            },
            {
                "file_name": "old_report.csv", "is_active": True, "transfer_method": "A",
                "archive_directory": str(temp_workdir / "archive"),
            },
            {
                "file_name": "report_2024.csv", "is_active": True, "transfer_method": "M",
                "stage_directory": str(temp_workdir / "stage"),
            },
            {
                "file_name": "gone.csv", "is_active": True, "transfer_method": "A",
                "stage_directory": str(temp_workdir / "missing"),
            },
        ]
    )
    store = RowStore.open(path, ColumnLayout())
    error_log = ErrorLogBuffer()
    counts = scan_pass(store, 0.9, now, error_log=error_log)

    assert counts.eligible_rows == 3
    assert counts.updated_rows == 1
    assert store.read_text(2, "transfer_method") == "Automatic"
    stamp = store.read_text(2, "timestamp")
    assert stamp == format_timestamp(now)
    assert store.read_text(3, "transfer_method") == "A"
    assert store.read_text(4, "transfer_method") == "M"
    assert store.read_text(5, "transfer_method") == "A"
    assert len(error_log) == 1
    assert error_log.total_appended == 1


def test_scan_pass_eligible_codes_variant(make_registry, temp_workdir: Path, touch_file):
    now = datetime.now()
    touch_file(temp_workdir / "stage" / "feed.txt", now)
    path = make_registry(
        [{"file_name": "feed.txt", "is_active": True, "transfer_method": "N",
          "stage_directory": str(temp_workdir / "stage")}]
    )
    store = RowStore.open(path, ColumnLayout())
    assert scan_pass(store, 0.9, now).updated_rows == 0
    assert scan_pass(store, 0.9, now, eligible_codes=("A", "N")).updated_rows == 1
    assert store.read_text(2, "transfer_method") == "Automatic"
