# Shared pytest fixtures
from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pytest
from openpyxl import Workbook

from file_arrival.models.config_models import ColumnLayout

HEADERS = {
    "file_name": "File Name",
    "availability": "Availability",
    "unavailable_days": "Day Unavailable",
    "is_active": "Active",
    "transfer_method": "Transfer Method",
    "timestamp": "Timestamp",
    "stage_directory": "Staging Directory",
    "archive_directory": "Archive Directory",
}


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "stage").mkdir()
        (p / "archive").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheet: FILE META
columns:
  file_name: A
  availability: G
  unavailable_days: H
  is_active: K
  transfer_method: L
  timestamp: M
  stage_directory: X
  archive_directory: AA
match_threshold_percent: 90
normalize:
  override_with_code: false
scan:
  eligible_codes: [A]
  directory_policy: both
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "file_arrival.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_registry(temp_workdir: Path) -> Callable[..., Path]:
    """Build a FILE META workbook: header in row 1, one dict per data row."""
    def _make(
        rows: list[dict[str, Any]],
        name: str = "file_meta.xlsx",
        layout: ColumnLayout | None = None,
    ) -> Path:
        layout = layout or ColumnLayout()
        wb = Workbook()
        ws = wb.active
        ws.title = layout.sheet
        for field_name, header in HEADERS.items():
            ws[layout.cell(field_name, 1)] = header
        for offset, row in enumerate(rows, start=2):
            for field_name, value in row.items():
                ws[layout.cell(field_name, offset)] = value
        path = temp_workdir / "data" / name
        wb.save(path)
        return path
    return _make


@pytest.fixture()
def touch_file() -> Callable[[Path, datetime], Path]:
    """Create (or update) a file and set its modification time."""
    def _touch(path: Path, when: datetime) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"payload")
        ts = when.timestamp()
        os.utime(path, (ts, ts))
        return path
    return _touch
