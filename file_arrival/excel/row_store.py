from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from file_arrival.logging.error_log import ErrorLogBuffer
from file_arrival.models.config_models import ColumnLayout
from file_arrival.models.error_record import ErrorRecord
from file_arrival.models.row_data import FileMetaRow

"""Row store backed by the FILE META workbook.

Cells are addressed by (sheet, column letter, 1-based row) through the injected
ColumnLayout. Reads never abort a pass: a failing cell is logged, recorded in
the error log and read as "" / False. Open failures are fatal for the run;
save failures are reported to the caller.

The workbook is loaded twice. Reads come from the ``data_only`` copy, so a
formula cell reads as the value the sheet shows (its cached result); writes go
to both copies and only the formula-preserving copy is saved. openpyxl does
not recalculate, so formula cells of a workbook last saved by this tool have no
cached result and read as "" until the sheet is recalculated in Excel.
"""

__all__ = [
    "RowStore",
    "RowStoreError",
    "RowStoreSaveError",
    "cell_to_text",
    "parse_bool",
]

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})


class RowStoreError(Exception):
    """Raised when the workbook cannot be opened or lacks the registry sheet."""


class RowStoreSaveError(Exception):
    """Raised when the workbook cannot be written back."""


def cell_to_text(value: Any) -> str:
    """Render a cell value the way it reads in the spreadsheet."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_bool(text: str) -> bool:
    """Strict boolean vocabulary; anything outside _TRUE_VALUES reads as False."""
    return text in _TRUE_VALUES


class RowStore:
    """Cell-level access to the registry sheet of one workbook."""

    def __init__(
        self,
        workbook: Workbook,
        path: Path,
        layout: ColumnLayout,
        error_log: ErrorLogBuffer | None = None,
        values: Workbook | None = None,
    ) -> None:
        self.workbook = workbook
        self.path = path
        self.layout = layout
        self.error_log = error_log
        self.sheet: Worksheet = workbook[layout.sheet]
        # values=None: ワークブック自体から読む (数式はそのまま文字列)
        self.values = values if values is not None else workbook
        self.value_sheet: Worksheet = self.values[layout.sheet]

    @classmethod
    def open(
        cls, path: Path, layout: ColumnLayout, error_log: ErrorLogBuffer | None = None
    ) -> RowStore:
        path = Path(path)
        try:
            workbook = load_workbook(path, keep_vba=path.suffix.lower() == ".xlsm")
            values = load_workbook(path, data_only=True)
        except Exception as e:
            raise RowStoreError(f"cannot open registry {path}: {e}") from e
        if layout.sheet not in workbook.sheetnames:
            raise RowStoreError(f"sheet '{layout.sheet}' not found in {path.name}")
        return cls(workbook, path, layout, error_log=error_log, values=values)

    @property
    def name(self) -> str:
        return self.path.name

    def row_count(self) -> int:
        """Last used row of the registry sheet (rows are visited 1..row_count)."""
        return self.sheet.max_row

    def read_text(self, row: int, field_name: str) -> str:
        try:
            value = self.value_sheet[self.layout.cell(field_name, row)].value
            return cell_to_text(value)
        except (KeyError, ValueError, TypeError) as e:
            self._record_read_error(row, field_name, e)
            return ""

    def read_bool(self, row: int, field_name: str) -> bool:
        return parse_bool(self.read_text(row, field_name))

    def read_row(self, row: int) -> FileMetaRow:
        return FileMetaRow(
            row_number=row,
            file_name=self.read_text(row, "file_name"),
            is_active=self.read_bool(row, "is_active"),
            transfer_method=self.read_text(row, "transfer_method"),
            stage_directory=self.read_text(row, "stage_directory"),
            archive_directory=self.read_text(row, "archive_directory"),
            availability=self.read_text(row, "availability"),
            unavailable_days=self.read_text(row, "unavailable_days"),
            last_timestamp=self.read_text(row, "timestamp"),
        )

    def write_text(self, row: int, field_name: str, value: str) -> None:
        coordinate = self.layout.cell(field_name, row)
        self.sheet[coordinate].value = value
        if self.value_sheet is not self.sheet:
            self.value_sheet[coordinate].value = value

    def save(self) -> Path:
        try:
            self.workbook.save(self.path)
        except OSError as e:
            raise RowStoreSaveError(f"cannot save registry {self.path}: {e}") from e
        return self.path

    def _record_read_error(self, row: int, field_name: str, exc: Exception) -> None:
        logger.error(f"cell read failed row={row} field={field_name}: {exc}")
        if self.error_log is not None:
            self.error_log.append(
                ErrorRecord.create(
                    store=self.name,
                    sheet=self.layout.sheet,
                    row=row,
                    error_type="CELL_READ_ERROR",
                    message=f"{field_name}: {exc}",
                )
            )
