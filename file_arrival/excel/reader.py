from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils import column_index_from_string

from file_arrival.models.config_models import FIELD_NAMES, ColumnLayout

"""Registry preview with pandas (``--inspect-data``).

Row 1 of the registry sheet is the header row; data rows follow. The preview
projects the configured columns only, so an operator can check the column
layout against a real workbook before running a pass.
"""


class RegistrySheetError(Exception):
    """Raised when the registry sheet is missing or empty."""


@dataclass
class RegistryPreview:
    sheet_name: str
    headers: dict[str, str]  # field -> header text of its column
    rows: list[dict[str, Any]]  # 先頭 N 行 (field -> value), row 番号付き


def read_registry_frame(path: Path, sheet: str) -> pd.DataFrame:
    """Read the registry sheet raw (no header inference)."""
    xls = pd.ExcelFile(path)
    if sheet not in xls.sheet_names:
        raise RegistrySheetError(f"sheet '{sheet}' not found in {Path(path).name}")
    return xls.parse(sheet, header=None, dtype=object)


def _value_at(raw: pd.Series, index: int) -> Any:
    if index >= len(raw):
        return None
    val = raw.iloc[index]
    if pd.isna(val):
        return None
    return val


def preview_registry(df: pd.DataFrame, layout: ColumnLayout, limit: int = 5) -> RegistryPreview:
    """Project the first ``limit`` non-empty data rows onto the configured fields."""
    if df.shape[0] < 1:
        raise RegistrySheetError(f"sheet '{layout.sheet}' is empty")
    positions = {f: column_index_from_string(layout.column_for(f)) - 1 for f in FIELD_NAMES}

    header = df.iloc[0]
    headers = {f: str(_value_at(header, i) or "").strip() for f, i in positions.items()}

    rows: list[dict[str, Any]] = []
    for idx, raw in df.iloc[1:].iterrows():
        if raw.isna().all():
            continue
        row: dict[str, Any] = {"row": int(idx) + 1}
        for f, i in positions.items():
            row[f] = _value_at(raw, i)
        rows.append(row)
        if len(rows) >= limit:
            break
    return RegistryPreview(sheet_name=layout.sheet, headers=headers, rows=rows)
