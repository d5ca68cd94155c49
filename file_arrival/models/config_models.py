from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the FILE META arrival checker.

The column layout is fixed configuration, not logic: it is declared here,
populated by ``file_arrival.config.loader`` and injected into the row store.
Defaults reproduce the layout of the production FILE META workbook.
"""

__all__ = [
    "FIELD_NAMES",
    "DIRECTORY_POLICIES",
    "ColumnLayout",
    "NormalizeConfig",
    "ScanConfig",
    "AppConfig",
]

FIELD_NAMES: tuple[str, ...] = (
    "file_name",
    "is_active",
    "transfer_method",
    "stage_directory",
    "archive_directory",
    "availability",
    "unavailable_days",
    "timestamp",
)

# both: archive と stage を個別に走査 / fallback: archive が空なら stage のみ
DIRECTORY_POLICIES: tuple[str, ...] = ("both", "fallback")


@dataclass(frozen=True)
class ColumnLayout:
    """Sheet name and column letter bound to each registry field."""
    sheet: str = "FILE META"
    file_name: str = "A"
    availability: str = "G"
    unavailable_days: str = "H"
    is_active: str = "K"
    transfer_method: str = "L"
    timestamp: str = "M"
    stage_directory: str = "X"
    archive_directory: str = "AA"

    def column_for(self, field_name: str) -> str:
        if field_name not in FIELD_NAMES:
            raise KeyError(f"unknown registry field: {field_name}")
        return getattr(self, field_name)

    def cell(self, field_name: str, row: int) -> str:
        """Spreadsheet coordinate of a field in a 1-based row, e.g. ``L12``."""
        return f"{self.column_for(field_name)}{row}"


@dataclass(frozen=True)
class NormalizeConfig:
    # True: 上書き値を短縮コード "N" に統一 (既定はラベル "Not Available")
    override_with_code: bool = False


@dataclass(frozen=True)
class ScanConfig:
    eligible_codes: tuple[str, ...] = ("A",)
    directory_policy: str = "both"


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for one run."""
    layout: ColumnLayout = field(default_factory=ColumnLayout)
    match_threshold_percent: float = 80.0  # 0-100, divided by 100 before comparison
    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
