from __future__ import annotations

from dataclasses import dataclass

"""FileMetaRow model for the FILE META registry.

A row is identified only by its 1-based sheet row number. File names may repeat
or be blank, so nothing downstream keys rows by file name.
"""

__all__ = [
    "FileMetaRow",
]


@dataclass(frozen=True)
class FileMetaRow:
    """Snapshot of one tracked file expectation as read from the workbook.

    Only ``transfer_method`` and ``last_timestamp`` are ever written back; the
    passes compute new values from this snapshot and write them through the
    row store.
    """
    row_number: int  # sheet row (1 = first sheet row, header included)
    file_name: str
    is_active: bool
    transfer_method: str
    stage_directory: str = ""
    archive_directory: str = ""
    availability: str = ""
    unavailable_days: str = ""
    last_timestamp: str = ""

    @property
    def directories(self) -> tuple[str, str]:
        """(archive, stage) directories in scan order; either may be empty."""
        return (self.archive_directory, self.stage_directory)
