from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from file_arrival.models.error_record import ErrorRecord

"""Error log buffering module.

- JSON Lines, fixed key set (see error_log_schema.json next to this module)
- One ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created lazily
- Records are buffered in memory and written once per run by the orchestrator
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "SCHEMA_PATH",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
SCHEMA_PATH = Path(__file__).with_name("error_log_schema.json")


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    - ファイルパスは初回 flush 時に決定 (レコードが無ければファイルを作らない)
    - スレッド安全性不要 (シリアル実行)
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._total = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def total_appended(self) -> int:
        """Records appended over the buffer's lifetime (flushes included)."""
        return self._total

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self._total += 1

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
