from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Pass result models for the FILE META arrival checker.

PassCounts is what a pass loop returns; PassResult adds the store/timing
context the orchestrator knows about and feeds the SUMMARY line.
"""

__all__ = [
    "PassCounts",
    "PassResult",
]


@dataclass
class PassCounts:
    """Mutable counters accumulated while iterating rows in one pass."""
    total_rows: int = 0  # 走査した行数 (ヘッダ行含む)
    active_rows: int = 0
    eligible_rows: int = 0  # normalize: active と同数 / scan: 対象コードの行
    updated_rows: int = 0  # 実際に書き換えた行


@dataclass(frozen=True)
class PassResult:
    """Aggregated result of one pass over the registry."""
    pass_name: str  # "normalize" | "scan"
    store: str
    total_rows: int
    active_rows: int
    eligible_rows: int
    updated_rows: int
    error_count: int  # ErrorRecord が追加された件数
    saved: bool
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
