from __future__ import annotations

import logging

from file_arrival.excel.row_store import RowStore
from file_arrival.models.processing_result import PassCounts
from file_arrival.models.row_data import FileMetaRow
from file_arrival.models.transfer_method import LABEL_TO_CODE, TransferMethod, is_known_value
from file_arrival.services.progress import ProgressTracker

"""Normalize pass: pre-populate the transfer method of every active row.

Step order for an active row:
1. Map the registry label to its code through LABEL_TO_CODE
   (Automatic -> A, Manual -> M, Not Available -> N); other values stay.
2. If availability is not "daily" (case-insensitive), or today's day name
   appears in the unavailable days (case-insensitive substring), force the
   value to ``Not Available``. The override wins over step 1.

The override writes the label ``Not Available`` unless ``override_with_code``
is set, in which case it writes the code ``N``. Either way a second run over
its own output changes nothing.
"""

__all__ = [
    "DAILY",
    "is_unavailable",
    "normalize_transfer_method",
    "normalize_pass",
]

logger = logging.getLogger(__name__)

DAILY = "daily"


def is_unavailable(availability: str, unavailable_days: str, today: str) -> bool:
    return availability.lower() != DAILY or today.lower() in unavailable_days.lower()


def normalize_transfer_method(
    row: FileMetaRow, today: str, *, override_with_code: bool = False
) -> str | None:
    """Canonical transfer method for ``row``; None for inactive rows."""
    if not row.is_active:
        return None

    value = LABEL_TO_CODE.get(row.transfer_method, row.transfer_method)

    if is_unavailable(row.availability, row.unavailable_days, today):
        unavailable = TransferMethod.NOT_AVAILABLE
        value = unavailable.code if override_with_code else unavailable.label
    return value


def normalize_pass(
    store: RowStore,
    today: str,
    *,
    override_with_code: bool = False,
    progress: ProgressTracker | None = None,
) -> PassCounts:
    """Apply ``normalize_transfer_method`` to every row of the store, in order.

    Cells are written only when the value changes.
    """
    counts = PassCounts()
    for row_number in range(1, store.row_count() + 1):
        if progress is not None:
            progress.start_row(row_number)
        counts.total_rows += 1

        row = store.read_row(row_number)
        new_value = normalize_transfer_method(row, today, override_with_code=override_with_code)
        if new_value is not None:
            counts.active_rows += 1
            counts.eligible_rows += 1
            if not is_known_value(new_value):
                logger.debug(f"row={row_number} unrecognised transfer method kept: {new_value!r}")
            if new_value != row.transfer_method:
                store.write_text(row_number, "transfer_method", new_value)
                counts.updated_rows += 1
                logger.debug(
                    f"row={row_number} transfer_method {row.transfer_method!r} -> {new_value!r}"
                )

        if progress is not None:
            progress.finish_row()
    return counts
