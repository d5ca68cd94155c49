from __future__ import annotations

from file_arrival.models.processing_result import PassResult

"""Summary line rendering for the FILE META arrival checker.

One SUMMARY line is printed per pass:

    SUMMARY pass={name} rows={n} active={n} eligible={n} updated={n} errors={n}
    saved={yes|no} elapsed_sec={x}
"""

SUMMARY_PREFIX = "SUMMARY "


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: PassResult) -> str:
    """Render the SUMMARY line of one pass.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> render_summary_line(PassResult(
        ...     pass_name="scan", store="meta.xlsx", total_rows=10, active_rows=8,
        ...     eligible_rows=5, updated_rows=2, error_count=0, saved=True,
        ...     start_time=t, end_time=t, elapsed_seconds=2.0))
        'SUMMARY pass=scan rows=10 active=8 eligible=5 updated=2 errors=0 saved=yes elapsed_sec=2'
    """
    return (
        f"{SUMMARY_PREFIX}pass={result.pass_name} "
        f"rows={result.total_rows} "
        f"active={result.active_rows} "
        f"eligible={result.eligible_rows} "
        f"updated={result.updated_rows} "
        f"errors={result.error_count} "
        f"saved={'yes' if result.saved else 'no'} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
