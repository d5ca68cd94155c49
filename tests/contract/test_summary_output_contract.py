from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

from file_arrival.cli import main as cli_main
from file_arrival.logging.init import reset_logging

"""SUMMARY output contract: one line per pass, in pass order."""

SUMMARY_RE = re.compile(
    r"^SUMMARY pass=(normalize|scan) rows=(\d+) active=(\d+) eligible=(\d+) "
    r"updated=(\d+) errors=(\d+) saved=(yes|no) elapsed_sec=\d+(\.\d+)?$"
)


def test_summary_lines_match_contract(make_registry, temp_workdir: Path, touch_file, capsys):
    reset_logging()
    touch_file(temp_workdir / "archive" / "orders_20240614.csv", datetime.now())
    path = make_registry(
        [
            {"file_name": "orders_20240614.csv", "is_active": True, "transfer_method": "Automatic",
             "availability": "Daily", "archive_directory": str(temp_workdir / "archive")},
            {"file_name": "legacy.csv", "is_active": False, "transfer_method": "Manual",
             "availability": "Daily"},
            {"file_name": "holiday.csv", "is_active": True, "transfer_method": "Automatic",
             "availability": "Daily", "unavailable_days": "Saturday, Sunday"},
        ]
    )

    code = cli_main([str(path), "--day", "sunday", "--threshold", "90"])
    out = capsys.readouterr().out
    assert code == 0

    lines = [line for line in out.splitlines() if line.startswith("SUMMARY")]
    assert len(lines) == 2
    groups = [SUMMARY_RE.match(line).groups()[:7] for line in lines]  # type: ignore[union-attr]
    assert groups[0] == ("normalize", "4", "2", "2", "2", "0", "yes")
    assert groups[1] == ("scan", "4", "2", "1", "1", "0", "yes")
