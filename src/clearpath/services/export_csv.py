"""CSV export helpers for payoff schedules."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import TextIO

from .debts import PayoffResult

HEADERS = ["month", "payment", "interest_paid", "principal_paid", "remaining_balance"]


def _cents(value: float) -> str:
    return f"{value:.2f}"


def _write_schedule(result: PayoffResult, fh: TextIO) -> None:
    writer = csv.DictWriter(fh, fieldnames=HEADERS, quoting=csv.QUOTE_MINIMAL)
    writer.writeheader()
    for row in result.schedule:
        writer.writerow(
            {
                "month": row.month,
                "payment": _cents(row.payment),
                "interest_paid": _cents(row.interest_paid),
                "principal_paid": _cents(row.principal_paid),
                "remaining_balance": _cents(row.remaining_balance),
            }
        )


def schedule_csv_text(result: PayoffResult) -> str:
    """Return the schedule of *result* as CSV text."""

    buffer = io.StringIO(newline="")
    _write_schedule(result, buffer)
    return buffer.getvalue()


def export_schedule_csv(*, result: PayoffResult, output_path: Path) -> Path:
    """Write the schedule of *result* to `output_path` and return the path."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        _write_schedule(result, fh)
    return output_path
