"""Service module exports."""

from . import debts, export_csv, liabilities

__all__ = [
    "debts",
    "export_csv",
    "liabilities",
]
