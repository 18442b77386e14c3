"""Blueprint exports."""

from . import liabilities

__all__ = ["liabilities"]
