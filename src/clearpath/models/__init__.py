"""SQLModel table exports."""

from .liability import DEBT_KINDS, Liability

__all__ = ["DEBT_KINDS", "Liability"]
