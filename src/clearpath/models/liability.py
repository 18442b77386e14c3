"""Debt and liability entities."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

DEBT_KINDS: dict[str, str] = {
    "credit_card": "Credit card",
    "personal_loan": "Personal loan",
    "student_loan": "Student loan",
    "mortgage": "Mortgage",
    "auto_loan": "Auto loan",
    "medical": "Medical",
    "other": "Other",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Liability(SQLModel, table=True):
    """Installment or revolving debt tracked in ClearPath."""

    __tablename__: ClassVar[str] = "liability"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    kind: str = Field(default="other", max_length=32)
    balance: float = Field(default=0.0, nullable=False)
    apr: float = Field(default=0.0, nullable=False)
    minimum_payment: float = Field(default=0.0, nullable=False)
    due_day: int = Field(default=1, ge=1, le=28)
    opened_on: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "balance": self.balance,
            "apr": self.apr,
            "minimum_payment": self.minimum_payment,
            "due_day": self.due_day,
            "opened_on": self.opened_on.isoformat() if self.opened_on else None,
        }
