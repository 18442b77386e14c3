"""SQLModel-backed debt storage."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.liability import Liability


class SQLModelLiabilityRepository:
    """Debt repository that opens a short-lived session per call."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get_by_id(self, liability_id: int) -> Optional[Liability]:
        with self.session_factory() as session:
            return session.get(Liability, liability_id)

    def list_all(self) -> list[Liability]:
        with self.session_factory() as session:
            statement = select(Liability).order_by(Liability.name)  # type: ignore
            return list(session.exec(statement).all())

    def list_active(self) -> list[Liability]:
        """Debts with a positive balance, alphabetical by name."""
        with self.session_factory() as session:
            statement = (
                select(Liability)
                .where(Liability.balance > 0)
                .order_by(Liability.name)  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, liability: Liability) -> Liability:
        with self.session_factory() as session:
            session.add(liability)
            session.commit()
            session.refresh(liability)
            return liability

    def update(self, liability: Liability) -> Liability:
        """Merge edits from a detached row and return the stored copy."""
        liability.updated_at = datetime.now(timezone.utc)
        with self.session_factory() as session:
            stored = session.merge(liability)
            session.commit()
            session.refresh(stored)
            return stored

    def delete(self, liability_id: int) -> bool:
        with self.session_factory() as session:
            liability = session.get(Liability, liability_id)
            if liability is None:
                return False
            session.delete(liability)
            session.commit()
            return True
