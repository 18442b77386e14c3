"""Storage contract the liabilities blueprint depends on."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.liability import Liability


class LiabilityRepository(Protocol):
    """Persistence operations for debts, independent of the database layer."""

    def get_by_id(self, liability_id: int) -> Optional[Liability]:
        ...

    def list_all(self) -> list[Liability]:
        """Every debt, alphabetical by name."""
        ...

    def list_active(self) -> list[Liability]:
        """Debts that still carry a balance; refinance estimates use these."""
        ...

    def create(self, liability: Liability) -> Liability:
        ...

    def update(self, liability: Liability) -> Liability:
        """Persist edits and stamp ``updated_at``."""
        ...

    def delete(self, liability_id: int) -> bool:
        """Remove a debt; False when *liability_id* is unknown."""
        ...
