"""Liability form definitions and validation helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping

from ...models.liability import DEBT_KINDS, Liability
from ...services.debts import PayoffStrategy

STRATEGY_CHOICES: Dict[str, str] = {
    PayoffStrategy.AVALANCHE.value: "Avalanche · prioritize highest APR first",
    PayoffStrategy.SNOWBALL.value: "Snowball · knock out the smallest balance",
    PayoffStrategy.HYBRID.value: "Hybrid · weigh APR against balance share",
}


def coerce_amount(value: Any) -> float:
    """Return *value* as a non-negative float; anything unusable becomes 0.0."""

    if value is None or value == "":
        return 0.0
    try:
        amount = float(str(value).replace(",", "").replace("$", "").strip())
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


@dataclass(slots=True)
class LiabilityForm:
    """Represents liability inputs and associated validation errors."""

    name: str = ""
    kind: str = "credit_card"
    balance: Decimal | str | None = None
    apr: Decimal | str | None = None
    minimum_payment: Decimal | str | None = None
    due_day: int | str | None = 1
    opened_on: date | str | None = None
    errors: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LiabilityForm":
        return cls(
            name=str(data.get("name", "") or ""),
            kind=str(data.get("kind", "") or ""),
            balance=data.get("balance"),
            apr=data.get("apr"),
            minimum_payment=data.get("minimum_payment"),
            due_day=data.get("due_day", 1),
            opened_on=data.get("opened_on"),
        )

    @classmethod
    def from_liability(cls, liability: Liability) -> "LiabilityForm":
        return cls(
            name=liability.name,
            kind=liability.kind,
            balance=Decimal(str(liability.balance)),
            apr=Decimal(str(liability.apr)),
            minimum_payment=Decimal(str(liability.minimum_payment)),
            due_day=liability.due_day,
            opened_on=liability.opened_on,
        )

    def validate(self) -> bool:
        """Validate liability inputs returning True when all values are acceptable."""

        self.errors.clear()

        if not self.name or not self.name.strip():
            self.errors.setdefault("name", []).append("Enter the creditor or account name.")
        else:
            self.name = self.name.strip()
            if len(self.name) > 80:
                self.errors.setdefault("name", []).append("Keep the name under 80 characters.")

        if self.kind not in DEBT_KINDS:
            self.errors.setdefault("kind", []).append("Choose a debt type.")

        self.balance = self._parse_number("balance", self.balance)
        self.apr = self._parse_number("apr", self.apr)
        self.minimum_payment = self._parse_number("minimum_payment", self.minimum_payment)

        if isinstance(self.apr, Decimal) and self.apr > Decimal("100"):
            self.errors.setdefault("apr", []).append("APR must be between 0 and 100 percent.")

        try:
            self.due_day = int(str(self.due_day))
        except (TypeError, ValueError):
            self.errors.setdefault("due_day", []).append("Enter a day between 1 and 28.")
        else:
            if not 1 <= self.due_day <= 28:
                self.errors.setdefault("due_day", []).append("Enter a day between 1 and 28.")

        self.opened_on = self._parse_date("opened_on", self.opened_on)

        return not self.errors

    def _parse_number(self, field: str, value: Decimal | str | None) -> Decimal | None:
        """Parse and validate numeric input, storing errors when parsing fails."""

        if value is None or value == "":
            self.errors.setdefault(field, []).append("This field is required.")
            return None

        if not isinstance(value, Decimal):
            try:
                value = Decimal(str(value).strip())
            except (InvalidOperation, TypeError, ValueError):
                self.errors.setdefault(field, []).append("Enter a valid number.")
                return None

        if not value.is_finite():
            self.errors.setdefault(field, []).append("Enter a valid number.")
            return None
        if value < 0:
            self.errors.setdefault(field, []).append("Amount must be at least zero.")
        return value

    def _parse_date(self, field: str, value: date | str | None) -> date | None:
        """Parse an optional ISO date that cannot lie in the future."""

        if value is None or value == "":
            return None
        if not isinstance(value, date):
            try:
                value = date.fromisoformat(str(value).strip())
            except ValueError:
                self.errors.setdefault(field, []).append("Enter the date as YYYY-MM-DD.")
                return None
        if value > date.today():
            self.errors.setdefault(field, []).append("The opening date cannot be in the future.")
        return value

    def apply_to(self, liability: Liability) -> Liability:
        """Copy validated values onto *liability*."""

        liability.name = self.name
        liability.kind = self.kind
        liability.balance = float(self.balance or 0)
        liability.apr = float(self.apr or 0)
        liability.minimum_payment = float(self.minimum_payment or 0)
        liability.due_day = int(self.due_day or 1)
        liability.opened_on = self.opened_on if isinstance(self.opened_on, date) else None
        return liability

    @property
    def error_messages(self) -> Iterable[str]:
        """Flattened iterable of error strings for summaries."""

        for messages in self.errors.values():
            yield from messages


@dataclass(slots=True)
class PlanRequest:
    """Strategy and extra payment requested for a payoff plan."""

    strategy: PayoffStrategy | None
    extra_payment: float
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_args(
        cls,
        args: Mapping[str, Any],
        *,
        default_strategy: str = PayoffStrategy.AVALANCHE.value,
        default_extra: float = 0.0,
    ) -> "PlanRequest":
        errors: Dict[str, List[str]] = {}
        raw_strategy = args.get("strategy") or default_strategy
        try:
            strategy: PayoffStrategy | None = PayoffStrategy.parse(raw_strategy)
        except ValueError as exc:
            strategy = None
            errors.setdefault("strategy", []).append(str(exc))

        raw_extra = args.get("extra")
        extra = coerce_amount(raw_extra) if raw_extra not in (None, "") else coerce_amount(default_extra)
        return cls(strategy=strategy, extra_payment=extra, errors=errors)

    @property
    def is_valid(self) -> bool:
        return not self.errors
