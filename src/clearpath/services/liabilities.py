"""Helpers that turn stored liabilities into payoff inputs and summaries."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Iterable

from ..models.liability import Liability
from .debts import DebtAccount


@dataclass(slots=True)
class LiabilitySummary:
    """Headline numbers shown above the debt list."""

    count: int
    total_debt: float
    total_minimum_payment: float
    weighted_apr: float
    debt_to_income: float | None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(slots=True)
class RefinanceEstimate:
    """Interest comparison for moving one debt onto a new rate."""

    liability_id: int | None
    name: str
    balance: float
    current_interest: float
    refinanced_interest: float

    @property
    def savings(self) -> float:
        return self.current_interest - self.refinanced_interest


def _amount(value: float | None) -> float:
    """Coerce missing, invalid or negative numbers to zero."""

    try:
        amount = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) and amount > 0 else 0.0


def to_debt_accounts(liabilities: Iterable[Liability]) -> list[DebtAccount]:
    """Map persisted liabilities onto simulator inputs."""

    accounts: list[DebtAccount] = []
    for liability in liabilities:
        if liability.id is None:
            continue
        accounts.append(
            DebtAccount(
                id=liability.id,
                name=liability.name,
                balance=_amount(liability.balance),
                apr=_amount(liability.apr),
                minimum_payment=_amount(liability.minimum_payment),
            )
        )
    return accounts


def debt_to_income_ratio(total_debt: float, income: float | None) -> float:
    """Return ``total_debt / income``; zero when income is missing or not positive."""

    income_value = _amount(income)
    if income_value <= 0:
        return 0.0
    return _amount(total_debt) / income_value


def summarize(
    liabilities: Iterable[Liability], *, monthly_income: float | None = None
) -> LiabilitySummary:
    """Aggregate totals for the debt overview."""

    rows = list(liabilities)
    total_debt = sum(_amount(row.balance) for row in rows)
    weighted = sum(_amount(row.balance) * _amount(row.apr) for row in rows)
    return LiabilitySummary(
        count=len(rows),
        total_debt=total_debt,
        total_minimum_payment=sum(_amount(row.minimum_payment) for row in rows),
        weighted_apr=weighted / total_debt if total_debt > 0 else 0.0,
        debt_to_income=(
            debt_to_income_ratio(total_debt, monthly_income) if monthly_income is not None else None
        ),
    )


def _flat_interest(balance: float, rate: float, term_months: int) -> float:
    monthly_payment = balance * (rate / 100) / 12 + balance / term_months
    return monthly_payment * term_months - balance


def refinance_savings(
    liabilities: Iterable[Liability], *, new_rate: float, term_months: int
) -> list[RefinanceEstimate]:
    """Estimate interest saved by refinancing each open debt at *new_rate*.

    Uses the simple-interest approximation: the monthly payment is the
    interest on the opening balance plus an even share of principal.
    """

    if term_months <= 0:
        raise ValueError("Loan term must be at least one month.")

    rate = _amount(new_rate)
    estimates: list[RefinanceEstimate] = []
    for liability in liabilities:
        balance = _amount(liability.balance)
        if balance <= 0:
            continue
        estimates.append(
            RefinanceEstimate(
                liability_id=liability.id,
                name=liability.name,
                balance=balance,
                current_interest=_flat_interest(balance, _amount(liability.apr), term_months),
                refinanced_interest=_flat_interest(balance, rate, term_months),
            )
        )
    return estimates


__all__ = [
    "LiabilitySummary",
    "RefinanceEstimate",
    "debt_to_income_ratio",
    "refinance_savings",
    "summarize",
    "to_debt_accounts",
]
