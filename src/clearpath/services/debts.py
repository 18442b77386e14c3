"""Debt payoff calculators (avalanche, snowball and hybrid)."""

from __future__ import annotations

import calendar
import math
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

from ..logging_config import get_logger

logger = get_logger(__name__)

MAX_MONTHS = 600  # 50 years
PAID_OFF_EPSILON = 0.01


class PayoffStrategy(str, Enum):
    """Ordering policy that decides which debt receives the extra payment."""

    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value: "PayoffStrategy | str | None") -> "PayoffStrategy":
        """Return the strategy named by *value*, raising ValueError when unknown."""

        if isinstance(value, PayoffStrategy):
            return value
        name = (value or "").strip().lower()
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Invalid debt payoff strategy: {value!r}") from None


@dataclass(slots=True, frozen=True)
class DebtAccount:
    """Represents a liability input for payoff projections."""

    id: int | str
    name: str
    balance: float
    apr: float  # annual percentage rate, e.g. 18.0 for 18%
    minimum_payment: float


@dataclass(slots=True)
class _DebtState:
    debt: DebtAccount
    balance: float
    interest_paid: float = 0.0
    principal_paid: float = 0.0
    amount_paid: float = 0.0
    payoff_month: int | None = None


@dataclass(slots=True)
class MonthlyPayment:
    """Aggregate payment row for one simulated month."""

    month: int
    payment: float
    remaining_balance: float
    interest_paid: float
    principal_paid: float


@dataclass(slots=True)
class DebtProgress:
    """Per-debt totals at the end of a simulation run."""

    id: int | str
    name: str
    initial_balance: float
    amount_paid: float
    interest_paid: float
    principal_paid: float
    payoff_month: int | None


@dataclass(slots=True)
class PayoffResult:
    """Outcome of one strategy run."""

    strategy: PayoffStrategy
    total_interest: float
    total_payments: float
    months_to_payoff: int
    debt_free_date: date
    payoff_order: list[str] = field(default_factory=list)
    schedule: list[MonthlyPayment] = field(default_factory=list)
    debt_progress: list[DebtProgress] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "total_interest": self.total_interest,
            "total_payments": self.total_payments,
            "months_to_payoff": self.months_to_payoff,
            "debt_free_date": self.debt_free_date.isoformat(),
            "payoff_order": list(self.payoff_order),
            "schedule": [asdict(row) for row in self.schedule],
            "debt_progress": [asdict(row) for row in self.debt_progress],
        }


@dataclass(slots=True)
class StrategyComparison:
    """All strategies side by side, measured against a minimum-payments baseline."""

    extra_payment: float
    results: dict[PayoffStrategy, PayoffResult]
    baseline: PayoffResult
    recommended: PayoffStrategy | None

    def interest_saved(self, strategy: PayoffStrategy) -> float:
        return self.baseline.total_interest - self.results[strategy].total_interest

    def months_saved(self, strategy: PayoffStrategy) -> int:
        return self.baseline.months_to_payoff - self.results[strategy].months_to_payoff

    def to_dict(self) -> dict[str, Any]:
        return {
            "extra_payment": self.extra_payment,
            "recommended": self.recommended.value if self.recommended else None,
            "baseline": self.baseline.to_dict(),
            "strategies": {
                strategy.value: {
                    **result.to_dict(),
                    "interest_saved": self.interest_saved(strategy),
                    "months_saved": self.months_saved(strategy),
                }
                for strategy, result in self.results.items()
            },
        }


def add_months(value: date, months: int) -> date:
    """Return *value* shifted by *months*, clamping the day to the month length."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _non_negative(value: float | None) -> float:
    try:
        amount = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) and amount > 0 else 0.0


def _avalanche_key(debts: Sequence[DebtAccount]) -> Callable[[DebtAccount], float]:
    return lambda debt: -debt.apr


def _snowball_key(debts: Sequence[DebtAccount]) -> Callable[[DebtAccount], float]:
    return lambda debt: debt.balance


def _hybrid_key(debts: Sequence[DebtAccount]) -> Callable[[DebtAccount], float]:
    # Half normalized rate, half inverse balance share. Higher score pays first.
    max_apr = max((debt.apr for debt in debts), default=0.0)
    total_balance = sum(debt.balance for debt in debts)

    def score(debt: DebtAccount) -> float:
        rate_term = debt.apr / max_apr if max_apr > 0 else 0.0
        balance_term = 1.0 - debt.balance / total_balance if total_balance > 0 else 0.0
        return -(0.5 * rate_term + 0.5 * balance_term)

    return score


_PRIORITY_KEYS: dict[PayoffStrategy, Callable[[Sequence[DebtAccount]], Callable[[DebtAccount], float]]] = {
    PayoffStrategy.AVALANCHE: _avalanche_key,
    PayoffStrategy.SNOWBALL: _snowball_key,
    PayoffStrategy.HYBRID: _hybrid_key,
}


def prioritize(
    debts: Iterable[DebtAccount], strategy: PayoffStrategy | str
) -> list[DebtAccount]:
    """Return debts ordered by payoff priority, highest first.

    ``sorted`` is stable, so debts that tie keep their input order.
    """

    debt_list = list(debts)
    key_factory = _PRIORITY_KEYS[PayoffStrategy.parse(strategy)]
    return sorted(debt_list, key=key_factory(debt_list))


def _normalize(debt: DebtAccount) -> DebtAccount:
    return DebtAccount(
        id=debt.id,
        name=debt.name,
        balance=_non_negative(debt.balance),
        apr=_non_negative(debt.apr),
        minimum_payment=_non_negative(debt.minimum_payment),
    )


def simulate_payoff(
    *,
    debts: Iterable[DebtAccount],
    extra_payment: float,
    strategy: PayoffStrategy | str,
    today: date | None = None,
) -> PayoffResult:
    """Simulate month-by-month payoff of *debts* under *strategy*.

    The highest-priority outstanding debt receives its minimum plus the
    whole extra-payment pool each month; every other debt receives its
    minimum. Whatever a cleared debt leaves unspent that month goes to
    the next open debts in priority order, and its minimum joins the pool
    for the following months. The run stops once every balance is zero
    or after ``MAX_MONTHS`` months, whichever comes first.
    """

    strategy = PayoffStrategy.parse(strategy)
    start = today or date.today()
    ordered = prioritize((_normalize(debt) for debt in debts), strategy)
    states = [_DebtState(debt=debt, balance=debt.balance) for debt in ordered]
    for state in states:
        if state.balance <= PAID_OFF_EPSILON:
            state.balance = 0.0
            state.payoff_month = 0

    active = [state for state in states if state.payoff_month is None]
    pool = _non_negative(extra_payment)
    schedule: list[MonthlyPayment] = []
    payoff_order: list[str] = []
    total_interest = 0.0
    total_payments = 0.0
    month = 0

    while active and month < MAX_MONTHS:
        month += 1
        accrued = [state.balance * (state.debt.apr / 100 / 12) for state in active]
        paid = [0.0] * len(active)
        spare = 0.0

        for index, state in enumerate(active):
            budget = state.debt.minimum_payment + (pool if index == 0 else 0.0)
            owed = state.balance + accrued[index]
            # Never below the interest (balances must not grow), never past payoff.
            paid[index] = min(max(budget, accrued[index]), owed)
            spare += max(budget - owed, 0.0)
            state.balance -= paid[index] - accrued[index]

        # Money left over by a debt cleared this month goes down the priority list.
        for index, state in enumerate(active):
            if spare <= 0:
                break
            topup = min(spare, max(state.balance, 0.0))
            state.balance -= topup
            paid[index] += topup
            spare -= topup

        month_interest = 0.0
        month_principal = 0.0
        month_payment = 0.0
        for index, state in enumerate(active):
            interest = accrued[index]
            payment = paid[index]
            if state.balance <= PAID_OFF_EPSILON:
                # Sweep the residual cent so principal totals match the opening balance.
                payment += state.balance
                state.balance = 0.0
                state.payoff_month = month
                payoff_order.append(state.debt.name)
                pool += state.debt.minimum_payment
            principal = payment - interest

            state.interest_paid += interest
            state.principal_paid += principal
            state.amount_paid += payment
            month_interest += interest
            month_principal += principal
            month_payment += payment

        active = [state for state in active if state.payoff_month is None]
        total_interest += month_interest
        total_payments += month_payment
        schedule.append(
            MonthlyPayment(
                month=month,
                payment=month_payment,
                remaining_balance=sum(state.balance for state in active),
                interest_paid=month_interest,
                principal_paid=month_principal,
            )
        )

    if active:
        logger.warning(
            "Payoff simulation hit the month cap",
            extra={"strategy": strategy.value, "months": month, "open_debts": len(active)},
        )

    logger.debug(
        "Simulated payoff",
        extra={"strategy": strategy.value, "debts": len(states), "months": month},
    )

    return PayoffResult(
        strategy=strategy,
        total_interest=total_interest,
        total_payments=total_payments,
        months_to_payoff=month,
        debt_free_date=add_months(start, month),
        payoff_order=payoff_order,
        schedule=schedule,
        debt_progress=[
            DebtProgress(
                id=state.debt.id,
                name=state.debt.name,
                initial_balance=state.debt.balance,
                amount_paid=state.amount_paid,
                interest_paid=state.interest_paid,
                principal_paid=state.principal_paid,
                payoff_month=state.payoff_month,
            )
            for state in states
        ],
    )


def compare_strategies(
    *,
    debts: Iterable[DebtAccount],
    extra_payment: float,
    today: date | None = None,
) -> StrategyComparison:
    """Run every strategy sequentially and pick the cheapest one."""

    debt_list = list(debts)
    start = today or date.today()
    results = {
        strategy: simulate_payoff(
            debts=debt_list, extra_payment=extra_payment, strategy=strategy, today=start
        )
        for strategy in PayoffStrategy
    }
    baseline = simulate_payoff(
        debts=debt_list, extra_payment=0.0, strategy=PayoffStrategy.AVALANCHE, today=start
    )

    recommended: PayoffStrategy | None = None
    if any(result.schedule for result in results.values()):
        order = list(PayoffStrategy)
        recommended = min(
            results,
            key=lambda strategy: (
                round(results[strategy].total_interest, 2),
                results[strategy].months_to_payoff,
                order.index(strategy),
            ),
        )

    return StrategyComparison(
        extra_payment=_non_negative(extra_payment),
        results=results,
        baseline=baseline,
        recommended=recommended,
    )


__all__ = [
    "MAX_MONTHS",
    "PAID_OFF_EPSILON",
    "DebtAccount",
    "DebtProgress",
    "MonthlyPayment",
    "PayoffResult",
    "PayoffStrategy",
    "StrategyComparison",
    "add_months",
    "compare_strategies",
    "prioritize",
    "simulate_payoff",
]
