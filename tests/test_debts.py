"""Debt payoff simulator tests."""

from __future__ import annotations

import json
import random
from datetime import date

import pytest

from clearpath.services.debts import (
    MAX_MONTHS,
    DebtAccount,
    PayoffStrategy,
    add_months,
    compare_strategies,
    prioritize,
    simulate_payoff,
)

TODAY = date(2024, 1, 15)


def _names(debts):
    return [debt.name for debt in debts]


def _random_portfolio(seed: int) -> tuple[list[DebtAccount], float]:
    """Debts whose minimums cover interest and clear the balance within ten years."""

    rng = random.Random(seed)
    debts = []
    for index in range(rng.randint(2, 4)):
        balance = round(rng.uniform(200, 15000), 2)
        apr = round(rng.uniform(0, 30), 2)
        interest = balance * apr / 1200
        minimum = round(interest * rng.uniform(1.0, 1.5) + balance / rng.uniform(24, 120), 2)
        debts.append(
            DebtAccount(id=index, name=f"debt_{index}", balance=balance, apr=apr, minimum_payment=minimum)
        )
    return debts, round(rng.uniform(0, 300), 2)


class TestPrioritize:
    """Ordering policy for each strategy."""

    def test_avalanche_orders_by_descending_rate(self, sample_debts):
        ordered = prioritize(sample_debts, PayoffStrategy.AVALANCHE)
        assert _names(ordered) == ["Credit Card", "Car Loan", "Medical Bill"]

    def test_snowball_orders_by_ascending_balance(self, sample_debts):
        ordered = prioritize(sample_debts, "snowball")
        assert _names(ordered) == ["Medical Bill", "Credit Card", "Car Loan"]

    def test_hybrid_weighs_rate_against_balance_share(self, sample_debts):
        ordered = prioritize(sample_debts, PayoffStrategy.HYBRID)
        assert _names(ordered) == ["Credit Card", "Medical Bill", "Car Loan"]

    def test_hybrid_order_does_not_depend_on_input_order(self, sample_debts):
        forward = prioritize(sample_debts, PayoffStrategy.HYBRID)
        backward = prioritize(list(reversed(sample_debts)), PayoffStrategy.HYBRID)
        assert _names(forward) == _names(backward)

    def test_ties_keep_input_order(self):
        debts = [
            DebtAccount(id=1, name="First", balance=500.0, apr=10.0, minimum_payment=25.0),
            DebtAccount(id=2, name="Second", balance=500.0, apr=10.0, minimum_payment=25.0),
        ]
        for strategy in PayoffStrategy:
            assert _names(prioritize(debts, strategy)) == ["First", "Second"]


class TestPayoffStrategy:
    def test_parse_is_case_and_whitespace_insensitive(self):
        assert PayoffStrategy.parse(" Snowball ") is PayoffStrategy.SNOWBALL
        assert PayoffStrategy.parse(PayoffStrategy.HYBRID) is PayoffStrategy.HYBRID

    @pytest.mark.parametrize("value", ["bogus", "", None])
    def test_parse_rejects_unknown_names(self, value):
        with pytest.raises(ValueError):
            PayoffStrategy.parse(value)

    def test_simulation_rejects_unknown_strategy(self, sample_debts):
        with pytest.raises(ValueError):
            simulate_payoff(debts=sample_debts, extra_payment=0, strategy="minimum")


class TestSimulatePayoff:
    def test_zero_debts_yield_zero_result(self):
        result = simulate_payoff(debts=[], extra_payment=100.0, strategy="avalanche", today=TODAY)

        assert result.months_to_payoff == 0
        assert result.total_interest == 0
        assert result.total_payments == 0
        assert result.payoff_order == []
        assert result.schedule == []
        assert result.debt_free_date == TODAY

    def test_interest_free_debt_pays_off_in_twelve_months(self):
        debt = DebtAccount(id=1, name="Laptop", balance=1200.0, apr=0.0, minimum_payment=100.0)

        result = simulate_payoff(debts=[debt], extra_payment=0.0, strategy="avalanche", today=TODAY)

        assert result.months_to_payoff == 12
        assert result.total_interest == 0
        assert result.total_payments == pytest.approx(1200.0)
        assert result.payoff_order == ["Laptop"]
        assert result.debt_free_date == date(2025, 1, 15)
        assert [row.remaining_balance for row in result.schedule][-1] == 0

    def test_debt_covered_by_one_payment_pays_off_first_month(self):
        debts = [
            DebtAccount(id=1, name="Big Loan", balance=4000.0, apr=5.0, minimum_payment=100.0),
            DebtAccount(id=2, name="Tiny Card", balance=80.0, apr=12.0, minimum_payment=100.0),
        ]

        result = simulate_payoff(debts=debts, extra_payment=0.0, strategy="avalanche", today=TODAY)

        assert result.payoff_order[0] == "Tiny Card"
        progress = {row.name: row for row in result.debt_progress}
        assert progress["Tiny Card"].payoff_month == 1
        # 80 balance + 0.80 interest, never more than what is owed
        assert progress["Tiny Card"].amount_paid == pytest.approx(80.8)

    def test_extra_payment_goes_to_highest_priority_debt(self, sample_debts):
        result = simulate_payoff(
            debts=sample_debts, extra_payment=200.0, strategy="snowball", today=TODAY
        )

        first_month = result.schedule[0]
        # 240 to Medical Bill, 150 and 250 minimums elsewhere
        assert first_month.payment == pytest.approx(640.0)
        assert result.payoff_order[0] == "Medical Bill"

    def test_avalanche_pays_highest_rate_first(self, sample_debts):
        result = simulate_payoff(
            debts=sample_debts, extra_payment=200.0, strategy="avalanche", today=TODAY
        )
        assert result.payoff_order[0] == "Credit Card"
        assert sorted(result.payoff_order) == sorted(_names(sample_debts))

    def test_freed_minimum_rolls_into_next_debt(self):
        debts = [
            DebtAccount(id=1, name="Phone", balance=300.0, apr=0.0, minimum_payment=100.0),
            DebtAccount(id=2, name="Couch", balance=1000.0, apr=0.0, minimum_payment=50.0),
        ]

        result = simulate_payoff(debts=debts, extra_payment=0.0, strategy="snowball", today=TODAY)

        balances = [row.remaining_balance for row in result.schedule]
        # Phone clears in month 3; from month 4 Couch receives 50 + 100.
        assert balances[:4] == pytest.approx([1150.0, 1000.0, 850.0, 700.0])
        assert result.months_to_payoff == 9
        assert result.payoff_order == ["Phone", "Couch"]
        assert result.total_payments == pytest.approx(1300.0)

    def test_schedule_rows_balance_and_never_increase(self, sample_debts):
        for strategy in PayoffStrategy:
            result = simulate_payoff(
                debts=sample_debts, extra_payment=125.0, strategy=strategy, today=TODAY
            )
            previous = float("inf")
            for row in result.schedule:
                assert row.interest_paid + row.principal_paid == pytest.approx(row.payment, abs=1e-6)
                assert row.remaining_balance <= previous + 1e-9
                previous = row.remaining_balance
            assert result.schedule[-1].remaining_balance == 0

    def test_single_debt_principal_matches_opening_balance(self):
        debt = DebtAccount(id=1, name="Card", balance=2500.0, apr=19.99, minimum_payment=75.0)

        result = simulate_payoff(debts=[debt], extra_payment=30.0, strategy="hybrid", today=TODAY)

        principal = sum(row.principal_paid for row in result.schedule)
        assert principal == pytest.approx(2500.0, abs=1e-6)
        assert result.total_payments == pytest.approx(2500.0 + result.total_interest, abs=1e-6)

    def test_cleared_debt_leftover_moves_down_the_list_same_month(self):
        debts = [
            DebtAccount(id=1, name="Store Card", balance=479.36, apr=19.05, minimum_payment=152.48),
            DebtAccount(id=2, name="Visa", balance=4917.33, apr=28.02, minimum_payment=298.36),
        ]
        outlay = 152.48 + 298.36 + 100.0

        for strategy in (PayoffStrategy.AVALANCHE, PayoffStrategy.SNOWBALL):
            result = simulate_payoff(debts=debts, extra_payment=100.0, strategy=strategy, today=TODAY)
            # Every month but the last spends the full budget.
            for row in result.schedule[:-1]:
                assert row.payment == pytest.approx(outlay, abs=0.011)
            assert result.schedule[-1].payment <= outlay + 0.011

        avalanche = simulate_payoff(debts=debts, extra_payment=100.0, strategy="avalanche")
        snowball = simulate_payoff(debts=debts, extra_payment=100.0, strategy="snowball")
        assert avalanche.total_interest <= snowball.total_interest + 1e-6

    @pytest.mark.parametrize("seed", range(40))
    def test_avalanche_interest_not_worse_than_snowball(self, seed):
        debts, extra = _random_portfolio(seed)

        avalanche = simulate_payoff(debts=debts, extra_payment=extra, strategy="avalanche")
        snowball = simulate_payoff(debts=debts, extra_payment=extra, strategy="snowball")

        assert avalanche.total_interest <= snowball.total_interest + 0.01

    def test_avalanche_interest_not_worse_than_snowball_on_fixture(self, sample_debts):
        avalanche = simulate_payoff(debts=sample_debts, extra_payment=200.0, strategy="avalanche")
        snowball = simulate_payoff(debts=sample_debts, extra_payment=200.0, strategy="snowball")
        assert avalanche.total_interest <= snowball.total_interest + 1e-6

    @pytest.mark.parametrize("seed", range(15))
    def test_more_extra_never_slows_payoff(self, seed):
        debts, _ = _random_portfolio(seed)
        for strategy in PayoffStrategy:
            previous = None
            for extra in (0.0, 50.0, 100.0, 250.0, 500.0):
                result = simulate_payoff(debts=debts, extra_payment=extra, strategy=strategy)
                if previous is not None:
                    assert result.months_to_payoff <= previous.months_to_payoff
                    assert result.total_interest <= previous.total_interest + 0.01
                previous = result

    def test_month_cap_stops_non_amortizing_debt(self):
        # 2% monthly interest equals 200; the 100 minimum never touches principal.
        debt = DebtAccount(id=1, name="Stuck", balance=10000.0, apr=24.0, minimum_payment=100.0)

        result = simulate_payoff(debts=[debt], extra_payment=0.0, strategy="avalanche", today=TODAY)

        assert result.months_to_payoff == MAX_MONTHS
        assert len(result.schedule) == MAX_MONTHS
        assert result.payoff_order == []
        assert result.schedule[-1].remaining_balance == pytest.approx(10000.0)
        assert result.total_interest == pytest.approx(200.0 * MAX_MONTHS)
        assert result.debt_free_date == date(2074, 1, 15)

    def test_zero_balance_debts_are_skipped(self):
        debts = [
            DebtAccount(id=1, name="Closed Card", balance=0.0, apr=20.0, minimum_payment=25.0),
            DebtAccount(id=2, name="Loan", balance=500.0, apr=0.0, minimum_payment=100.0),
        ]

        result = simulate_payoff(debts=debts, extra_payment=0.0, strategy="snowball", today=TODAY)

        assert result.payoff_order == ["Loan"]
        assert result.months_to_payoff == 5
        closed = next(row for row in result.debt_progress if row.name == "Closed Card")
        assert closed.payoff_month == 0
        assert closed.amount_paid == 0

    def test_negative_inputs_are_treated_as_zero(self):
        debt = DebtAccount(id=1, name="Loan", balance=600.0, apr=-5.0, minimum_payment=100.0)

        result = simulate_payoff(debts=[debt], extra_payment=-50.0, strategy="avalanche", today=TODAY)

        assert result.months_to_payoff == 6
        assert result.total_interest == 0

    def test_non_finite_inputs_are_treated_as_zero(self):
        debt = DebtAccount(id=1, name="Loan", balance=600.0, apr=float("nan"), minimum_payment=100.0)

        result = simulate_payoff(
            debts=[debt], extra_payment=float("inf"), strategy="avalanche", today=TODAY
        )

        assert result.months_to_payoff == 6
        assert result.total_interest == 0

    def test_result_serializes_to_json(self, sample_debts):
        result = simulate_payoff(
            debts=sample_debts, extra_payment=100.0, strategy="hybrid", today=TODAY
        )

        payload = json.loads(json.dumps(result.to_dict()))

        assert payload["strategy"] == "hybrid"
        assert payload["months_to_payoff"] == len(payload["schedule"])
        assert set(payload["schedule"][0]) == {
            "month",
            "payment",
            "remaining_balance",
            "interest_paid",
            "principal_paid",
        }
        assert len(payload["debt_progress"]) == 3


class TestCompareStrategies:
    def test_recommends_lowest_interest(self, sample_debts):
        comparison = compare_strategies(debts=sample_debts, extra_payment=200.0, today=TODAY)

        assert set(comparison.results) == set(PayoffStrategy)
        cheapest = min(result.total_interest for result in comparison.results.values())
        assert comparison.results[comparison.recommended].total_interest == pytest.approx(cheapest)

    def test_savings_are_measured_against_minimum_payments(self, sample_debts):
        comparison = compare_strategies(debts=sample_debts, extra_payment=200.0, today=TODAY)

        for strategy in PayoffStrategy:
            assert comparison.interest_saved(strategy) > 0
            assert comparison.months_saved(strategy) > 0

        payload = comparison.to_dict()
        assert payload["recommended"] == comparison.recommended.value
        assert payload["strategies"]["avalanche"]["interest_saved"] == pytest.approx(
            comparison.interest_saved(PayoffStrategy.AVALANCHE)
        )

    def test_equal_results_prefer_avalanche(self):
        debts = [DebtAccount(id=1, name="Only", balance=1000.0, apr=10.0, minimum_payment=100.0)]

        comparison = compare_strategies(debts=debts, extra_payment=50.0, today=TODAY)

        assert comparison.recommended is PayoffStrategy.AVALANCHE

    def test_no_debts_has_no_recommendation(self):
        comparison = compare_strategies(debts=[], extra_payment=50.0, today=TODAY)

        assert comparison.recommended is None
        assert comparison.to_dict()["recommended"] is None


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2024, 11, 15), 3, date(2025, 2, 15)),
        (date(2024, 5, 10), 0, date(2024, 5, 10)),
        (date(2024, 3, 31), -1, date(2024, 2, 29)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected
