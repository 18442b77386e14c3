"""Chart helpers rendering payoff projections to PNG files."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from .debts import PayoffResult, PayoffStrategy, StrategyComparison

PAID_OFF_MARKER = 1.0

_STRATEGY_COLORS = {
    PayoffStrategy.AVALANCHE: "#4F46E5",
    PayoffStrategy.SNOWBALL: "#0EA5E9",
    PayoffStrategy.HYBRID: "#F59E0B",
}


def _save(fig) -> Path:
    with NamedTemporaryFile(delete=False, suffix=".png") as tmp:
        fig.savefig(tmp.name, bbox_inches="tight", dpi=100)
        path = Path(tmp.name)
    plt.close(fig)
    return path


def _placeholder(message: str) -> Path:
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=14, color="#666")
    ax.axis("off")
    return _save(fig)


def _currency_axis(ax) -> None:
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, p: f"${x:,.0f}"))
    ax.grid(True, linestyle="--", alpha=0.3)
    ax.set_axisbelow(True)


def payoff_chart_png(result: PayoffResult) -> Path:
    """Render the remaining balance of *result* month by month."""

    if not result.schedule:
        return _placeholder("No payoff schedule")

    starting_debt = sum(progress.initial_balance for progress in result.debt_progress)
    x_vals = [0] + [row.month for row in result.schedule]
    totals = [starting_debt] + [row.remaining_balance for row in result.schedule]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(x_vals, totals, color=_STRATEGY_COLORS[result.strategy], linewidth=2.5)
    ax.fill_between(x_vals, totals, color="#E0E7FF", alpha=0.5)

    # Halfway milestone
    if starting_debt > 0:
        for month, total in zip(x_vals, totals):
            if total <= starting_debt / 2:
                ax.axvline(x=month, color="#22C55E", linestyle="--", alpha=0.6, linewidth=1.5)
                ax.annotate(
                    "50% Paid!", (month, total),
                    xytext=(10, 30), textcoords="offset points",
                    fontsize=9, color="#22C55E", fontweight="bold",
                )
                break

    if totals[-1] < PAID_OFF_MARKER:
        ax.scatter([x_vals[-1]], [0], s=200, c="gold", marker="*", zorder=5, edgecolors="#F59E0B")
        ax.annotate(
            "DEBT FREE!", (x_vals[-1], 0),
            xytext=(0, 25), textcoords="offset points",
            ha="center", fontsize=12, fontweight="bold", color="#16A34A",
        )

    _currency_axis(ax)
    ax.set_title(
        f"Debt Payoff Projection ({result.strategy.value.title()})",
        fontsize=14, fontweight="bold", pad=15,
    )
    ax.set_ylabel("Remaining Balance ($)", fontsize=11)
    ax.set_xlabel("Month", fontsize=11)

    textstr = (
        f"Starting Debt: ${starting_debt:,.0f}\n"
        f"Months to Payoff: {result.months_to_payoff}\n"
        f"Total Interest: ${result.total_interest:,.0f}\n"
        f"Debt Free: {result.debt_free_date:%b %Y}"
    )
    props = dict(boxstyle="round", facecolor="lavender", alpha=0.8)
    ax.text(0.98, 0.98, textstr, transform=ax.transAxes, fontsize=9,
            verticalalignment="top", horizontalalignment="right", bbox=props)

    plt.tight_layout()
    return _save(fig)


def comparison_chart_png(comparison: StrategyComparison) -> Path:
    """Render remaining balance per strategy on one axis."""

    if not any(result.schedule for result in comparison.results.values()):
        return _placeholder("No debts to compare")

    fig, ax = plt.subplots(figsize=(10, 6))
    for strategy, result in comparison.results.items():
        starting_debt = sum(progress.initial_balance for progress in result.debt_progress)
        x_vals = [0] + [row.month for row in result.schedule]
        totals = [starting_debt] + [row.remaining_balance for row in result.schedule]
        label = f"{strategy.value.title()} ({result.months_to_payoff} mo)"
        if strategy == comparison.recommended:
            label += " *"
        ax.plot(x_vals, totals, label=label, color=_STRATEGY_COLORS[strategy], linewidth=2)

    _currency_axis(ax)
    ax.set_title("Strategy Comparison", fontsize=14, fontweight="bold", pad=15)
    ax.set_ylabel("Remaining Balance ($)", fontsize=11)
    ax.set_xlabel("Month", fontsize=11)
    ax.legend(loc="upper right", framealpha=0.9)

    plt.tight_layout()
    return _save(fig)
