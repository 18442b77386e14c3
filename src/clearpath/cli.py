"""Flask CLI commands for ClearPath."""

from __future__ import annotations

from datetime import date

import click

DEMO_LIABILITIES = [
    {"name": "Visa Rewards", "kind": "credit_card", "balance": 6240.18, "apr": 23.99, "minimum_payment": 160.0, "due_day": 12},
    {"name": "Store Card", "kind": "credit_card", "balance": 850.0, "apr": 26.5, "minimum_payment": 35.0, "due_day": 3},
    {"name": "Auto Loan", "kind": "auto_loan", "balance": 17980.41, "apr": 6.25, "minimum_payment": 410.0, "due_day": 20, "opened_on": date(2022, 4, 18)},
    {"name": "Student Loan", "kind": "student_loan", "balance": 28456.72, "apr": 4.65, "minimum_payment": 320.0, "due_day": 9, "opened_on": date(2016, 9, 1)},
]


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("clearpath-seed")
    def clearpath_seed() -> None:
        """Insert demo debts that are not already present."""

        from sqlmodel import select

        from .extensions import session_scope
        from .models import Liability

        created = 0
        with session_scope() as session:
            existing = set(session.exec(select(Liability.name)).all())
            for row in DEMO_LIABILITIES:
                if row["name"] in existing:
                    continue
                session.add(Liability(**row))
                created += 1
        click.echo(f"Seeded {created} debt(s).")

    @app.cli.command("clearpath-plan")
    @click.option(
        "--strategy",
        type=click.Choice(["avalanche", "snowball", "hybrid"], case_sensitive=False),
        default=None,
        help="Payoff strategy (defaults to CLEARPATH_DEFAULT_STRATEGY).",
    )
    @click.option("--extra", type=float, default=None, help="Extra monthly payment.")
    @click.option("--compare", is_flag=True, default=False, help="Show every strategy.")
    def clearpath_plan(strategy: str | None, extra: float | None, compare: bool) -> None:
        """Print a payoff plan for the stored debts."""

        from .extensions import new_session
        from .infra.repositories import SQLModelLiabilityRepository
        from .services.debts import compare_strategies, simulate_payoff
        from .services.liabilities import to_debt_accounts

        config = app.config["CLEARPATH_CONFIG"]
        extra_payment = max(extra if extra is not None else config.DEFAULT_EXTRA_PAYMENT, 0.0)
        debts = to_debt_accounts(SQLModelLiabilityRepository(new_session).list_all())
        if not debts:
            click.echo("No debts recorded. Run `flask clearpath-seed` or add one in the app.")
            return

        if compare:
            comparison = compare_strategies(debts=debts, extra_payment=extra_payment)
            for name, result in comparison.results.items():
                marker = " (recommended)" if name == comparison.recommended else ""
                click.echo(
                    f"{name.value:<10} {result.months_to_payoff:>4} months  "
                    f"interest ${result.total_interest:,.2f}  "
                    f"saves ${comparison.interest_saved(name):,.2f}{marker}"
                )
            return

        try:
            result = simulate_payoff(
                debts=debts,
                extra_payment=extra_payment,
                strategy=strategy or config.DEFAULT_STRATEGY,
            )
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Strategy: {result.strategy.value}")
        click.echo(f"Months to payoff: {result.months_to_payoff}")
        click.echo(f"Debt free: {result.debt_free_date:%B %Y}")
        click.echo(f"Total interest: ${result.total_interest:,.2f}")
        click.echo(f"Total payments: ${result.total_payments:,.2f}")
        for position, name in enumerate(result.payoff_order, start=1):
            click.echo(f"  {position}. {name}")
