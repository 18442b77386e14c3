"""Liability routes."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping

from flask import (
    Response,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from ...domain.repositories import LiabilityRepository
from ...extensions import new_session
from ...infra.repositories import SQLModelLiabilityRepository
from ...logging_config import get_logger
from ...models.liability import DEBT_KINDS, Liability
from ...services.debts import compare_strategies, simulate_payoff
from ...services.export_csv import schedule_csv_text
from ...services.liabilities import refinance_savings, summarize, to_debt_accounts
from . import bp
from .forms import STRATEGY_CHOICES, LiabilityForm, PlanRequest, coerce_amount

logger = get_logger(__name__)


@bp.app_template_filter("currency")
def _currency(amount: float | None) -> str:
    return f"${(amount or 0.0):,.2f}"


@bp.app_template_filter("percentage")
def _percentage(amount: float | None) -> str:
    return f"{(amount or 0.0):.2f}%"


def _repository() -> LiabilityRepository:
    return SQLModelLiabilityRepository(new_session)


def _prefers_json_response() -> bool:
    accepts = request.accept_mimetypes
    return request.is_json or accepts["application/json"] > accepts["text/html"]


def _payload() -> Mapping[str, Any]:
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, Mapping) else {}
    return request.form


def _plan_request() -> PlanRequest:
    config = current_app.config["CLEARPATH_CONFIG"]
    return PlanRequest.from_args(
        request.args,
        default_strategy=config.DEFAULT_STRATEGY,
        default_extra=config.DEFAULT_EXTRA_PAYMENT,
    )


def _bad_plan_request(plan_request: PlanRequest, *, page: bool = False):
    message = "; ".join(msg for msgs in plan_request.errors.values() for msg in msgs)
    logger.info("Rejected plan request", extra={"errors": plan_request.errors})
    if page and not _prefers_json_response():
        flash(message, "error")
        return redirect(url_for("liabilities.list_liabilities"))
    return jsonify({"error": "invalid_request", "details": plan_request.errors, "message": message}), 400


def _get_or_404(liability_id: int) -> Liability:
    liability = _repository().get_by_id(liability_id)
    if liability is None:
        abort(404)
    return liability


def _render_form(form: LiabilityForm, *, liability: Liability | None = None, status: int = 200):
    return (
        render_template(
            "liabilities/form.html",
            form=form,
            liability=liability,
            kind_choices=DEBT_KINDS,
        ),
        status,
    )


def _form_errors(form: LiabilityForm):
    if _prefers_json_response():
        return jsonify({"error": "validation_failed", "details": form.errors}), 400
    return None


@bp.get("/")
def list_liabilities():
    """Display liabilities with summary totals."""

    liabilities = _repository().list_all()
    monthly_income = request.args.get("monthly_income")
    summary = summarize(
        liabilities,
        monthly_income=coerce_amount(monthly_income) if monthly_income else None,
    )
    if _prefers_json_response():
        return jsonify(
            {
                "liabilities": [liability.to_dict() for liability in liabilities],
                "summary": summary.to_dict(),
            }
        )
    return render_template(
        "liabilities/index.html",
        liabilities=liabilities,
        summary=summary,
        kind_choices=DEBT_KINDS,
        strategy_choices=STRATEGY_CHOICES,
    )


@bp.get("/new")
def new_liability():
    """Render creation form for a liability."""

    return _render_form(LiabilityForm())


@bp.post("/new")
def create_liability():
    """Validate and persist a new liability."""

    form = LiabilityForm.from_mapping(_payload())
    if not form.validate():
        return _form_errors(form) or _render_form(form, status=400)

    liability = _repository().create(form.apply_to(Liability(name=form.name)))
    logger.info("Liability created", extra={"liability_id": liability.id, "kind": liability.kind})

    if _prefers_json_response():
        return jsonify(liability.to_dict()), 201
    flash(f"Saved {liability.name}.", "success")
    return redirect(url_for("liabilities.list_liabilities"))


@bp.get("/<int:liability_id>/edit")
def edit_liability(liability_id: int):
    """Render the edit form for an existing liability."""

    liability = _get_or_404(liability_id)
    return _render_form(LiabilityForm.from_liability(liability), liability=liability)


@bp.post("/<int:liability_id>")
def update_liability(liability_id: int):
    """Validate and persist changes to a liability."""

    liability = _get_or_404(liability_id)
    form = LiabilityForm.from_mapping(_payload())
    if not form.validate():
        return _form_errors(form) or _render_form(form, liability=liability, status=400)

    liability = _repository().update(form.apply_to(liability))
    logger.info("Liability updated", extra={"liability_id": liability.id})

    if _prefers_json_response():
        return jsonify(liability.to_dict())
    flash(f"Updated {liability.name}.", "success")
    return redirect(url_for("liabilities.list_liabilities"))


@bp.post("/<int:liability_id>/delete")
def delete_liability(liability_id: int):
    """Remove a liability."""

    if not _repository().delete(liability_id):
        abort(404)
    logger.info("Liability deleted", extra={"liability_id": liability_id})

    if _prefers_json_response():
        return "", 204
    flash("Debt removed.", "info")
    return redirect(url_for("liabilities.list_liabilities"))


@bp.get("/plan")
def payoff_plan():
    """Project payoff of every debt under the requested strategy."""

    plan_request = _plan_request()
    if not plan_request.is_valid:
        return _bad_plan_request(plan_request, page=True)

    result = simulate_payoff(
        debts=to_debt_accounts(_repository().list_all()),
        extra_payment=plan_request.extra_payment,
        strategy=plan_request.strategy,
        today=date.today(),
    )
    if _prefers_json_response():
        return jsonify(result.to_dict())
    return render_template(
        "liabilities/plan.html",
        result=result,
        plan_request=plan_request,
        strategy_choices=STRATEGY_CHOICES,
    )


@bp.get("/compare")
def compare_plans():
    """Compare avalanche, snowball and hybrid for the requested extra payment."""

    plan_request = _plan_request()
    comparison = compare_strategies(
        debts=to_debt_accounts(_repository().list_all()),
        extra_payment=plan_request.extra_payment,
        today=date.today(),
    )
    if _prefers_json_response():
        return jsonify(comparison.to_dict())
    return render_template(
        "liabilities/compare.html",
        comparison=comparison,
        strategy_choices=STRATEGY_CHOICES,
    )


@bp.get("/plan/chart.png")
def plan_chart():
    """Serve the remaining-balance chart for the requested plan."""

    plan_request = _plan_request()
    if not plan_request.is_valid:
        return _bad_plan_request(plan_request)

    # Imported lazily so matplotlib only loads when a chart is requested.
    from ...services.charts import payoff_chart_png

    result = simulate_payoff(
        debts=to_debt_accounts(_repository().list_all()),
        extra_payment=plan_request.extra_payment,
        strategy=plan_request.strategy,
    )
    path = payoff_chart_png(result)
    try:
        data = path.read_bytes()
    finally:
        path.unlink(missing_ok=True)
    return Response(data, mimetype="image/png")


@bp.get("/compare/chart.png")
def compare_chart():
    """Serve the strategy comparison chart."""

    from ...services.charts import comparison_chart_png

    comparison = compare_strategies(
        debts=to_debt_accounts(_repository().list_all()),
        extra_payment=_plan_request().extra_payment,
    )
    path = comparison_chart_png(comparison)
    try:
        data = path.read_bytes()
    finally:
        path.unlink(missing_ok=True)
    return Response(data, mimetype="image/png")


@bp.get("/plan/export.csv")
def export_plan():
    """Download the monthly schedule of the requested plan as CSV."""

    plan_request = _plan_request()
    if not plan_request.is_valid:
        return _bad_plan_request(plan_request)

    result = simulate_payoff(
        debts=to_debt_accounts(_repository().list_all()),
        extra_payment=plan_request.extra_payment,
        strategy=plan_request.strategy,
    )
    filename = f"payoff-{result.strategy.value}.csv"
    return Response(
        schedule_csv_text(result),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@bp.get("/refinance")
def refinance():
    """Estimate interest saved by refinancing open debts at a new rate."""

    rate = coerce_amount(request.args.get("rate"))
    try:
        term_months = int(request.args.get("term", "0"))
        estimates = refinance_savings(
            _repository().list_active(), new_rate=rate, term_months=term_months
        )
    except ValueError as exc:
        logger.info("Rejected refinance request", extra={"error": str(exc)})
        return jsonify({"error": "invalid_request", "message": str(exc)}), 400

    return jsonify(
        {
            "rate": rate,
            "term_months": term_months,
            "total_savings": sum(estimate.savings for estimate in estimates),
            "debts": [
                {
                    "id": estimate.liability_id,
                    "name": estimate.name,
                    "balance": estimate.balance,
                    "current_interest": estimate.current_interest,
                    "refinanced_interest": estimate.refinanced_interest,
                    "savings": estimate.savings,
                }
                for estimate in estimates
            ],
        }
    )
