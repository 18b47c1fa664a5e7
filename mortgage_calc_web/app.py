"""Flask JSON API over the mortgage calculation engine."""

import os

from flask import Flask, jsonify, request

from mortgage_calc.affordability import compute_affordability
from mortgage_calc.data_models import LoanTerms
from mortgage_calc.engine import aggregate_yearly, compute_monthly_payment, generate_amortization_schedule
from mortgage_calc.errors import MortgageCalcError
from mortgage_calc.extra_payments import simulate_extra_payments
from mortgage_calc.islamic import compute_financing
from mortgage_calc.reference_data import BANK_RATES, banks_for
from mortgage_calc.refinance import compare_refinancing
from mortgage_calc.upfront import compute_upfront_costs
from mortgage_calc.utils import as_serializable, to_decimal


class PayloadError(ValueError):
    """The request body is missing a field or is not a JSON object."""


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PayloadError("Request body must be a JSON object")
    return data


def _field(data: dict, name: str, default=None):
    value = data.get(name, default)
    if value is None:
        raise PayloadError(f"Missing required field: {name}")
    return value


def _flag(data: dict, name: str) -> bool:
    value = data.get(name, False)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _loan_args(data: dict):
    return _field(data, "principal"), _field(data, "rate"), _field(data, "tenure_years")


def create_app(config=None) -> Flask:
    app = Flask(__name__)
    app.config["SCHEDULE_PREVIEW"] = int(os.environ.get("MORTGAGE_CALC_SCHEDULE_PREVIEW", "120"))
    if config:
        app.config.update(config)

    @app.errorhandler(MortgageCalcError)
    @app.errorhandler(PayloadError)
    def handle_bad_input(exc):
        app.logger.info("rejected %s: %s", request.path, exc)
        return jsonify({"error": str(exc)}), 400

    @app.post("/api/payment")
    def payment():
        summary = compute_monthly_payment(*_loan_args(_payload()))
        return jsonify(as_serializable(summary))

    @app.post("/api/schedule")
    def schedule():
        data = _payload()
        principal, rate, tenure = _loan_args(data)
        summary = compute_monthly_payment(principal, rate, tenure)
        rows = generate_amortization_schedule(principal, rate, tenure).rows()
        body = {"summary": as_serializable(summary), "total_rows": len(rows)}
        if _flag(data, "yearly"):
            body["yearly"] = as_serializable(aggregate_yearly(rows))
        preview = app.config["SCHEDULE_PREVIEW"]
        if _flag(data, "full") or len(rows) <= preview:
            body["schedule"] = as_serializable(rows)
        else:
            body["schedule"] = as_serializable(rows[:preview])
            body["truncated"] = len(rows) - preview
        return jsonify(body)

    @app.post("/api/extra-payments")
    def extra_payments():
        data = _payload()
        loan = LoanTerms(*_loan_args(data))
        result = simulate_extra_payments(
            loan,
            extra_monthly=data.get("extra_monthly", 0),
            lump_sum=data.get("lump_sum", 0),
            lump_sum_month=data.get("lump_sum_month", 1),
        )
        return jsonify(as_serializable(result))

    @app.post("/api/refinance")
    def refinance():
        data = _payload()
        result = compare_refinancing(_field(data, "current"), _field(data, "proposed"))
        return jsonify(as_serializable(result))

    @app.post("/api/affordability")
    def affordability():
        data = _payload()
        dsr_percent = data.get("dsr_limit_percent")
        dsr_limit = None if dsr_percent is None else to_decimal(dsr_percent, "dsr_limit_percent") / 100
        result = compute_affordability(
            _field(data, "monthly_income"),
            data.get("existing_commitments", 0),
            dsr_limit,
            _field(data, "rate"),
            _field(data, "tenure_years"),
        )
        return jsonify(as_serializable(result))

    @app.post("/api/upfront-costs")
    def upfront_costs():
        data = _payload()
        result = compute_upfront_costs(
            _field(data, "property_price"),
            _field(data, "loan_amount"),
            _flag(data, "first_time_buyer"),
            _flag(data, "campaign_exemption"),
        )
        return jsonify(as_serializable(result))

    @app.post("/api/islamic")
    def islamic():
        data = _payload()
        result = compute_financing(
            data.get("kind", "musharakah_mutanaqisah"),
            _field(data, "amount"),
            _field(data, "rate"),
            _field(data, "tenure_years"),
            data.get("customer_contribution"),
        )
        body = as_serializable(result)
        body["cost_of_borrowing"] = float(result.cost_of_borrowing)
        return jsonify(body)

    @app.get("/api/banks")
    def banks():
        loan_type = request.args.get("type")
        types = [loan_type] if loan_type else sorted(BANK_RATES)
        return jsonify({t: as_serializable(banks_for(t)) for t in types})

    return app


app = create_app()


if __name__ == "__main__":
    print("Starting Mortgage Calculator API...")
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
