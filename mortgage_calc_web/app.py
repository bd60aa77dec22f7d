import logging
import os
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from mortgage_calc.engine import (
    compute_monthly_costs,
    generate_schedule,
    resolve_monthly_payment,
    summarize_schedule,
)
from mortgage_calc.utils import parse_number
from mortgage_calc_web.history_store import (
    DEFAULT_MAX_ENTRIES,
    HistoryStore,
    HistoryStoreError,
    create_store_from_env,
)

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")


def _store() -> HistoryStore:
    return current_app.extensions["mortgage_history"]


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@api.get("/mortgage-history")
def list_history():
    try:
        entries = _store().list_entries()
    except HistoryStoreError:
        logger.exception("Failed to fetch mortgage history")
        return _error("Failed to fetch mortgage history", 500)
    return jsonify([entry.to_dict() for entry in entries])


@api.post("/mortgage-history")
def add_history():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("Request body must be a JSON object", 400)
    label = payload.get("label")
    if label is not None and not isinstance(label, str):
        return _error("Label must be a string", 400)
    try:
        entry = _store().add_entry(
            inputs=payload.get("inputs"),
            results=payload.get("results"),
            label=label or None,
        )
    except HistoryStoreError:
        logger.exception("Failed to save mortgage history")
        return _error("Failed to save mortgage history", 500)
    return jsonify(entry.to_dict()), 201


@api.delete("/mortgage-history/<entry_id>")
def remove_history(entry_id: str):
    try:
        removed = _store().remove_entry(entry_id)
    except HistoryStoreError:
        logger.exception("Failed to delete mortgage history")
        return _error("Failed to delete mortgage history", 500)
    if not removed:
        return _error("History entry not found", 404)
    return "", 204


@api.post("/mortgage/calculate")
def calculate_mortgage():
    """Cost breakdown for the payment calculator form."""
    form = _json_body()
    costs = compute_monthly_costs(
        parse_number(form.get("homePrice")),
        parse_number(form.get("downPaymentPercent")),
        parse_number(form.get("interestRate")),
        parse_number(form.get("termYears")),
        property_tax_rate_percent=parse_number(form.get("propertyTaxRate")),
        insurance_monthly=parse_number(form.get("insuranceMonthly")),
        hoa_monthly=parse_number(form.get("hoaMonthly")),
    )
    return jsonify(costs.to_dict())


@api.post("/amortization")
def amortization():
    """Schedule and totals for the amortization view."""
    form = _json_body()
    principal = parse_number(form.get("loanAmount"))
    rate = parse_number(form.get("interestRate"))
    years = parse_number(form.get("termYears"))
    monthly_payment = resolve_monthly_payment(principal, rate, years, parse_number(form.get("monthlyPI")))
    schedule = generate_schedule(principal, rate, years, monthly_payment)
    return jsonify(
        {
            "monthly_payment": monthly_payment,
            "schedule": [entry.to_dict() for entry in schedule],
            "summary": summarize_schedule(schedule).to_dict(),
        }
    )


def create_app(store: Optional[HistoryStore] = None) -> Flask:
    app = Flask(__name__)
    if store is None:
        store = create_store_from_env(
            os.environ.get("MORTGAGE_HISTORY_DATABASE_URL"),
            os.environ.get("MORTGAGE_HISTORY_PATH"),
            int(os.environ.get("MORTGAGE_HISTORY_MAX_ENTRIES", DEFAULT_MAX_ENTRIES)),
        )
    app.extensions["mortgage_history"] = store
    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("Starting Mortgage Calculator API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
