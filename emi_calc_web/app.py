import io
import logging
import os

import click
from flask import Flask, Response, jsonify, render_template, request, send_file

from emi_calc.config import SCHEDULE_PREVIEW_ROWS, configure_logging
from emi_calc.engine import compute_loan
from emi_calc.errors import InvalidInput
from emi_calc.export import render_pdf, serialize_schedule, summary_dict, write_csv
from emi_calc.main import build_params_from_options, parse_money, parse_number
from emi_calc.scenarios import adjust_terms
from emi_calc.utils import format_currency, to_months

configure_logging(os.environ.get("EMI_CALC_LOG_LEVEL"))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.jinja_env.filters["currency"] = format_currency

INPUT_ERRORS = (InvalidInput, ValueError, click.BadParameter)


def parse_form_list(value: str) -> list[str]:
    """Parse a comma or newline separated list of entries from a form field.

    Returns a list of trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    parts = [p.strip() for p in value.replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _form_to_params(form):
    return build_params_from_options(
        form.get("principal", "").strip(),
        form.get("rate", "").strip(),
        to_months(form.get("tenure", "0") or "0"),
        form.get("loan_type", ""),
        form.get("category", ""),
        form.get("interest_type", "fixed"),
        form.get("processing_charges", "").strip() or None,
        form.get("file_charges", "").strip() or None,
        form.get("insurance_charges", "").strip() or None,
        form.get("commission_charges", "").strip() or None,
        tuple(parse_form_list(form.get("prepayments", ""))),
    )


def _payload_prepayments(payload) -> tuple:
    """Return the ``prepayments`` list of a JSON request as a tuple."""
    prepayments = payload.get("prepayments") or []
    if not isinstance(prepayments, list):
        raise InvalidInput("prepayments must be a list of MONTH:AMOUNT[:TYPE] strings")
    return tuple(prepayments)


def _schedule_for_view(schedule, show_full_schedule: bool):
    """Return the rows to render and how many were left out."""
    if show_full_schedule or len(schedule) <= SCHEDULE_PREVIEW_ROWS:
        return schedule, 0
    return schedule[:SCHEDULE_PREVIEW_ROWS], len(schedule) - SCHEDULE_PREVIEW_ROWS


@app.route("/", methods=["GET", "POST"])
def index():
    result = None
    schedule = None
    truncated = 0
    error = None
    show_full_schedule = False

    if request.method == "POST":
        show_full_schedule = request.form.get("show_full_schedule") == "1"
        try:
            params = _form_to_params(request.form)
            result = compute_loan(params)
            schedule, truncated = _schedule_for_view(result.schedule, show_full_schedule)
        except INPUT_ERRORS as exc:
            logger.info("Rejected loan form: %s", exc)
            error = str(exc)

    return render_template(
        "index.html",
        form=request.form,
        result=result,
        schedule=schedule,
        truncated=truncated,
        show_full_schedule=show_full_schedule,
        error=error,
    )


@app.post("/api/loan")
def api_loan():
    payload = request.get_json(silent=True) or {}
    try:
        params = build_params_from_options(
            str(payload.get("principal", "")),
            str(payload.get("rate", "")),
            to_months(payload.get("tenure", 0)),
            payload.get("loan_type", ""),
            payload.get("category", ""),
            payload.get("interest_type", "fixed"),
            str(payload.get("processing_charges", "") or ""),
            str(payload.get("file_charges", "") or ""),
            str(payload.get("insurance_charges", "") or ""),
            str(payload.get("commission_charges", "") or ""),
            _payload_prepayments(payload),
        )
        result = compute_loan(params)
    except INPUT_ERRORS as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"summary": summary_dict(result), "schedule": serialize_schedule(result.schedule)})


@app.post("/api/solve")
def api_solve():
    payload = request.get_json(silent=True) or {}
    try:
        emi = payload.get("emi")
        terms = adjust_terms(
            parse_money(str(payload.get("principal", "")), "principal"),
            parse_number(payload.get("rate"), "rate"),
            to_months(payload.get("tenure", 0)),
            payload.get("change", ""),
            parse_number(payload.get("value"), "value"),
            payload.get("hold", ""),
            emi=parse_number(emi, "emi") if emi is not None else None,
        )
    except INPUT_ERRORS as exc:
        return jsonify({"error": str(exc)}), 400
    return jsonify({"emi": float(terms.emi), "rate": float(terms.rate), "tenure": terms.tenure})


@app.post("/export/<fmt>")
def export(fmt: str):
    try:
        params = _form_to_params(request.form)
        result = compute_loan(params)
    except INPUT_ERRORS as exc:
        return Response(str(exc), status=400, mimetype="text/plain")

    if fmt == "csv":
        buffer = io.StringIO()
        write_csv(buffer, result.schedule)
        return Response(
            buffer.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=loan-schedule.csv"},
        )
    if fmt == "pdf":
        buffer = io.BytesIO()
        render_pdf(buffer, result, params.principal)
        buffer.seek(0)
        return send_file(
            buffer,
            mimetype="application/pdf",
            as_attachment=True,
            download_name="loan-schedule.pdf",
        )
    if fmt == "json":
        return jsonify({"summary": summary_dict(result), "schedule": serialize_schedule(result.schedule)})
    return Response(f"Unsupported export format: {fmt}", status=404, mimetype="text/plain")


if __name__ == "__main__":
    print("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
