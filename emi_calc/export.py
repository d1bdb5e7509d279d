"""Exporters for computed loan results.

Schedules can be written as CSV (one row per month), JSON (summary plus
schedule) or a paginated PDF table rendered with reportlab.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import IO, Any, BinaryIO, Dict, Iterable, List, Union

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .data_models import EMIScheduleItem, LoanCalculationResult
from .utils import format_currency

CSV_HEADER = [
    "Month",
    "EMI",
    "Principal",
    "Interest",
    "Prepayment",
    "Remaining_Balance",
    "Cumulative_Interest",
    "Cumulative_Principal",
]


def summary_dict(result: LoanCalculationResult) -> Dict[str, Any]:
    """Return the aggregate figures of ``result`` as JSON-friendly values."""
    return {
        "emi": float(result.emi),
        "total_repayment": float(result.total_repayment),
        "total_interest": float(result.total_interest),
        "total_principal": float(result.total_principal),
        "total_prepayment": float(result.total_prepayment),
        "disbursed_amount": float(result.disbursed_amount),
        "tax_benefit": float(result.tax_benefit),
        "effective_interest_rate": float(result.effective_interest_rate),
        "payments": len(result.schedule),
    }


def serialize_schedule(schedule: Iterable[EMIScheduleItem]) -> List[Dict[str, Any]]:
    """Convert schedule rows into JSON-serialisable dictionaries."""
    return [
        {
            "month": item.month,
            "emi": float(item.emi),
            "principal": float(item.principal),
            "interest": float(item.interest),
            "prepayment": float(item.prepayment),
            "balance": float(item.balance),
            "cumulative_interest": float(item.cumulative_interest),
            "cumulative_principal": float(item.cumulative_principal),
        }
        for item in schedule
    ]


def write_csv(stream: IO[str], schedule: Iterable[EMIScheduleItem]) -> None:
    """Write the schedule as CSV to an open text stream."""
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    for item in schedule:
        writer.writerow(
            [
                item.month,
                f"{item.emi:.2f}",
                f"{item.principal:.2f}",
                f"{item.interest:.2f}",
                f"{item.prepayment:.2f}",
                f"{item.balance:.2f}",
                f"{item.cumulative_interest:.2f}",
                f"{item.cumulative_principal:.2f}",
            ]
        )


def export_to_csv(path: Path, schedule: Iterable[EMIScheduleItem]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, schedule)


def export_to_json(path: Path, result: LoanCalculationResult) -> None:
    """Export summary and schedule to a JSON file."""
    data = {"summary": summary_dict(result), "schedule": serialize_schedule(result.schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def render_pdf(target: Union[str, Path, BinaryIO], result: LoanCalculationResult, principal: Any) -> None:
    """Render the summary and full schedule as a PDF.

    ``target`` is a file path or a binary stream. The schedule table repeats
    its header row on every page.
    """
    if isinstance(target, Path):
        target = str(target)
    styles = getSampleStyleSheet()
    doc = SimpleDocTemplate(target, pagesize=A4, title="Loan EMI Schedule")
    story = [
        Paragraph("Loan EMI Schedule", styles["Title"]),
        Paragraph(f"Loan Amount: {format_currency(principal, 'Rs. ')}", styles["Normal"]),
        Paragraph(f"EMI: {format_currency(result.emi, 'Rs. ')}", styles["Normal"]),
        Paragraph(f"Total Interest: {format_currency(result.total_interest, 'Rs. ')}", styles["Normal"]),
        Paragraph(f"Total Repayment: {format_currency(result.total_repayment, 'Rs. ')}", styles["Normal"]),
        Spacer(1, 0.2 * inch),
    ]

    rows = [["Month", "EMI", "Principal", "Interest", "Balance"]]
    for item in result.schedule:
        rows.append(
            [
                str(item.month),
                format_currency(item.emi, ""),
                format_currency(item.principal, ""),
                format_currency(item.interest, ""),
                format_currency(item.balance, ""),
            ]
        )
    table = Table(rows, repeatRows=1, colWidths=[0.7 * inch] + [1.4 * inch] * 4)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#D3D3D3")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
            ]
        )
    )
    story.append(table)
    doc.build(story)


def export_to_pdf(path: Path, result: LoanCalculationResult, principal: Any) -> None:
    """Export summary and schedule to a PDF file."""
    render_pdf(path, result, principal)
