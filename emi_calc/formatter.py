"""Output helpers for the EMI calculator.

This module renders results in a tabular text format using built-in
printing and string formatting. Amounts are shown with Indian digit
grouping via ``utils.format_currency``.
"""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .data_models import EMIScheduleItem, LoanCalculationResult
from .utils import format_currency


def print_summary(result: LoanCalculationResult) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Monthly EMI        : {format_currency(result.emi)}")
    print(f"Total interest     : {format_currency(result.total_interest)}")
    print(f"Total repayment    : {format_currency(result.total_repayment)}")
    if result.total_prepayment:
        print(f"Total prepayment   : {format_currency(result.total_prepayment)}")
    print(f"Disbursed amount   : {format_currency(result.disbursed_amount)}")
    if result.disbursed_amount < 0:
        print("  (charges exceed the loan amount; check the inputs)")
    print(f"Effective interest : {result.effective_interest_rate:.2f}%")
    print(f"Tax benefit        : {format_currency(result.tax_benefit)}")
    print(f"Payments           : {len(result.schedule)}")
    print("-" * 72)


def print_schedule(schedule: Iterable[EMIScheduleItem], show_cumulative: bool = False) -> None:
    """Print the amortization schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[EMIScheduleItem]
        The schedule rows to print.
    show_cumulative: bool
        Whether to add the cumulative interest and principal columns.
    """
    headers = ["Month", "EMI", "Principal", "Interest", "Prepay", "Balance"]
    if show_cumulative:
        headers += ["CumInterest", "CumPrincipal"]
    print("\t".join(headers))
    for item in schedule:
        row = [
            str(item.month),
            f"{item.emi:.2f}",
            f"{item.principal:.2f}",
            f"{item.interest:.2f}",
            f"{item.prepayment:.2f}",
            f"{item.balance:.2f}",
        ]
        if show_cumulative:
            row += [f"{item.cumulative_interest:.2f}", f"{item.cumulative_principal:.2f}"]
        print("\t".join(row))


def print_metrics(title: str, rows: Sequence[Tuple[str, str]]) -> None:
    """Print labelled values under a title, one per line."""
    print(title)
    print("-" * 72)
    width = max((len(label) for label, _ in rows), default=0)
    for label, value in rows:
        print(f"{label:<{width}} : {value}")
    print("-" * 72)


def print_comparison(r1: LoanCalculationResult, r2: LoanCalculationResult) -> None:
    """Print a comparison of two loan results side by side.

    The difference column is scenario2 - scenario1; a negative difference
    means the second scenario is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    metrics = [
        ("emi", r1.emi, r2.emi),
        ("total_interest", r1.total_interest, r2.total_interest),
        ("total_repayment", r1.total_repayment, r2.total_repayment),
        ("payments", len(r1.schedule), len(r2.schedule)),
    ]
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key, v1, v2 in metrics:
        diff = v2 - v1
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)
