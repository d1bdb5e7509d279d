"""Command-line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute EMIs and full amortization schedules, solve for
tenure or rate, explore prepayments and top-ups, compare two loans or weigh
an EMI against a SIP. Schedules can be exported to JSON, CSV or PDF files.
"""

from __future__ import annotations

import logging
import shlex
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from .benefits import loan_category_benefits
from .comparisons import compare_sip_with_loan, inflation_impact
from .config import (
    DEFAULT_INFLATION_RATE,
    DEFAULT_SIP_RATE,
    SCHEDULE_PREVIEW_ROWS,
    configure_logging,
)
from .data_models import (
    CHARGES_ADDED,
    CHARGES_UPFRONT,
    PREPAYMENT_TYPES,
    REDUCE_TENURE,
    LoanParameters,
    PrepaymentScenario,
)
from .engine import compute_emi, compute_loan, rate_from_emi, tenure_from_emi
from .errors import InvalidInput
from .export import export_to_csv, export_to_json, export_to_pdf
from .formatter import print_comparison, print_metrics, print_schedule, print_summary
from .scenarios import TERM_VARIABLES, adjust_terms, prepayment_impact, top_up_analysis
from .utils import format_currency, parse_amount, to_decimal

logger = logging.getLogger(__name__)


def parse_money(value: Optional[str], name: str = "amount") -> Decimal:
    """Parse an amount option, accepting ``k``/``m``/``L``/``cr`` shorthand."""
    if value is None or not str(value).strip():
        return Decimal("0")
    try:
        return parse_amount(str(value))
    except InvalidInput as exc:
        raise click.BadParameter(f"Invalid {name}: {value}") from exc


def parse_number(value: Any, name: str) -> Decimal:
    try:
        return to_decimal(value, name)
    except InvalidInput as exc:
        raise click.BadParameter(str(exc)) from exc


def parse_prepayment_strings(values: Tuple[str, ...]) -> List[PrepaymentScenario]:
    """Parse ``MONTH:AMOUNT[:TYPE]`` prepayment options."""
    prepayments: List[PrepaymentScenario] = []
    for item in values:
        if not isinstance(item, str):
            raise click.BadParameter(
                f"Prepayment must be a MONTH:AMOUNT:TYPE string; got {item!r}"
            )
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(
                f"Prepayment must be in MONTH:AMOUNT:TYPE format; got {item}"
            )
        month_str, amount_str = parts[0], parts[1]
        typ = parts[2].lower() if len(parts) == 3 else REDUCE_TENURE
        try:
            month = int(month_str)
        except ValueError:
            raise click.BadParameter(f"Invalid prepayment month: {month_str}")
        if typ not in PREPAYMENT_TYPES:
            raise click.BadParameter(
                f"Prepayment type must be 'reduce-tenure' or 'reduce-emi'; got {typ}"
            )
        prepayments.append(
            PrepaymentScenario(month=month, amount=parse_money(amount_str), type=typ)
        )
    return prepayments


def build_params_from_options(
    principal: str,
    rate: str,
    tenure: int,
    loan_type: str = "",
    category: str = "",
    interest_type: str = "fixed",
    processing_charges: Optional[str] = None,
    file_charges: Optional[str] = None,
    insurance_charges: Optional[str] = None,
    commission_charges: Optional[str] = None,
    prepayment: Tuple[str, ...] = (),
) -> LoanParameters:
    return LoanParameters(
        principal=parse_money(principal, "principal"),
        rate=parse_number(rate, "rate"),
        tenure=tenure,
        interest_type=interest_type,
        loan_category=category,
        loan_type=loan_type.lower(),
        processing_charges=parse_money(processing_charges, "processing charges"),
        file_charges=parse_money(file_charges, "file charges"),
        insurance_charges=parse_money(insurance_charges, "insurance charges"),
        commission_charges=parse_money(commission_charges, "commission charges"),
        prepayments=tuple(parse_prepayment_strings(prepayment)),
    )


def loan_options(func: Callable) -> Callable:
    """Attach the options describing a loan to a command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (e.g. 2500000 or 25L)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure in months"),
        click.option("--loan-type", "loan_type", default="", help="Loan type, e.g. home, education, personal"),
        click.option("--category", "category", type=click.Choice(["", "secured", "unsecured"]), default="", help="Loan category"),
        click.option("--interest-type", "interest_type", type=click.Choice(["fixed", "floating"]), default="fixed", help="Interest type (informational)"),
        click.option("--processing-charges", "processing_charges", help="Processing charges"),
        click.option("--file-charges", "file_charges", help="File charges"),
        click.option("--insurance-charges", "insurance_charges", help="Insurance charges"),
        click.option("--commission-charges", "commission_charges", help="Commission charges"),
        click.option("--prepayment", "prepayment", multiple=True, help="Prepayment in MONTH:AMOUNT:TYPE format"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine decisions to stderr")
def cli(verbose: bool) -> None:
    """An EMI calculator for amortizing loans and their what-if scenarios."""
    configure_logging(logging.DEBUG if verbose else None)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure in months")
def emi(principal: str, rate: str, tenure: int) -> None:
    """Print the monthly installment for a loan."""
    value = compute_emi(parse_money(principal, "principal"), parse_number(rate, "rate"), tenure)
    click.echo(format_currency(value))


@cli.command()
@loan_options
@click.option("--cumulative", is_flag=True, help="Show cumulative interest and principal columns")
@click.option("--output", "output", type=str, help="Output file path (.json, .csv or .pdf)")
def schedule(output: Optional[str], cumulative: bool, **options: Any) -> None:
    """Compute and print the full amortization schedule."""
    params = build_params_from_options(**options)
    result = compute_loan(params)
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, result)
        elif suffix == ".csv":
            export_to_csv(path, result.schedule)
        elif suffix == ".pdf":
            export_to_pdf(path, result, params.principal)
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .pdf")
        logger.info("Exported %d schedule rows to %s", len(result.schedule), path)
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(result)
    rows = result.schedule
    if len(rows) > SCHEDULE_PREVIEW_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {SCHEDULE_PREVIEW_ROWS} rows.")
        rows = rows[:SCHEDULE_PREVIEW_ROWS]
    print_schedule(rows, show_cumulative=cumulative)


@cli.command()
@loan_options
def summary(**options: Any) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_params_from_options(**options)
    print_summary(compute_loan(params))
    if params.loan_category or params.loan_type:
        benefit = loan_category_benefits(params.loan_category, params.loan_type)
        print_metrics(
            "Typical terms",
            [
                ("Interest rates", benefit.interest_rate_range),
                ("Maximum amount", benefit.max_amount),
                ("Tenure", benefit.tenure),
                ("Tax benefits", benefit.tax_benefits),
            ],
        )


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)")
@click.option("--emi", "emi_value", required=True, help="Monthly installment")
def tenure(principal: str, rate: str, emi_value: str) -> None:
    """Print the tenure (months) an EMI needs to repay the loan."""
    months = tenure_from_emi(
        parse_money(principal, "principal"), parse_number(rate, "rate"), parse_money(emi_value, "EMI")
    )
    click.echo(str(months))


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--tenure", "-t", "tenure_months", required=True, type=int, help="Loan tenure in months")
@click.option("--emi", "emi_value", required=True, help="Monthly installment")
def rate(principal: str, tenure_months: int, emi_value: str) -> None:
    """Print the annual rate implied by an EMI and tenure."""
    value = rate_from_emi(parse_money(principal, "principal"), tenure_months, parse_money(emi_value, "EMI"))
    click.echo(f"{value:.4f}")


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure_months", required=True, type=int, help="Loan tenure in months")
@click.option("--amount", "amount", required=True, help="Lump-sum prepayment")
@click.option("--type", "reduction_type", type=click.Choice(list(PREPAYMENT_TYPES)), default=REDUCE_TENURE, help="What the prepayment reduces")
@click.option("--month", "month", type=int, default=1, show_default=True, help="Month of the prepayment")
@click.option("--charges", "charges", help="Prepayment charges")
def prepay(principal: str, rate: str, tenure_months: int, amount: str, reduction_type: str, month: int, charges: Optional[str]) -> None:
    """Show the savings from a lump-sum prepayment."""
    impact = prepayment_impact(
        parse_money(principal, "principal"),
        parse_number(rate, "rate"),
        tenure_months,
        parse_money(amount, "amount"),
        reduction_type,
        month,
        parse_money(charges, "charges"),
    )
    print_metrics(
        "Prepayment impact",
        [
            ("Original interest", format_currency(impact.original_total_interest)),
            ("New interest", format_currency(impact.new_total_interest)),
            ("Interest saved", format_currency(impact.interest_saved)),
            ("New EMI", format_currency(impact.new_emi)),
            ("New tenure", f"{impact.new_tenure} months"),
            ("Tenure reduction", f"{impact.tenure_reduction} months"),
            ("Net savings", format_currency(impact.total_savings)),
        ],
    )


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Original loan amount")
@click.option("--rate", "-r", "rate", required=True, help="Original annual rate (percent)")
@click.option("--tenure", "-t", "tenure_months", required=True, type=int, help="Original tenure in months")
@click.option("--emis-paid", "emis_paid", type=int, default=0, show_default=True, help="EMIs already paid")
@click.option("--amount", "amount", required=True, help="Top-up amount")
@click.option("--new-rate", "new_rate", help="Rate of the merged loan (defaults to the original rate)")
@click.option("--new-tenure", "new_tenure", type=int, help="Tenure of the merged loan (defaults to the remaining tenure)")
@click.option("--charges", "charges", help="Top-up charges")
@click.option("--charges-type", "charges_type", type=click.Choice([CHARGES_UPFRONT, CHARGES_ADDED]), default=CHARGES_UPFRONT, show_default=True)
def topup(
    principal: str,
    rate: str,
    tenure_months: int,
    emis_paid: int,
    amount: str,
    new_rate: Optional[str],
    new_tenure: Optional[int],
    charges: Optional[str],
    charges_type: str,
) -> None:
    """Compare a merged top-up loan with a separate top-up loan."""
    result = top_up_analysis(
        parse_money(principal, "principal"),
        parse_number(rate, "rate"),
        tenure_months,
        emis_paid,
        parse_money(amount, "amount"),
        parse_number(new_rate, "new rate") if new_rate else None,
        new_tenure,
        parse_money(charges, "charges"),
        charges_type,
    )
    print_metrics(
        "Top-up loan",
        [
            ("Principal remaining", format_currency(result.status.principal_remaining)),
            ("Merged loan amount", format_currency(result.total_loan_amount)),
            ("Merged EMI", format_currency(result.new_emi)),
            ("Merged tenure", f"{result.new_tenure} months"),
            ("Merged total repayment", format_currency(result.new_total_repayment)),
            ("Separate EMIs", format_currency(result.separate_emi)),
            ("Separate total cost", format_currency(result.separate_total_cost)),
            ("Saving from merging", format_currency(result.merge_saving)),
            ("Top-up cash received", format_currency(result.net_top_up)),
        ],
    )


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, help="Current annual rate (percent)")
@click.option("--tenure", "-t", "tenure_months", required=True, type=int, help="Current tenure in months")
@click.option("--emi", "emi_value", help="Current EMI (defaults to the EMI implied by rate and tenure)")
@click.option("--change", "changed", required=True, type=click.Choice(list(TERM_VARIABLES)), help="Variable being changed")
@click.option("--value", "value", required=True, help="New value of the changed variable")
@click.option("--hold", "hold", required=True, type=click.Choice(list(TERM_VARIABLES)), help="Variable held constant")
def adjust(principal: str, rate: str, tenure_months: int, emi_value: Optional[str], changed: str, value: str, hold: str) -> None:
    """Change EMI, rate or tenure and solve for the third."""
    if changed == hold:
        raise click.BadParameter("--change and --hold must name different variables")
    try:
        terms = adjust_terms(
            parse_money(principal, "principal"),
            parse_number(rate, "rate"),
            tenure_months,
            changed,
            parse_number(value, "value"),
            hold,
            emi=parse_money(emi_value, "EMI") if emi_value else None,
        )
    except InvalidInput as exc:
        raise click.BadParameter(str(exc), param_hint="--value") from exc
    print_metrics(
        "Adjusted terms",
        [
            ("EMI", format_currency(terms.emi)),
            ("Rate", f"{terms.rate:.4f}%"),
            ("Tenure", f"{terms.tenure} months"),
        ],
    )


@cli.command()
@click.option("--emi", "emi_value", required=True, help="Monthly installment to invest")
@click.option("--months", "months", required=True, type=int, help="Number of months")
@click.option("--sip-rate", "sip_rate", default=str(DEFAULT_SIP_RATE), show_default=True, help="Expected annual SIP return (percent)")
@click.option("--inflation", "inflation", default=str(DEFAULT_INFLATION_RATE), show_default=True, help="Annual inflation (percent)")
def sip(emi_value: str, months: int, sip_rate: str, inflation: str) -> None:
    """Compare investing the EMI in a SIP with repaying the loan."""
    result = compare_sip_with_loan(
        parse_money(emi_value, "EMI"), months, parse_number(sip_rate, "SIP rate"), parse_number(inflation, "inflation")
    )
    print_metrics(
        "SIP vs loan",
        [
            ("Total repayment", format_currency(result.total_repayment)),
            ("SIP value", format_currency(result.sip.final_value)),
            ("SIP returns", format_currency(result.sip.returns)),
            ("Advantage", format_currency(result.advantage)),
            ("Real advantage", format_currency(result.inflation_adjusted_advantage)),
        ],
    )


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--emi", "emi_value", required=True, help="Monthly installment")
@click.option("--months", "months", required=True, type=int, help="Number of months")
@click.option("--inflation", "inflation", default=str(DEFAULT_INFLATION_RATE), show_default=True, help="Annual inflation (percent)")
def inflation(principal: str, emi_value: str, months: int, inflation: str) -> None:
    """Show the real cost of a loan after inflation."""
    impact = inflation_impact(
        parse_money(principal, "principal"), parse_money(emi_value, "EMI"), months, parse_number(inflation, "inflation")
    )
    print_metrics(
        "Inflation impact",
        [
            ("Total repayment", format_currency(impact.total_repayment)),
            ("Inflation-adjusted repayment", format_currency(impact.inflation_adjusted_repayment)),
            ("Inflation-adjusted principal", format_currency(impact.inflation_adjusted_principal)),
            ("Real cost", format_currency(impact.real_cost)),
        ],
    )


# Scenario tokens accepted by ``compare``: flag -> (parameter, repeatable)
_SCENARIO_FLAGS: Dict[str, Tuple[str, bool]] = {
    "-p": ("principal", False),
    "--principal": ("principal", False),
    "-r": ("rate", False),
    "--rate": ("rate", False),
    "-t": ("tenure", False),
    "--tenure": ("tenure", False),
    "--loan-type": ("loan_type", False),
    "--processing-charges": ("processing_charges", False),
    "--file-charges": ("file_charges", False),
    "--insurance-charges": ("insurance_charges", False),
    "--commission-charges": ("commission_charges", False),
    "--prepayment": ("prepayment", True),
}


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Convert a quoted scenario option string into builder arguments."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {"principal": None, "rate": None, "tenure": None, "prepayment": []}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token not in _SCENARIO_FLAGS:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} needs a value")
        name, repeatable = _SCENARIO_FLAGS[token]
        if repeatable:
            params[name].append(tokens[i + 1])
        else:
            params[name] = tokens[i + 1]
        i += 2
    for required in ("principal", "rate", "tenure"):
        if params[required] is None:
            raise click.BadParameter(f"Scenario missing required option {required}")
    try:
        params["tenure"] = int(params["tenure"])
    except ValueError:
        raise click.BadParameter(f"Invalid tenure: {params['tenure']}")
    params["prepayment"] = tuple(params["prepayment"])
    return params


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        emi-calc compare --scenario1 "-p 25L -r 8.5 -t 240" --scenario2 "-p 25L -r 8.0 -t 180"
    """
    result1 = compute_loan(build_params_from_options(**parse_scenario_opts(scenario1)))
    result2 = compute_loan(build_params_from_options(**parse_scenario_opts(scenario2)))
    print_comparison(result1, result2)


if __name__ == "__main__":
    cli()
