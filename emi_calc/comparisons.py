"""SIP and inflation comparisons for an EMI stream.

These use plain compound-interest formulas on the EMI and tenure; they do
not look inside the amortization schedule.
"""

from __future__ import annotations

from decimal import ROUND_CEILING, Decimal

from .config import DEFAULT_INFLATION_RATE, DEFAULT_SIP_RATE
from .data_models import InflationImpact, SIPLoanComparison, SIPResult
from .utils import Number, quantize_currency, to_decimal, to_months

ZERO = Decimal("0")


def _years_covering(months: int) -> int:
    return int((Decimal(months) / 12).to_integral_value(rounding=ROUND_CEILING))


def sip_future_value(monthly_amount: Number, annual_rate: Number, months: Number) -> SIPResult:
    """Future value of investing ``monthly_amount`` every month.

    Uses ``A * ((1 + m)^n - 1) / m`` with ``m`` the monthly rate; at a zero
    rate the investment simply accumulates.
    """
    amount = to_decimal(monthly_amount, "monthly amount")
    rate = to_decimal(annual_rate, "SIP rate")
    months = max(to_months(months, "months"), 0)
    total_investment = amount * months
    if rate <= 0:
        final_value = total_investment
    else:
        monthly_rate = rate / Decimal(1200)
        final_value = amount * ((1 + monthly_rate) ** months - 1) / monthly_rate
    return SIPResult(
        final_value=quantize_currency(final_value),
        total_investment=quantize_currency(total_investment),
        returns=quantize_currency(final_value - total_investment),
    )


def inflation_adjusted_value(
    amount: Number, years: Number, inflation_rate: Number = DEFAULT_INFLATION_RATE
) -> Decimal:
    """Grow ``amount`` at ``inflation_rate`` percent a year for ``years``."""
    growth = 1 + to_decimal(inflation_rate, "inflation rate") / 100
    return to_decimal(amount, "amount") * growth ** to_decimal(years, "years")


def progressive_inflation_adjusted_repayment(
    emi: Number, months: Number, inflation_rate: Number = DEFAULT_INFLATION_RATE
) -> Decimal:
    """Total of the EMIs, each grown by inflation up to the month it is paid."""
    emi = to_decimal(emi, "emi")
    growth = 1 + to_decimal(inflation_rate, "inflation rate") / Decimal(1200)
    total = ZERO
    for month in range(max(to_months(months, "months"), 0)):
        total += emi * growth ** month
    return total


def inflation_impact(
    principal: Number,
    emi: Number,
    months: Number,
    inflation_rate: Number = DEFAULT_INFLATION_RATE,
) -> InflationImpact:
    """Real cost of a loan: inflated repayments against the inflated principal."""
    months = max(to_months(months, "months"), 0)
    emi = to_decimal(emi, "emi")
    adjusted_principal = inflation_adjusted_value(principal, _years_covering(months), inflation_rate)
    adjusted_repayment = progressive_inflation_adjusted_repayment(emi, months, inflation_rate)
    return InflationImpact(
        inflation_adjusted_principal=adjusted_principal,
        total_repayment=emi * months,
        inflation_adjusted_repayment=adjusted_repayment,
        real_cost=adjusted_repayment - adjusted_principal,
    )


def compare_sip_with_loan(
    emi: Number,
    months: Number,
    sip_rate: Number = DEFAULT_SIP_RATE,
    inflation_rate: Number = DEFAULT_INFLATION_RATE,
) -> SIPLoanComparison:
    """What the EMI would grow to if invested instead of repaid."""
    emi = to_decimal(emi, "emi")
    months = max(to_months(months, "months"), 0)
    years = _years_covering(months)
    total_repayment = emi * months
    sip = sip_future_value(emi, sip_rate, months)
    loan_adjusted = inflation_adjusted_value(total_repayment, years, inflation_rate)
    sip_adjusted = inflation_adjusted_value(sip.final_value, years, inflation_rate)
    return SIPLoanComparison(
        total_repayment=total_repayment,
        sip=sip,
        years=years,
        loan_inflation_adjusted=loan_adjusted,
        sip_inflation_adjusted=sip_adjusted,
        advantage=sip.final_value - total_repayment,
        inflation_adjusted_advantage=sip_adjusted - loan_adjusted,
    )
