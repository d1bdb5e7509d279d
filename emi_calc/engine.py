"""Core calculation engine for the EMI calculator.

This module implements the amortization arithmetic: the EMI of an annuity
loan, a month-by-month schedule that honours prepayment events, and the two
inversions of the EMI formula (tenure in closed form, rate by bisection).
Every function is a pure mapping from its arguments to a fresh value.

Inputs are coerced to ``Decimal``. Zero and negative amounts give degenerate
results rather than errors, since they are what a half-typed form produces;
malformed values (``None``, NaN, text) raise ``InvalidInput``.
"""

from __future__ import annotations

import logging
from decimal import ROUND_CEILING, Decimal
from typing import Dict, Iterable, List

from .benefits import capped_deduction_value, is_eligible_for_tax_benefits
from .config import (
    MAX_TENURE_MONTHS,
    RATE_SEARCH_HIGH,
    RATE_SEARCH_ITERATIONS,
    RATE_SEARCH_LOW,
)
from .data_models import (
    PREPAYMENT_TYPES,
    REDUCE_EMI,
    EMIScheduleItem,
    LoanCalculationResult,
    LoanParameters,
    PrepaymentScenario,
)
from .errors import InvalidInput
from .utils import Number, quantize_currency, to_decimal, to_months

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# A cent-rounded EMI stands for any exact payment within half a cent of it.
HALF_CENT = Decimal("0.005")


def _monthly_rate(rate: Decimal) -> Decimal:
    """Convert an annual percentage into a monthly decimal rate.

    Negative rates are treated as interest free.
    """
    if rate <= 0:
        return ZERO
    return rate / Decimal(1200)


def _annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the unrounded annuity (equal installment) payment.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def compute_emi(principal: Number, rate: Number, tenure: Number) -> Decimal:
    """Return the monthly installment rounded half-up to cents.

    A non-positive principal has no installment (``0.00``). A non-positive
    tenure is a one-shot loan: the whole principal is due in month 1.
    """
    principal = to_decimal(principal, "principal")
    rate = to_decimal(rate, "rate")
    tenure = to_months(tenure)
    if principal <= 0:
        logger.debug("Principal %s is not positive; EMI is zero", principal)
        return quantize_currency(ZERO)
    if tenure <= 0:
        logger.debug("Tenure %s is not positive; principal due at once", tenure)
        return quantize_currency(principal)
    return quantize_currency(_annuity_payment(principal, _monthly_rate(rate), tenure))


def _prepare_prepayments(
    prepayments: Iterable[PrepaymentScenario],
) -> Dict[int, List[PrepaymentScenario]]:
    """Group prepayments by month for quick lookup.

    Events with a non-positive amount are dropped.
    """
    mapping: Dict[int, List[PrepaymentScenario]] = {}
    for event in prepayments:
        if event.type not in PREPAYMENT_TYPES:
            raise InvalidInput(
                f"Prepayment type must be one of {', '.join(PREPAYMENT_TYPES)}; got {event.type!r}"
            )
        month = to_months(event.month, "prepayment month")
        amount = to_decimal(event.amount, "prepayment amount")
        if amount <= 0:
            logger.debug("Ignoring non-positive prepayment in month %s", month)
            continue
        mapping.setdefault(month, []).append(
            PrepaymentScenario(month=month, amount=amount, type=event.type)
        )
    return mapping


def build_schedule(
    principal: Number,
    rate: Number,
    tenure: Number,
    prepayments: Iterable[PrepaymentScenario] = (),
) -> List[EMIScheduleItem]:
    """Simulate the loan month by month.

    Parameters
    ----------
    principal, rate, tenure:
        Loan amount, annual rate in percent and nominal tenure in months.
    prepayments:
        Extra payments keyed by month. Several events in one month are
        summed; if any of them is ``"reduce-emi"`` the EMI is recomputed so
        that the balance left after this month is repaid over the months
        still remaining.

    Returns
    -------
    List[EMIScheduleItem]
        One row per month from month 1. The list ends at the nominal tenure
        or as soon as the balance is retired, and the last row always
        leaves a balance of exactly zero: its EMI is ``interest + balance``.
    """
    principal = to_decimal(principal, "principal")
    rate = to_decimal(rate, "rate")
    tenure = to_months(tenure)
    events = _prepare_prepayments(prepayments)

    if principal <= 0:
        logger.debug("Principal %s is not positive; empty schedule", principal)
        return []
    if tenure <= 0:
        logger.debug("Tenure %s is not positive; single lump-sum row", tenure)
        return [
            EMIScheduleItem(
                month=1,
                emi=principal,
                principal=principal,
                interest=ZERO,
                balance=ZERO,
                cumulative_interest=ZERO,
                cumulative_principal=principal,
            )
        ]

    rate_per_month = _monthly_rate(rate)
    emi = compute_emi(principal, rate, tenure)
    balance = principal
    cumulative_interest = ZERO
    cumulative_principal = ZERO
    schedule: List[EMIScheduleItem] = []

    for month in range(1, tenure + 1):
        if balance <= 0:
            break
        interest = balance * rate_per_month
        installment = emi
        principal_payment = installment - interest
        prepayment = ZERO
        month_events = events.get(month, [])

        if principal_payment >= balance or month == tenure:
            # Final installment: pay off exactly what is left.
            principal_payment = balance
            installment = interest + balance
        elif month_events:
            requested = sum((event.amount for event in month_events), ZERO)
            remaining = balance - principal_payment
            if requested >= remaining:
                prepayment = remaining
                principal_payment = balance
            else:
                prepayment = requested
                principal_payment += prepayment

        balance -= principal_payment
        cumulative_interest += interest
        cumulative_principal += principal_payment

        if prepayment > 0 and balance > 0 and any(e.type == REDUCE_EMI for e in month_events):
            emi = compute_emi(balance, rate, tenure - month)
            logger.debug("EMI reset to %s after prepayment in month %s", emi, month)

        schedule.append(
            EMIScheduleItem(
                month=month,
                emi=installment,
                principal=principal_payment,
                interest=interest,
                balance=balance,
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
                prepayment=prepayment,
            )
        )

    logger.debug(
        "Built schedule of %d rows for principal=%s rate=%s tenure=%s",
        len(schedule),
        principal,
        rate,
        tenure,
    )
    return schedule


def tenure_from_emi(principal: Number, rate: Number, emi: Number) -> int:
    """Return the number of months an EMI needs to retire the principal.

    The result is clamped to ``[1, MAX_TENURE_MONTHS]``. An EMI that does
    not exceed one month's interest never amortizes the loan and saturates
    at ``MAX_TENURE_MONTHS``.

    An EMI given in whole cents is read as any exact payment that rounds to
    it, so ``tenure_from_emi(P, r, compute_emi(P, r, n)) == n``. At that
    boundary the answer can be one month shorter than plain division
    suggests: ``tenure_from_emi(1000.01, 0, 100)`` is 10, because 10 is the
    tenure whose EMI is quoted as 100.00. EMIs with sub-cent digits are
    taken as exact.
    """
    principal = to_decimal(principal, "principal")
    rate = to_decimal(rate, "rate")
    emi = to_decimal(emi, "emi")
    if emi <= 0:
        logger.debug("EMI %s is not positive; tenure saturates", emi)
        return MAX_TENURE_MONTHS
    if principal <= 0:
        return 1

    rate_per_month = _monthly_rate(rate)
    payment = emi + HALF_CENT if emi == quantize_currency(emi) else emi
    if rate_per_month == 0:
        months = (principal / payment).to_integral_value(rounding=ROUND_CEILING)
    else:
        interest_only = principal * rate_per_month
        if emi <= interest_only:
            logger.debug("EMI %s does not cover interest %s; tenure saturates", emi, interest_only)
            return MAX_TENURE_MONTHS
        growth = 1 + interest_only / (payment - interest_only)
        months = (growth.ln() / (1 + rate_per_month).ln()).to_integral_value(
            rounding=ROUND_CEILING
        )
    return max(1, min(MAX_TENURE_MONTHS, int(months)))


def rate_from_emi(principal: Number, tenure: Number, emi: Number) -> Decimal:
    """Return the annual rate (percent) at which ``emi`` repays the loan.

    There is no closed form, so the rate is found by bisection between
    ``RATE_SEARCH_LOW`` and ``RATE_SEARCH_HIGH``. The search always runs
    ``RATE_SEARCH_ITERATIONS`` steps: the low bound moves up when the EMI at
    the midpoint undershoots the target, the high bound moves down
    otherwise. After 100 halvings the bracket is narrower than
    ``29.9 / 2**100``.
    """
    principal = to_decimal(principal, "principal")
    tenure = to_months(tenure)
    emi = to_decimal(emi, "emi")

    low, high = RATE_SEARCH_LOW, RATE_SEARCH_HIGH
    mid = low
    for _ in range(RATE_SEARCH_ITERATIONS):
        mid = (low + high) / 2
        if compute_emi(principal, mid, tenure) < emi:
            low = mid
        else:
            high = mid
    return max(RATE_SEARCH_LOW, min(RATE_SEARCH_HIGH, mid))


# The three primitives behind the "which variable do you hold" flows.
solve_for_emi = compute_emi
solve_for_tenure = tenure_from_emi
solve_for_rate = rate_from_emi


def tax_benefit(
    cumulative_principal: Number, cumulative_interest: Number, loan_type: str
) -> Decimal:
    """Return the tax saved on a loan's repayments.

    Loans outside the tax allow-list get nothing.
    """
    if not is_eligible_for_tax_benefits(loan_type):
        return quantize_currency(ZERO)
    principal_repaid = to_decimal(cumulative_principal, "cumulative principal")
    interest_paid = to_decimal(cumulative_interest, "cumulative interest")
    return quantize_currency(capped_deduction_value(principal_repaid, interest_paid))


def disbursed_amount(
    principal: Number,
    processing: Number = 0,
    file: Number = 0,
    insurance: Number = 0,
    commission: Number = 0,
) -> Decimal:
    """Return the principal less all upfront charges.

    The result is not floored at zero; a negative disbursement means the
    charges were entered wrongly and is left for the caller to report.
    """
    charges = (
        to_decimal(processing, "processing charges")
        + to_decimal(file, "file charges")
        + to_decimal(insurance, "insurance charges")
        + to_decimal(commission, "commission charges")
    )
    return to_decimal(principal, "principal") - charges


def compute_loan(params: LoanParameters) -> LoanCalculationResult:
    """Compute EMI, schedule, totals and tax benefit for a loan."""
    principal = to_decimal(params.principal, "principal")
    disbursed = disbursed_amount(
        principal,
        params.processing_charges,
        params.file_charges,
        params.insurance_charges,
        params.commission_charges,
    )
    if disbursed < 0:
        logger.warning("Charges exceed the principal; disbursed amount is %s", disbursed)

    emi = compute_emi(principal, params.rate, params.tenure)
    schedule = build_schedule(principal, params.rate, params.tenure, params.prepayments)

    total_repayment = sum((item.emi for item in schedule), ZERO)
    total_interest = sum((item.interest for item in schedule), ZERO)
    total_principal = sum((item.principal for item in schedule), ZERO)
    total_prepayment = sum((item.prepayment for item in schedule), ZERO)
    benefit = tax_benefit(total_principal, total_interest, params.loan_type)
    effective_rate = total_interest / principal * 100 if principal > 0 else ZERO

    return LoanCalculationResult(
        emi=emi,
        total_repayment=total_repayment,
        total_interest=total_interest,
        disbursed_amount=disbursed,
        schedule=tuple(schedule),
        tax_benefit=benefit,
        effective_interest_rate=effective_rate,
        total_principal=total_principal,
        total_prepayment=total_prepayment,
    )
