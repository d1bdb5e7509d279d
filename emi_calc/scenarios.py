"""What-if calculations built on the amortization engine.

Top-up loans, lump-sum prepayments and the EMI/rate/tenure trade-off all
reduce to fresh calls of the engine primitives on modified parameters; none
of them keeps state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Dict, Optional, Tuple

from .config import DEFAULT_PENALTY_RATE
from .data_models import (
    CHARGES_ADDED,
    CHARGES_UPFRONT,
    PREPAYMENT_TYPES,
    REDUCE_EMI,
    REDUCE_TENURE,
    LoanCalculationResult,
    LoanParameters,
    LoanStatus,
    LoanTerms,
    PrepaymentImpact,
    PrepaymentScenario,
    TopUpResult,
)
from .engine import (
    build_schedule,
    compute_emi,
    compute_loan,
    solve_for_emi,
    solve_for_rate,
    solve_for_tenure,
)
from .errors import InvalidInput
from .utils import Number, to_decimal, to_months

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

EMI = "emi"
RATE = "rate"
TENURE = "tenure"
TERM_VARIABLES = (EMI, RATE, TENURE)


def merge_top_up_loan(
    params: LoanParameters,
    top_up_amount: Optional[Number] = None,
    top_up_rate: Optional[Number] = None,
    top_up_tenure: Optional[Number] = None,
) -> LoanCalculationResult:
    """Fold a top-up into the original loan at an amount-weighted rate.

    Arguments left as ``None`` are taken from the ``top_up_*`` fields of
    ``params``. Charges of type ``"added"`` are financed with the top-up.
    The merged loan runs for the longer of the two tenures.
    """
    if top_up_amount is None:
        top_up_amount = params.top_up_amount
    if top_up_rate is None:
        top_up_rate = params.top_up_rate
    if top_up_tenure is None:
        top_up_tenure = params.top_up_tenure
    principal = to_decimal(params.principal, "principal")
    rate = to_decimal(params.rate, "rate")
    amount = to_decimal(top_up_amount, "top-up amount")
    if (params.top_up_charges_type or "").lower() == CHARGES_ADDED:
        amount += to_decimal(params.top_up_charges, "top-up charges")
    amount_rate = to_decimal(top_up_rate, "top-up rate")
    total = principal + amount
    if total > 0:
        blended_rate = (principal * rate + amount * amount_rate) / total
    else:
        blended_rate = rate
    merged = replace(
        params,
        principal=total,
        rate=blended_rate,
        tenure=max(to_months(params.tenure), to_months(top_up_tenure, "top-up tenure")),
    )
    logger.debug("Merged top-up: principal=%s blended rate=%s", total, blended_rate)
    return compute_loan(merged)


def loan_status(principal: Number, rate: Number, tenure: Number, emis_paid: Number) -> LoanStatus:
    """Return what has been paid and what remains after ``emis_paid`` EMIs.

    A count of zero, or one beyond the end of the schedule, describes the
    loan as not yet started.
    """
    principal = to_decimal(principal, "principal")
    tenure = to_months(tenure)
    emis_paid = to_months(emis_paid, "EMIs paid")
    schedule = build_schedule(principal, rate, tenure)
    total_interest = sum((item.interest for item in schedule), ZERO)

    if emis_paid <= 0 or emis_paid > len(schedule):
        return LoanStatus(
            principal_paid=ZERO,
            principal_remaining=principal,
            interest_paid=ZERO,
            interest_remaining=total_interest,
            tenure_covered=0,
            tenure_remaining=tenure,
        )

    paid = schedule[:emis_paid]
    principal_paid = sum((item.principal for item in paid), ZERO)
    interest_paid = sum((item.interest for item in paid), ZERO)
    return LoanStatus(
        principal_paid=principal_paid,
        principal_remaining=principal - principal_paid,
        interest_paid=interest_paid,
        interest_remaining=total_interest - interest_paid,
        tenure_covered=emis_paid,
        tenure_remaining=tenure - emis_paid,
    )


def top_up_analysis(
    principal: Number,
    rate: Number,
    tenure: Number,
    emis_paid: Number,
    top_up_amount: Number,
    new_rate: Optional[Number] = None,
    new_tenure: Optional[Number] = None,
    top_up_charges: Number = 0,
    charges_type: str = CHARGES_UPFRONT,
) -> TopUpResult:
    """Compare a merged top-up loan with a separate top-up loan.

    The merged loan is the outstanding principal plus the top-up (plus the
    charges when ``charges_type`` is ``"added"``) at ``new_rate`` over
    ``new_tenure``. The separate option keeps the original loan running and
    repays the top-up alone at the same new terms. Upfront charges are
    deducted from the top-up cash received instead.

    ``new_rate`` defaults to the original rate and ``new_tenure`` to the
    tenure still remaining on the original loan.
    """
    charges_type = (charges_type or CHARGES_UPFRONT).lower()
    if charges_type not in (CHARGES_UPFRONT, CHARGES_ADDED):
        raise InvalidInput(f"Charges type must be 'upfront' or 'added'; got {charges_type!r}")

    status = loan_status(principal, rate, tenure, emis_paid)
    amount = to_decimal(top_up_amount, "top-up amount")
    charges = to_decimal(top_up_charges, "top-up charges")
    rate = to_decimal(rate, "rate")
    new_rate = rate if new_rate is None else to_decimal(new_rate, "new rate")
    new_tenure = status.tenure_remaining if new_tenure is None else to_months(new_tenure, "new tenure")

    added_charges = charges if charges_type == CHARGES_ADDED else ZERO
    upfront_charges = charges if charges_type == CHARGES_UPFRONT else ZERO
    total = status.principal_remaining + amount + added_charges

    merged_schedule = build_schedule(total, new_rate, new_tenure)
    new_total_interest = sum((item.interest for item in merged_schedule), ZERO)

    if status.tenure_remaining > 0:
        original_remaining_emi = compute_emi(status.principal_remaining, rate, status.tenure_remaining)
    else:
        original_remaining_emi = ZERO
    if amount > 0:
        top_up_only_emi = compute_emi(amount, new_rate, new_tenure)
        top_up_only_interest = sum(
            (item.interest for item in build_schedule(amount, new_rate, new_tenure)), ZERO
        )
    else:
        top_up_only_emi = ZERO
        top_up_only_interest = ZERO

    return TopUpResult(
        status=status,
        total_loan_amount=total,
        new_emi=compute_emi(total, new_rate, new_tenure),
        new_tenure=new_tenure,
        new_total_interest=new_total_interest,
        new_total_repayment=total + new_total_interest,
        original_remaining_emi=original_remaining_emi,
        top_up_only_emi=top_up_only_emi,
        top_up_only_interest=top_up_only_interest,
        separate_emi=original_remaining_emi + top_up_only_emi,
        separate_total_cost=(
            status.principal_remaining + status.interest_remaining + amount + top_up_only_interest
        ),
        upfront_charges=upfront_charges,
        net_top_up=amount - upfront_charges,
    )


def prepayment_impact(
    principal: Number,
    rate: Number,
    tenure: Number,
    amount: Number,
    reduction_type: str = REDUCE_TENURE,
    month: Number = 1,
    charges: Number = 0,
) -> PrepaymentImpact:
    """Compare the loan with and without a lump-sum prepayment.

    Repayment totals include the lump sum, so they measure total cash paid.
    ``new_emi`` is the installment in force after the prepayment month.
    """
    if reduction_type not in PREPAYMENT_TYPES:
        raise InvalidInput(
            f"Reduction type must be one of {', '.join(PREPAYMENT_TYPES)}; got {reduction_type!r}"
        )
    principal = to_decimal(principal, "principal")
    tenure = to_months(tenure)
    month = to_months(month, "prepayment month")
    amount = to_decimal(amount, "prepayment amount")
    charges = to_decimal(charges, "prepayment charges")

    baseline = build_schedule(principal, rate, tenure)
    original_interest = sum((item.interest for item in baseline), ZERO)
    original_emi = compute_emi(principal, rate, tenure)

    event = PrepaymentScenario(month=month, amount=amount, type=reduction_type)
    prepaid = build_schedule(principal, rate, tenure, [event])
    new_interest = sum((item.interest for item in prepaid), ZERO)

    new_emi = original_emi
    if reduction_type == REDUCE_EMI and 0 < month < tenure and len(prepaid) >= month:
        balance = prepaid[month - 1].balance
        new_emi = compute_emi(balance, rate, tenure - month)
    interest_saved = original_interest - new_interest

    return PrepaymentImpact(
        original_total_interest=original_interest,
        original_total_repayment=principal + original_interest,
        original_tenure=len(baseline),
        new_total_interest=new_interest,
        new_total_repayment=principal + new_interest,
        new_emi=new_emi,
        new_tenure=len(prepaid),
        interest_saved=interest_saved,
        tenure_reduction=len(baseline) - len(prepaid),
        total_savings=interest_saved - charges,
    )


def _recompute_emi(principal: Decimal, terms: LoanTerms) -> LoanTerms:
    return replace(terms, emi=solve_for_emi(principal, terms.rate, terms.tenure))


def _recompute_tenure(principal: Decimal, terms: LoanTerms) -> LoanTerms:
    return replace(terms, tenure=solve_for_tenure(principal, terms.rate, terms.emi))


def _recompute_rate(principal: Decimal, terms: LoanTerms) -> LoanTerms:
    return replace(terms, rate=solve_for_rate(principal, terms.tenure, terms.emi))


# (changed, held) -> recompute the third variable
_ADJUSTMENTS: Dict[Tuple[str, str], Callable[[Decimal, LoanTerms], LoanTerms]] = {
    (EMI, RATE): _recompute_tenure,
    (EMI, TENURE): _recompute_rate,
    (RATE, EMI): _recompute_tenure,
    (RATE, TENURE): _recompute_emi,
    (TENURE, EMI): _recompute_rate,
    (TENURE, RATE): _recompute_emi,
}


def adjust_terms(
    principal: Number,
    rate: Number,
    tenure: Number,
    changed: str,
    value: Number,
    hold: str,
    emi: Optional[Number] = None,
) -> LoanTerms:
    """Change one of EMI, rate or tenure while holding a second fixed.

    The third variable is solved with the matching engine primitive. ``emi``
    defaults to the installment implied by ``rate`` and ``tenure``.

    Raises
    ------
    InvalidInput
        If ``changed`` or ``hold`` is not a term variable, or both name the
        same variable.
    """
    changed = (changed or "").lower()
    hold = (hold or "").lower()
    adjustment = _ADJUSTMENTS.get((changed, hold))
    if adjustment is None:
        raise InvalidInput(
            f"Choose two different variables among {', '.join(TERM_VARIABLES)}; "
            f"got changed={changed!r}, hold={hold!r}"
        )

    principal = to_decimal(principal, "principal")
    terms = LoanTerms(
        emi=compute_emi(principal, rate, tenure) if emi is None else to_decimal(emi, "emi"),
        rate=to_decimal(rate, "rate"),
        tenure=to_months(tenure),
    )
    if changed == EMI:
        terms = replace(terms, emi=to_decimal(value, "emi"))
    elif changed == RATE:
        terms = replace(terms, rate=to_decimal(value, "rate"))
    else:
        terms = replace(terms, tenure=to_months(value))
    return adjustment(principal, terms)


def pre_closure_charges(balance: Number, penalty_rate: Number = DEFAULT_PENALTY_RATE) -> Decimal:
    """Foreclosure penalty as a percentage of the outstanding balance."""
    return to_decimal(balance, "balance") * to_decimal(penalty_rate, "penalty rate") / 100


def late_fees(emi: Number, days_late: Number, penalty_rate: Number = DEFAULT_PENALTY_RATE) -> Decimal:
    """Monthly late penalty on the EMI, pro-rated over a 30-day month."""
    monthly_penalty = to_decimal(emi, "emi") * to_decimal(penalty_rate, "penalty rate") / 100
    return monthly_penalty * to_decimal(days_late, "days late") / 30
