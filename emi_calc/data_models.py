"""Data models for the EMI calculator.

This module defines the value objects exchanged between the engine and its
callers: the loan parameters, prepayment events, schedule rows and the
aggregate results of the what-if calculators. Every model is a frozen
dataclass; results are recomputed from scratch instead of being mutated.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple

REDUCE_TENURE = "reduce-tenure"
REDUCE_EMI = "reduce-emi"
PREPAYMENT_TYPES = (REDUCE_TENURE, REDUCE_EMI)

CHARGES_UPFRONT = "upfront"
CHARGES_ADDED = "added"


@dataclass(frozen=True)
class PrepaymentScenario:
    """An extra principal payment made on top of the regular EMI.

    Attributes
    ----------
    month: int
        The 1-based schedule month in which the prepayment is made.
    amount: Decimal
        The extra amount applied to the principal.
    type: str
        ``"reduce-tenure"`` keeps the EMI and shortens the schedule.
        ``"reduce-emi"`` keeps the remaining tenure and lowers the EMI.
    """

    month: int
    amount: Decimal
    type: str = REDUCE_TENURE


@dataclass(frozen=True)
class LoanParameters:
    """All user inputs describing a loan.

    Only ``principal``, ``rate`` and ``tenure`` drive the amortization. The
    interest type is informational, the loan type selects the tax allow-list
    entry and the charges only reduce the disbursed amount.
    """

    principal: Decimal
    rate: Decimal  # annual nominal interest rate in percent
    tenure: int  # months
    interest_type: str = "fixed"  # 'fixed', 'floating' or ''
    loan_category: str = ""  # 'secured', 'unsecured' or ''
    loan_type: str = ""
    processing_charges: Decimal = Decimal("0")
    file_charges: Decimal = Decimal("0")
    insurance_charges: Decimal = Decimal("0")
    commission_charges: Decimal = Decimal("0")
    eligible_for_tax_deduction: bool = False
    prepayments: Tuple[PrepaymentScenario, ...] = ()

    # Optional top-up loan taken on the same account
    top_up_amount: Decimal = Decimal("0")
    top_up_rate: Decimal = Decimal("0")
    top_up_tenure: int = 0
    top_up_charges: Decimal = Decimal("0")
    top_up_charges_type: str = ""  # 'upfront', 'added' or ''


@dataclass(frozen=True)
class EMIScheduleItem:
    """One month of an amortization schedule.

    ``principal`` includes ``prepayment``; the regular installment splits as
    ``emi == principal - prepayment + interest``.
    """

    month: int
    emi: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    cumulative_interest: Decimal
    cumulative_principal: Decimal
    prepayment: Decimal = Decimal("0")


@dataclass(frozen=True)
class LoanCalculationResult:
    """Aggregate outcome of ``engine.compute_loan``.

    ``effective_interest_rate`` is total interest over principal in percent,
    a lifetime ratio rather than an annual rate.
    """

    emi: Decimal
    total_repayment: Decimal
    total_interest: Decimal
    disbursed_amount: Decimal
    schedule: Tuple[EMIScheduleItem, ...]
    tax_benefit: Decimal
    effective_interest_rate: Decimal
    total_principal: Decimal = Decimal("0")
    total_prepayment: Decimal = Decimal("0")


@dataclass(frozen=True)
class LoanTerms:
    """The EMI, rate and tenure triple handled by the trade-off solver."""

    emi: Decimal
    rate: Decimal
    tenure: int


@dataclass(frozen=True)
class LoanStatus:
    """Position of a loan after a number of EMIs have been paid."""

    principal_paid: Decimal
    principal_remaining: Decimal
    interest_paid: Decimal
    interest_remaining: Decimal
    tenure_covered: int
    tenure_remaining: int


@dataclass(frozen=True)
class TopUpResult:
    """Merged top-up loan compared with running a separate top-up loan."""

    status: LoanStatus
    total_loan_amount: Decimal
    new_emi: Decimal
    new_tenure: int
    new_total_interest: Decimal
    new_total_repayment: Decimal
    original_remaining_emi: Decimal
    top_up_only_emi: Decimal
    top_up_only_interest: Decimal
    separate_emi: Decimal
    separate_total_cost: Decimal
    upfront_charges: Decimal
    net_top_up: Decimal

    @property
    def merge_saving(self) -> Decimal:
        """Positive when merging is cheaper than two separate loans."""
        return self.separate_total_cost - self.new_total_repayment


@dataclass(frozen=True)
class PrepaymentImpact:
    """Effect of a lump-sum prepayment compared with the baseline loan."""

    original_total_interest: Decimal
    original_total_repayment: Decimal
    original_tenure: int
    new_total_interest: Decimal
    new_total_repayment: Decimal
    new_emi: Decimal
    new_tenure: int
    interest_saved: Decimal
    tenure_reduction: int
    total_savings: Decimal


@dataclass(frozen=True)
class SIPResult:
    """Future value of a systematic investment plan."""

    final_value: Decimal
    total_investment: Decimal
    returns: Decimal


@dataclass(frozen=True)
class SIPLoanComparison:
    """Investing the EMI instead of paying it, nominal and real terms."""

    total_repayment: Decimal
    sip: SIPResult
    years: int
    loan_inflation_adjusted: Decimal
    sip_inflation_adjusted: Decimal
    advantage: Decimal
    inflation_adjusted_advantage: Decimal


@dataclass(frozen=True)
class InflationImpact:
    inflation_adjusted_principal: Decimal
    total_repayment: Decimal
    inflation_adjusted_repayment: Decimal
    real_cost: Decimal


@dataclass(frozen=True)
class CategoryBenefit:
    interest_rate_range: str
    max_amount: str
    tenure: str
    tax_benefits: str
