"""Static benefit tables.

Tax deductions are granted on loan type alone: home and education loans
qualify, with the principal and interest deductions capped independently
and the summed deduction valued at a flat marginal tax rate.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict

from .data_models import CategoryBenefit

TAX_ELIGIBLE_LOAN_TYPES = frozenset({"home", "education"})

PRINCIPAL_DEDUCTION_CAP = Decimal("150000")  # Section 80C
INTEREST_DEDUCTION_CAP = Decimal("200000")  # Section 24
MARGINAL_TAX_RATE = Decimal("0.30")

CATEGORY_BENEFITS: Dict[str, Dict[str, CategoryBenefit]] = {
    "secured": {
        "home": CategoryBenefit(
            interest_rate_range="8.5% - 12%",
            max_amount="Up to ₹10 Cr",
            tenure="Up to 30 years",
            tax_benefits="Principal: ₹1.5L, Interest: ₹2L",
        ),
        "vehicle": CategoryBenefit(
            interest_rate_range="7% - 15%",
            max_amount="Up to ₹1 Cr",
            tenure="Up to 7 years",
            tax_benefits="Limited benefits",
        ),
        "gold": CategoryBenefit(
            interest_rate_range="10% - 16%",
            max_amount="Up to 75% of gold value",
            tenure="Up to 3 years",
            tax_benefits="No specific benefits",
        ),
    },
    "unsecured": {
        "personal": CategoryBenefit(
            interest_rate_range="12% - 24%",
            max_amount="Up to ₹40L",
            tenure="Up to 5 years",
            tax_benefits="No benefits",
        ),
        "education": CategoryBenefit(
            interest_rate_range="9% - 15%",
            max_amount="Up to ₹1.5 Cr",
            tenure="Up to 15 years",
            tax_benefits="Interest deduction available",
        ),
        "business": CategoryBenefit(
            interest_rate_range="11% - 20%",
            max_amount="Up to ₹5 Cr",
            tenure="Up to 10 years",
            tax_benefits="Business expense deduction",
        ),
    },
}

DEFAULT_CATEGORY_BENEFIT = CategoryBenefit(
    interest_rate_range="10% - 18%",
    max_amount="Varies by lender",
    tenure="Up to 7 years",
    tax_benefits="Limited or no benefits",
)


def is_eligible_for_tax_benefits(loan_type: str) -> bool:
    return (loan_type or "").strip().lower() in TAX_ELIGIBLE_LOAN_TYPES


def capped_deduction_value(principal_repaid: Decimal, interest_paid: Decimal) -> Decimal:
    """Return the tax saved on capped principal and interest deductions."""
    principal_part = min(max(principal_repaid, Decimal(0)), PRINCIPAL_DEDUCTION_CAP)
    interest_part = min(max(interest_paid, Decimal(0)), INTEREST_DEDUCTION_CAP)
    return (principal_part + interest_part) * MARGINAL_TAX_RATE


def loan_category_benefits(category: str, loan_type: str) -> CategoryBenefit:
    """Look up the indicative terms for a loan category and type."""
    table = CATEGORY_BENEFITS.get((category or "").strip().lower(), {})
    return table.get((loan_type or "").strip().lower(), DEFAULT_CATEGORY_BENEFIT)
