from decimal import Decimal

import pytest

from emi_calc.comparisons import (
    compare_sip_with_loan,
    inflation_adjusted_value,
    inflation_impact,
    progressive_inflation_adjusted_repayment,
    sip_future_value,
)


def test_sip_future_value():
    result = sip_future_value(10_000, 12, 12)
    assert result.final_value == Decimal("126825.03")
    assert result.total_investment == Decimal("120000.00")
    assert result.returns == Decimal("6825.03")


def test_sip_at_zero_rate_only_accumulates():
    result = sip_future_value(10_000, 0, 12)
    assert result.final_value == Decimal("120000")
    assert result.returns == 0


def test_inflation_adjusted_value():
    assert inflation_adjusted_value(100_000, 2, 6) == Decimal("112360")
    assert inflation_adjusted_value(100_000, 0) == Decimal("100000")


def test_progressive_inflation_grows_each_emi():
    assert progressive_inflation_adjusted_repayment(1_000, 2, 12) == Decimal("2010")
    assert progressive_inflation_adjusted_repayment(1_000, 0, 12) == 0


def test_inflation_impact():
    impact = inflation_impact(100_000, 10_000, 12, 6)
    assert impact.inflation_adjusted_principal == Decimal("106000")
    assert impact.total_repayment == Decimal("120000")
    assert float(impact.inflation_adjusted_repayment) == pytest.approx(123355.62, abs=0.01)
    assert impact.real_cost == impact.inflation_adjusted_repayment - impact.inflation_adjusted_principal


def test_compare_sip_with_loan():
    comparison = compare_sip_with_loan(10_000, 12, 12, 6)
    assert comparison.years == 1
    assert comparison.total_repayment == Decimal("120000")
    assert comparison.advantage == Decimal("6825.03")
    assert comparison.loan_inflation_adjusted == Decimal("127200")
    assert float(comparison.inflation_adjusted_advantage) == pytest.approx(7234.53, abs=0.01)


def test_partial_year_rounds_up():
    assert compare_sip_with_loan(10_000, 13).years == 2
