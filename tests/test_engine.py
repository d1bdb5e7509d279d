"""
Tests for the amortization engine.

Covers EMI computation, schedule generation with prepayments, the tenure and
rate inversions, tax benefit and disbursement, and the full loan result.
"""

from decimal import Decimal

import pytest

from emi_calc.data_models import REDUCE_EMI, REDUCE_TENURE, LoanParameters, PrepaymentScenario
from emi_calc.engine import (
    build_schedule,
    compute_emi,
    compute_loan,
    disbursed_amount,
    rate_from_emi,
    solve_for_emi,
    solve_for_rate,
    solve_for_tenure,
    tax_benefit,
    tenure_from_emi,
)
from emi_calc.errors import InvalidInput


def annuity(principal, rate, tenure):
    """Reference EMI computed with floats."""
    m = rate / 1200
    factor = (1 + m) ** tenure
    return principal * m * factor / (factor - 1)


class TestComputeEMI:
    def test_zero_rate_is_straight_line(self):
        assert compute_emi(1_200_000, 0, 12) == Decimal("100000")

    def test_home_loan_scenario(self):
        emi = compute_emi(2_500_000, 8.5, 240)
        assert isinstance(emi, Decimal)
        assert float(emi) == pytest.approx(annuity(2_500_000, 8.5, 240), abs=0.006)
        assert float(emi) == pytest.approx(21695.57, abs=0.1)

    def test_rounded_to_cents(self):
        emi = compute_emi(100_000, 10, 7)
        assert emi == emi.quantize(Decimal("0.01"))

    def test_one_month_tenure_repays_principal_plus_interest(self):
        assert compute_emi(100_000, 12, 1) == Decimal("101000.00")

    def test_increases_with_rate(self):
        emis = [compute_emi(1_000_000, rate, 120) for rate in (0, 1, 5, 10, 20, 30)]
        assert emis == sorted(emis)
        assert len(set(emis)) == len(emis)

    def test_decreases_with_tenure(self):
        emis = [compute_emi(1_000_000, 9, tenure) for tenure in (12, 60, 120, 240, 480)]
        assert all(a > b for a, b in zip(emis, emis[1:]))

    def test_non_positive_principal_has_no_emi(self):
        assert compute_emi(0, 10, 12) == Decimal("0")
        assert compute_emi(-5000, 10, 12) == Decimal("0")

    def test_non_positive_tenure_is_one_shot(self):
        assert compute_emi(100_000, 10, 0) == Decimal("100000.00")
        assert compute_emi(100_000, 10, -3) == Decimal("100000.00")

    def test_negative_rate_is_interest_free(self):
        assert compute_emi(120_000, -4, 12) == Decimal("10000.00")

    @pytest.mark.parametrize("bad", [None, float("nan"), "abc", "", float("inf"), True])
    def test_malformed_input_raises(self, bad):
        with pytest.raises(InvalidInput):
            compute_emi(bad, 10, 12)

    def test_string_inputs_accepted(self):
        assert compute_emi("1,200,000", "0", "12") == Decimal("100000")

    def test_capability_aliases(self):
        assert solve_for_emi is compute_emi
        assert solve_for_tenure is tenure_from_emi
        assert solve_for_rate is rate_from_emi


class TestBuildSchedule:
    def test_home_loan_schedule_closes_at_tenure(self):
        schedule = build_schedule(2_500_000, 8.5, 240)
        assert len(schedule) == 240
        assert [row.month for row in schedule] == list(range(1, 241))
        assert schedule[-1].balance == 0

    @pytest.mark.parametrize("principal", [12_345.67, 100_000, 2_500_000])
    @pytest.mark.parametrize("rate", [0, 7.25, 18, 30])
    @pytest.mark.parametrize("tenure", [1, 12, 240, 480])
    def test_amortization_closure(self, principal, rate, tenure):
        schedule = build_schedule(principal, rate, tenure)
        assert 1 <= len(schedule) <= tenure
        assert schedule[-1].balance == 0
        assert all(row.balance >= 0 for row in schedule)
        first_interest = Decimal(str(principal)) * Decimal(str(rate)) / 1200
        if schedule[0].emi > first_interest:
            balances = [row.balance for row in schedule]
            assert all(a >= b for a, b in zip(balances, balances[1:]))

    def test_component_identity(self):
        schedule = build_schedule(750_000, 11, 84)
        for row in schedule[:-1]:
            assert abs(row.principal + row.interest - row.emi) <= Decimal("0.01")

    def test_terminal_row_pays_interest_plus_balance(self):
        schedule = build_schedule(500_000, 10.5, 60)
        last, before = schedule[-1], schedule[-2]
        assert last.emi == last.interest + before.balance
        assert last.principal == before.balance

    def test_cumulative_columns(self):
        schedule = build_schedule(300_000, 9, 36)
        assert schedule[-1].cumulative_principal == pytest.approx(Decimal(300_000))
        assert schedule[-1].cumulative_interest == sum(row.interest for row in schedule)

    def test_deterministic(self):
        assert build_schedule(1_000_000, 9.1, 120) == build_schedule(1_000_000, 9.1, 120)

    def test_non_positive_principal_gives_empty_schedule(self):
        assert build_schedule(0, 9, 120) == []
        assert build_schedule(-10, 9, 120) == []

    def test_non_positive_tenure_gives_lump_sum_row(self):
        schedule = build_schedule(100_000, 9, 0)
        assert len(schedule) == 1
        row = schedule[0]
        assert row.month == 1
        assert row.emi == row.principal == Decimal(100_000)
        assert row.interest == 0
        assert row.balance == 0

    def test_reduce_tenure_prepayment_shortens_loan(self):
        baseline = build_schedule(2_500_000, 8.5, 240)
        prepaid = build_schedule(
            2_500_000, 8.5, 240, [PrepaymentScenario(month=1, amount=Decimal(500_000), type=REDUCE_TENURE)]
        )
        assert len(prepaid) < len(baseline)
        assert sum(r.interest for r in prepaid) < sum(r.interest for r in baseline)
        assert all(row.emi == baseline[0].emi for row in prepaid[:-1])
        assert prepaid[0].prepayment == Decimal(500_000)
        assert prepaid[-1].balance == 0

    def test_reduce_emi_prepayment_keeps_length_and_lowers_emi(self):
        baseline = build_schedule(2_500_000, 8.5, 240)
        prepaid = build_schedule(
            2_500_000, 8.5, 240, [PrepaymentScenario(month=1, amount=Decimal(500_000), type=REDUCE_EMI)]
        )
        assert len(prepaid) == len(baseline)
        original_emi = baseline[0].emi
        assert prepaid[0].emi == original_emi
        assert all(row.emi < original_emi for row in prepaid[1:])
        assert sum(r.interest for r in prepaid) < sum(r.interest for r in baseline)
        assert prepaid[-1].balance == 0

    def test_reduce_emi_new_installment_repays_remaining_months(self):
        prepaid = build_schedule(
            1_000_000, 10, 120, [PrepaymentScenario(month=24, amount=Decimal(200_000), type=REDUCE_EMI)]
        )
        expected = compute_emi(prepaid[23].balance, 10, 96)
        assert prepaid[24].emi == expected
        assert len(prepaid) == 120

    def test_prepayment_identity(self):
        prepaid = build_schedule(
            600_000, 9, 60, [PrepaymentScenario(month=5, amount=Decimal(50_000), type=REDUCE_TENURE)]
        )
        row = prepaid[4]
        assert row.prepayment == Decimal(50_000)
        assert abs(row.principal - row.prepayment + row.interest - row.emi) <= Decimal("0.01")

    def test_oversized_prepayment_is_capped_at_balance(self):
        prepaid = build_schedule(
            1_000_000, 9, 120, [PrepaymentScenario(month=3, amount=Decimal(10_000_000))]
        )
        assert len(prepaid) == 3
        assert prepaid[-1].balance == 0
        assert prepaid[-1].prepayment < Decimal(1_000_000)

    def test_prepayments_in_same_month_are_summed(self):
        events = [
            PrepaymentScenario(month=2, amount=Decimal(10_000)),
            PrepaymentScenario(month=2, amount=Decimal(15_000)),
        ]
        prepaid = build_schedule(500_000, 9, 60, events)
        assert prepaid[1].prepayment == Decimal(25_000)

    def test_non_positive_prepayment_ignored(self):
        events = [PrepaymentScenario(month=2, amount=Decimal(-10_000))]
        assert build_schedule(500_000, 9, 60, events) == build_schedule(500_000, 9, 60)

    def test_unknown_prepayment_type_raises(self):
        with pytest.raises(InvalidInput):
            build_schedule(500_000, 9, 60, [PrepaymentScenario(month=1, amount=Decimal(1), type="skip")])


class TestTenureFromEMI:
    @pytest.mark.parametrize(
        "principal, rate, tenure",
        [
            (2_500_000, 8.5, 240),
            (500_000, 10.5, 60),
            (100_000, 12, 12),
            (1_000_000, 7, 360),
            (300_000, 0, 36),
            (100_000, 0, 3),
        ],
    )
    def test_round_trip(self, principal, rate, tenure):
        emi = compute_emi(principal, rate, tenure)
        assert tenure_from_emi(principal, rate, emi) == tenure

    def test_zero_rate_uses_division(self):
        assert tenure_from_emi(100_000, 0, 30_000) == 4

    def test_cent_emi_covers_its_rounding_band(self):
        # 1000.01 over 10 months is quoted as an EMI of 100.00
        assert compute_emi("1000.01", 0, 10) == Decimal("100.00")
        assert tenure_from_emi("1000.01", 0, 100) == 10
        assert tenure_from_emi("1000.045", 0, "100.00") == 10

    def test_sub_cent_emi_is_taken_as_exact(self):
        assert tenure_from_emi("1000.045", 0, "100.004") == 11

    def test_emi_not_covering_interest_saturates(self):
        assert tenure_from_emi(1_000_000, 12, 10_000) == 480
        assert tenure_from_emi(1_000_000, 12, 5_000) == 480

    def test_non_positive_emi_saturates(self):
        assert tenure_from_emi(1_000_000, 12, 0) == 480
        assert tenure_from_emi(1_000_000, 12, -100) == 480

    def test_clamped_to_range(self):
        assert tenure_from_emi(1_000, 10, 1_000_000) == 1
        assert tenure_from_emi(1_000_000, 0, 100) == 480
        assert tenure_from_emi(0, 10, 1_000) == 1

    def test_larger_emi_shortens_tenure(self):
        assert tenure_from_emi(1_000_000, 9, 20_000) < tenure_from_emi(1_000_000, 9, 12_000)


class TestRateFromEMI:
    @pytest.mark.parametrize(
        "principal, rate, tenure",
        [
            (2_500_000, 8.5, 240),
            (500_000, 10.5, 60),
            (1_000_000, 14, 120),
            (200_000, 24, 36),
            (10_000, 10, 12),
            (20_000, 15, 36),
            (5_000, 0.5, 6),
            (1_000, 29.5, 3),
            (50_000, 7.75, 24),
        ],
    )
    def test_round_trip_within_tolerance(self, principal, rate, tenure):
        emi = compute_emi(principal, rate, tenure)
        assert abs(rate_from_emi(principal, tenure, emi) - Decimal(str(rate))) < Decimal("0.05")

    def test_clamped_to_search_bracket(self):
        low = rate_from_emi(1_000_000, 120, 1)
        high = rate_from_emi(1_000_000, 120, 10_000_000)
        assert Decimal("0.1") <= low < Decimal("0.1001")
        assert Decimal("29.999") < high <= Decimal("30")

    def test_deterministic(self):
        emi = compute_emi(800_000, 9.75, 180)
        assert rate_from_emi(800_000, 180, emi) == rate_from_emi(800_000, 180, emi)


class TestTaxAndDisbursement:
    def test_tax_benefit_capped(self):
        assert tax_benefit(500_000, 500_000, "home") == Decimal("105000")

    def test_tax_benefit_below_caps(self):
        assert tax_benefit(100_000, 50_000, "education") == Decimal("45000")

    def test_tax_benefit_requires_eligible_type(self):
        assert tax_benefit(500_000, 500_000, "personal") == 0
        assert tax_benefit(500_000, 500_000, "") == 0

    def test_disbursed_amount(self):
        assert disbursed_amount(1_000_000, 10_000, 2_000, 5_000, 3_000) == Decimal("980000")

    def test_disbursed_amount_may_go_negative(self):
        assert disbursed_amount(1_000, 2_000) == Decimal("-1000")


class TestComputeLoan:
    def test_home_loan_result(self):
        params = LoanParameters(
            principal=Decimal("2500000"),
            rate=Decimal("8.5"),
            tenure=240,
            loan_category="secured",
            loan_type="home",
            processing_charges=Decimal("10000"),
            file_charges=Decimal("2500"),
        )
        result = compute_loan(params)
        assert result.emi == compute_emi(2_500_000, 8.5, 240)
        assert len(result.schedule) == 240
        assert result.total_repayment == sum(row.emi for row in result.schedule)
        assert result.total_interest == sum(row.interest for row in result.schedule)
        assert result.disbursed_amount == Decimal("2487500")
        assert result.tax_benefit == Decimal("105000")
        assert result.effective_interest_rate == result.total_interest / Decimal(2_500_000) * 100
        assert result.total_principal == pytest.approx(Decimal(2_500_000))
        assert result.total_prepayment == 0

    def test_ineligible_loan_has_no_tax_benefit(self):
        result = compute_loan(LoanParameters(principal=Decimal(500_000), rate=Decimal(14), tenure=36, loan_type="personal"))
        assert result.tax_benefit == 0

    def test_prepayments_flow_through(self):
        params = LoanParameters(
            principal=Decimal(1_000_000),
            rate=Decimal(9),
            tenure=120,
            prepayments=(PrepaymentScenario(month=12, amount=Decimal(100_000)),),
        )
        result = compute_loan(params)
        assert result.total_prepayment == Decimal(100_000)
        assert len(result.schedule) < 120

    def test_zero_principal_is_degenerate(self):
        result = compute_loan(LoanParameters(principal=Decimal(0), rate=Decimal(9), tenure=120))
        assert result.schedule == ()
        assert result.emi == 0
        assert result.effective_interest_rate == 0
