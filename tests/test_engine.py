import math

import pytest

from mortgage_calc.data_models import LoanParameters
from mortgage_calc.engine import (
    compute_monthly_costs,
    compute_monthly_payment,
    generate_schedule,
    resolve_monthly_payment,
    summarize_schedule,
)


class TestMonthlyPayment:
    def test_standard_mortgage(self):
        """$300K at 6.5% for 30 years."""
        assert round(compute_monthly_payment(300000, 6.5, 30), 2) == 1896.20

    def test_zero_rate_is_straight_division(self):
        assert compute_monthly_payment(100000, 0, 10) == 100000 / 120

    @pytest.mark.parametrize("principal,years", [(1, 1), (250000, 15), (999999.99, 40)])
    def test_zero_rate_exact(self, principal, years):
        assert compute_monthly_payment(principal, 0, years) == principal / (years * 12)

    def test_zero_principal(self):
        assert compute_monthly_payment(0, 6.5, 30) == 0

    def test_negative_principal_propagates(self):
        assert compute_monthly_payment(-1200, 0, 1) == -100

    def test_zero_term_is_not_an_exception(self):
        assert math.isinf(compute_monthly_payment(300000, 6.5, 0))
        assert math.isinf(compute_monthly_payment(300000, 0, 0))
        assert math.isnan(compute_monthly_payment(0, 0, 0))

    def test_negative_base_with_fractional_term_is_nan(self):
        # a rate below -1200% makes 1 + i negative; 2.55 years is 30.6 periods
        assert math.isnan(compute_monthly_payment(100000, -1500, 2.55))

    def test_negative_base_with_whole_term_stays_real(self):
        payment = compute_monthly_payment(100000, -1500, 1)
        assert isinstance(payment, float)
        assert not math.isnan(payment)

    def test_loan_parameters_derived_values(self):
        loan = LoanParameters(principal=300000, annual_rate_percent=6.0, term_years=30)
        assert loan.monthly_rate == pytest.approx(0.005)
        assert loan.total_payments == 360


class TestGenerateSchedule:
    def test_entry_count(self):
        payment = compute_monthly_payment(300000, 6.5, 30)
        schedule = generate_schedule(300000, 6.5, 30, payment)
        assert len(schedule) == 360
        assert [e.period for e in schedule[:3]] == [1, 2, 3]
        assert schedule[-1].period == 360

    def test_first_period_split(self):
        payment = compute_monthly_payment(300000, 6.5, 30)
        first = generate_schedule(300000, 6.5, 30, payment)[0]
        assert first.interest_portion == pytest.approx(1625.0)
        assert first.principal_portion == pytest.approx(payment - 1625.0)

    def test_portions_add_up_to_payment(self):
        payment = compute_monthly_payment(420000, 7.25, 20)
        for entry in generate_schedule(420000, 7.25, 20, payment):
            assert entry.interest_portion + entry.principal_portion == pytest.approx(payment)

    @pytest.mark.parametrize(
        "principal,rate,years",
        [(300000, 6.5, 30), (150000, 3.0, 15), (50000, 12.0, 5), (1000000, 0.5, 40)],
    )
    def test_principal_fully_repaid(self, principal, rate, years):
        payment = compute_monthly_payment(principal, rate, years)
        schedule = generate_schedule(principal, rate, years, payment)
        assert sum(e.principal_portion for e in schedule) == pytest.approx(principal, rel=1e-6)
        assert schedule[-1].remaining_balance == pytest.approx(0, abs=1e-6)

    def test_balance_never_increases_or_goes_negative(self):
        payment = compute_monthly_payment(300000, 6.5, 30)
        schedule = generate_schedule(300000, 6.5, 30, payment)
        balances = [e.remaining_balance for e in schedule]
        assert all(b >= 0 for b in balances)
        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))

    def test_overpayment_keeps_full_length(self):
        schedule = generate_schedule(300000, 6.5, 30, 5000)
        assert len(schedule) == 360
        assert schedule[-1].remaining_balance == 0
        # once paid off there is no interest left, the whole payment is principal
        assert schedule[-1].interest_portion == 0
        assert schedule[-1].principal_portion == 5000

    @pytest.mark.parametrize(
        "args",
        [
            (0, 6.5, 30, 1896.2),
            (300000, 0, 30, 1896.2),
            (300000, 6.5, 0, 1896.2),
            (300000, 6.5, 30, 0),
            (300000, 6.5, 30, None),
            (300000, 6.5, 30, float("nan")),
        ],
    )
    def test_unset_input_gives_empty_schedule(self, args):
        assert generate_schedule(*args) == []

    def test_repeatable(self):
        payment = compute_monthly_payment(200000, 5.0, 10)
        assert generate_schedule(200000, 5.0, 10, payment) == generate_schedule(200000, 5.0, 10, payment)


class TestResolveMonthlyPayment:
    def test_override_wins(self):
        assert resolve_monthly_payment(300000, 6.5, 30, 2500) == 2500

    def test_non_positive_override_ignored(self):
        assert resolve_monthly_payment(300000, 6.5, 30, 0) == compute_monthly_payment(300000, 6.5, 30)
        assert resolve_monthly_payment(300000, 6.5, 30, -5) == compute_monthly_payment(300000, 6.5, 30)

    def test_unset_inputs_give_zero(self):
        assert resolve_monthly_payment(300000, 0, 30) == 0
        assert resolve_monthly_payment(0, 6.5, 30) == 0


class TestMonthlyCosts:
    def test_full_breakdown(self):
        costs = compute_monthly_costs(750000, 20, 6.5, 30, 1.2, 120, 0)
        assert costs.down_payment_amount == pytest.approx(150000)
        assert costs.loan_amount == pytest.approx(600000)
        assert round(costs.monthly_principal_and_interest, 2) == 3792.41
        assert costs.monthly_tax == pytest.approx(750)
        assert costs.total_monthly == pytest.approx(costs.monthly_principal_and_interest + 750 + 120)

    def test_missing_price_gives_zeros(self):
        costs = compute_monthly_costs(0, 20, 6.5, 30, 1.2, 120, 50)
        assert all(value == 0 for value in costs.to_dict().values())

    def test_down_payment_above_price_clamps_loan(self):
        costs = compute_monthly_costs(100000, 150, 6.5, 30)
        assert costs.loan_amount == 0
        assert costs.monthly_principal_and_interest == 0

    def test_negative_rate_treated_as_interest_free(self):
        costs = compute_monthly_costs(120000, 0, -3, 10)
        assert costs.monthly_principal_and_interest == pytest.approx(1000)


class TestSummarizeSchedule:
    def test_totals(self):
        payment = compute_monthly_payment(300000, 6.5, 30)
        summary = summarize_schedule(generate_schedule(300000, 6.5, 30, payment))
        assert summary.total_payments == 360
        assert summary.total_principal == pytest.approx(300000, rel=1e-6)
        assert summary.total_paid == pytest.approx(payment * 360)
        assert summary.total_interest == pytest.approx(payment * 360 - 300000, rel=1e-6)
        assert summary.payoff_period == 360

    def test_early_payoff_detected(self):
        summary = summarize_schedule(generate_schedule(300000, 6.5, 30, 5000))
        assert summary.payoff_period is not None
        assert summary.payoff_period < 360

    def test_empty(self):
        summary = summarize_schedule([])
        assert summary.total_payments == 0
        assert summary.total_paid == 0
        assert summary.payoff_period is None
