"""Core calculation engine for the mortgage calculator.

This module implements the fixed-rate amortization math used by both the
payment calculator and the amortization view: the level monthly payment,
the period-by-period schedule, the monthly housing cost breakdown and the
schedule totals. All functions are pure and use plain floating point
arithmetic; rounding is left to whoever presents the numbers.

Inputs are not validated. Negative amounts simply flow through the formulas
and degenerate terms produce ``inf``/``nan`` rather than an exception.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .data_models import MonthlyCosts, ScheduleEntry, ScheduleSummary

# Balances below half a cent count as paid off.
PAID_OFF_THRESHOLD = 0.005


def _divide(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics instead of raising ``ZeroDivisionError``."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _is_unset(value: Optional[float]) -> bool:
    # zero doubles as "not entered yet"
    return value is None or value == 0 or (isinstance(value, float) and math.isnan(value))


def compute_monthly_payment(principal: float, annual_rate_percent: float, term_years: float) -> float:
    """Return the level monthly principal-and-interest payment of a loan.

    The formula is:

        payment = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of monthly payments. When the interest rate is zero
    the payment simplifies to ``P / n``.
    """
    rate_per_month = annual_rate_percent / 100 / 12
    term = term_years * 12
    if rate_per_month == 0:
        return _divide(principal, term)
    try:
        factor = math.pow(1 + rate_per_month, term)
    except OverflowError:
        factor = math.inf
    except ValueError:
        # negative base with a fractional exponent
        factor = math.nan
    if math.isinf(factor):
        # the ratio factor / (factor - 1) tends to 1
        return principal * rate_per_month
    return _divide(principal * rate_per_month * factor, factor - 1)


def generate_schedule(
    principal: float,
    annual_rate_percent: float,
    term_years: float,
    monthly_payment: float,
) -> List[ScheduleEntry]:
    """Build the amortization schedule for a fixed monthly payment.

    Returns an empty list when any argument is zero or missing; callers pass
    zeros while the user is still filling in the form. Otherwise exactly
    ``term_years * 12`` entries are produced, even if the balance reaches
    zero early because the payment exceeds the amortizing one. The balance
    is clamped at zero so rounding drift never shows as a negative balance.
    """
    if any(_is_unset(v) for v in (principal, annual_rate_percent, term_years, monthly_payment)):
        return []

    rate_per_month = annual_rate_percent / 100 / 12
    total_payments = int(term_years * 12)
    balance = principal
    schedule: List[ScheduleEntry] = []
    for period in range(1, total_payments + 1):
        interest_portion = balance * rate_per_month
        principal_portion = monthly_payment - interest_portion
        balance -= principal_portion
        if balance < 0:
            balance = 0.0
        schedule.append(
            ScheduleEntry(
                period=period,
                interest_portion=interest_portion,
                principal_portion=principal_portion,
                remaining_balance=balance,
            )
        )
    return schedule


def resolve_monthly_payment(
    principal: float,
    annual_rate_percent: float,
    term_years: float,
    override: Optional[float] = None,
) -> float:
    """Return the payment the amortization view should schedule with.

    A positive ``override`` (the user's own P&I figure) always wins.
    Otherwise the computed payment is used, or 0 while any of the loan
    inputs is still unset.
    """
    if override is not None and override > 0:
        return override
    if any(_is_unset(v) for v in (principal, annual_rate_percent, term_years)):
        return 0.0
    return compute_monthly_payment(principal, annual_rate_percent, term_years)


def compute_monthly_costs(
    home_price: float,
    down_payment_percent: float,
    annual_rate_percent: float,
    term_years: float,
    property_tax_rate_percent: float = 0.0,
    insurance_monthly: float = 0.0,
    hoa_monthly: float = 0.0,
) -> MonthlyCosts:
    """Break the monthly cost of buying a home into its components.

    The loan amount is the price less the down payment (never below zero).
    Property tax is an annual percentage of the price spread over twelve
    months. Insurance and HOA dues are already monthly figures.
    """
    if _is_unset(home_price) or _is_unset(term_years):
        return MonthlyCosts(
            loan_amount=0.0,
            down_payment_amount=0.0,
            monthly_principal_and_interest=0.0,
            monthly_tax=0.0,
            insurance_monthly=0.0,
            hoa_monthly=0.0,
            total_monthly=0.0,
        )

    down_payment_amount = home_price * down_payment_percent / 100
    loan_amount = max(home_price - down_payment_amount, 0.0)
    # negative rates are treated as interest free
    monthly_pi = compute_monthly_payment(loan_amount, max(annual_rate_percent, 0.0), term_years)
    monthly_tax = home_price * (property_tax_rate_percent / 100) / 12
    total_monthly = monthly_pi + monthly_tax + insurance_monthly + hoa_monthly

    return MonthlyCosts(
        loan_amount=loan_amount,
        down_payment_amount=down_payment_amount,
        monthly_principal_and_interest=monthly_pi,
        monthly_tax=monthly_tax,
        insurance_monthly=insurance_monthly,
        hoa_monthly=hoa_monthly,
        total_monthly=total_monthly,
    )


def summarize_schedule(schedule: Sequence[ScheduleEntry]) -> ScheduleSummary:
    """Aggregate interest, principal and payoff timing of a schedule."""
    total_interest = sum(entry.interest_portion for entry in schedule)
    total_principal = sum(entry.principal_portion for entry in schedule)
    payoff_period = next(
        (entry.period for entry in schedule if entry.remaining_balance < PAID_OFF_THRESHOLD), None
    )
    return ScheduleSummary(
        total_payments=len(schedule),
        total_interest=total_interest,
        total_principal=total_principal,
        total_paid=total_interest + total_principal,
        payoff_period=payoff_period,
    )
