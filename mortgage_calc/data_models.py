"""Data models for the mortgage calculator.

This module defines dataclasses for the entities the calculator works with:
the loan parameters supplied by the user, the per-period amortization rows,
the monthly cost breakdown shown by the payment calculator and the totals of
a schedule. Every model can be turned into a plain dictionary for JSON output.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class LoanParameters:
    """Inputs of a single fixed-rate loan calculation.

    Attributes
    ----------
    principal: float
        The financed amount (home price minus down payment, or a loan amount
        entered directly).
    annual_rate_percent: float
        Nominal annual interest rate in percent, e.g. ``6.5`` for 6.5 %.
    term_years: int
        Loan term in years.
    """

    principal: float
    annual_rate_percent: float
    term_years: int

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 100 / 12

    @property
    def total_payments(self) -> int:
        return self.term_years * 12

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScheduleEntry:
    """One month of an amortization schedule.

    ``interest_portion + principal_portion`` always equals the monthly
    payment the schedule was generated with. ``remaining_balance`` is the
    balance after the payment and is never negative.
    """

    period: int
    interest_portion: float
    principal_portion: float
    remaining_balance: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyCosts:
    """Breakdown of the total monthly housing cost for a purchase."""

    loan_amount: float
    down_payment_amount: float
    monthly_principal_and_interest: float
    monthly_tax: float
    insurance_monthly: float
    hoa_monthly: float
    total_monthly: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScheduleSummary:
    """Aggregate figures of a generated schedule."""

    total_payments: int
    total_interest: float
    total_principal: float
    total_paid: float
    payoff_period: Optional[int]  # first period with the balance paid off

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
