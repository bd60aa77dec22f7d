"""Output helpers for the mortgage calculator.

This module renders cost breakdowns, schedule summaries and amortization
schedules as plain text tables. The functions return strings so the command
line can hand them to ``click.echo``.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from .data_models import MonthlyCosts, ScheduleEntry, ScheduleSummary


def format_costs(costs: MonthlyCosts) -> str:
    """Render the monthly cost breakdown of a purchase."""
    lines = [
        "Monthly costs",
        "-" * 48,
        f"Loan amount        : {costs.loan_amount:.2f}",
        f"Down payment       : {costs.down_payment_amount:.2f}",
        f"Principal+interest : {costs.monthly_principal_and_interest:.2f}",
        f"Property tax       : {costs.monthly_tax:.2f}",
    ]
    if costs.insurance_monthly:
        lines.append(f"Insurance          : {costs.insurance_monthly:.2f}")
    if costs.hoa_monthly:
        lines.append(f"HOA                : {costs.hoa_monthly:.2f}")
    lines.append(f"Total monthly      : {costs.total_monthly:.2f}")
    lines.append("-" * 48)
    return "\n".join(lines)


def format_summary(monthly_payment: float, summary: ScheduleSummary) -> str:
    """Render the totals of an amortization schedule."""
    lines = [
        "Summary",
        "-" * 48,
        f"Monthly payment    : {monthly_payment:.2f}",
        f"Payments           : {summary.total_payments}",
        f"Total interest     : {summary.total_interest:.2f}",
        f"Total principal    : {summary.total_principal:.2f}",
        f"Total paid         : {summary.total_paid:.2f}",
    ]
    if summary.payoff_period is not None and summary.payoff_period < summary.total_payments:
        lines.append(f"Paid off in period : {summary.payoff_period}")
    lines.append("-" * 48)
    return "\n".join(lines)


def format_schedule(schedule: Iterable[ScheduleEntry], max_rows: Optional[int] = None) -> str:
    """Render the amortization schedule as a tab separated table.

    When ``max_rows`` is given only that many rows are shown, followed by a
    note with the number of rows left out.
    """
    rows: List[str] = ["\t".join(["Month", "Interest", "Principal", "Balance"])]
    hidden = 0
    for index, entry in enumerate(schedule):
        if max_rows is not None and index >= max_rows:
            hidden += 1
            continue
        rows.append(
            "\t".join(
                [
                    str(entry.period),
                    f"{entry.interest_portion:.2f}",
                    f"{entry.principal_portion:.2f}",
                    f"{entry.remaining_balance:.2f}",
                ]
            )
        )
    if hidden:
        rows.append(f"... {hidden} more rows not shown")
    return "\n".join(rows)
