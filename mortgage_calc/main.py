"""Command-line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute the monthly payment of a loan, break down the
total monthly cost of a purchase or view the full amortization schedule.
Schedules can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List, Optional

import click

from .data_models import LoanParameters, ScheduleEntry, ScheduleSummary
from .engine import (
    compute_monthly_costs,
    compute_monthly_payment,
    generate_schedule,
    resolve_monthly_payment,
    summarize_schedule,
)
from .formatter import format_costs, format_schedule, format_summary
from .utils import parse_amount


def _amount_option(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def export_to_json(
    path: Path,
    loan: LoanParameters,
    monthly_payment: float,
    schedule: List[ScheduleEntry],
    summary: ScheduleSummary,
) -> None:
    """Export loan inputs, summary and schedule to a JSON file."""
    data = {
        "loan": loan.to_dict(),
        "monthly_payment": monthly_payment,
        "summary": summary.to_dict(),
        "schedule": [entry.to_dict() for entry in schedule],
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[ScheduleEntry]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Month", "Interest", "Principal", "Balance"])
        for entry in schedule:
            writer.writerow(
                [entry.period, entry.interest_portion, entry.principal_portion, entry.remaining_balance]
            )


@click.group()
def cli() -> None:
    """A command-line mortgage payment and amortization calculator."""
    pass


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_amount_option, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--term", "-t", "term", required=True, type=int, help="Loan term in years")
def payment(principal: float, rate: float, term: int) -> None:
    """Print the monthly principal and interest payment."""
    click.echo(f"{compute_monthly_payment(principal, rate, term):.2f}")


@cli.command()
@click.option("--home-price", "home_price", required=True, callback=_amount_option, help="Purchase price")
@click.option("--down-payment-percent", "down_payment_percent", type=float, default=20.0, show_default=True)
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--term", "-t", "term", type=int, default=30, show_default=True, help="Loan term in years")
@click.option("--tax-rate", "tax_rate", type=float, default=0.0, help="Annual property tax rate (percent)")
@click.option("--insurance", "insurance", callback=_amount_option, help="Monthly homeowners insurance")
@click.option("--hoa", "hoa", callback=_amount_option, help="Monthly HOA dues")
@click.option("--json", "as_json", is_flag=True, help="Print the breakdown as JSON")
def costs(
    home_price: float,
    down_payment_percent: float,
    rate: float,
    term: int,
    tax_rate: float,
    insurance: Optional[float],
    hoa: Optional[float],
    as_json: bool,
) -> None:
    """Break down the total monthly cost of buying a home."""
    breakdown = compute_monthly_costs(
        home_price,
        down_payment_percent,
        rate,
        term,
        property_tax_rate_percent=tax_rate,
        insurance_monthly=insurance or 0.0,
        hoa_monthly=hoa or 0.0,
    )
    if as_json:
        click.echo(json.dumps(breakdown.to_dict(), indent=2))
    else:
        click.echo(format_costs(breakdown))


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_amount_option, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--term", "-t", "term", required=True, type=int, help="Loan term in years")
@click.option(
    "--payment",
    "payment_override",
    callback=_amount_option,
    help="Monthly P&I to schedule with instead of the computed payment",
)
@click.option("--max-rows", "max_rows", type=int, default=120, show_default=True, help="Rows to print")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: float,
    rate: float,
    term: int,
    payment_override: Optional[float],
    max_rows: int,
    output: Optional[str],
) -> None:
    """Compute and print the amortization schedule."""
    monthly_payment = resolve_monthly_payment(principal, rate, term, payment_override)
    entries = generate_schedule(principal, rate, term, monthly_payment)
    if not entries:
        raise click.UsageError("Principal, rate, term and payment must all be non-zero")
    summary = summarize_schedule(entries)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, LoanParameters(principal, rate, term), monthly_payment, entries, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
    else:
        click.echo(format_summary(monthly_payment, summary))
        if len(entries) > max_rows:
            click.echo(f"Schedule has {len(entries)} rows; showing first {max_rows} rows.")
        click.echo(format_schedule(entries, max_rows=max_rows))


if __name__ == "__main__":
    cli()
