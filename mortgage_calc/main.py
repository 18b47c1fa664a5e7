"""Command‑line interface for the mortgage calculator.

This module uses the ``click`` library to implement a multi‑command
interface over the calculation engine: monthly payments and schedules, extra
payments, refinancing, affordability, upfront purchase costs and Islamic
financing. Schedules can be exported to CSV or JSON files.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import click

from .affordability import compute_affordability, max_tenure_for_age
from .data_models import AmortizationRow, LoanTerms, PaymentSummary
from .engine import aggregate_yearly, compute_monthly_payment, generate_amortization_schedule
from .errors import MortgageCalcError
from .extra_payments import simulate_extra_payments
from .formatter import (
    print_affordability,
    print_extra_payments,
    print_financing,
    print_payment_summary,
    print_refinance,
    print_schedule,
    print_upfront_costs,
    print_yearly,
    schedule_to_csv,
)
from .islamic import FINANCING_KINDS, compute_financing
from .reference_data import BANK_RATES, banks_for
from .refinance import compare_refinancing
from .upfront import compute_upfront_costs
from .utils import as_serializable, format_currency, to_decimal

MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000", "500,000") and shorthand with ``k``/``m``
    suffixes (e.g., "500k" meaning 500_000).
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return to_decimal(value) * factor
    except MortgageCalcError:
        raise click.BadParameter(f"Invalid amount: {value}")


class AmountType(click.ParamType):
    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        return parse_amount(str(value))


AMOUNT = AmountType()


def _calculate(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call into the engine, turning calculator errors into CLI errors."""
    try:
        return func(*args, **kwargs)
    except MortgageCalcError as exc:
        raise click.ClickException(str(exc)) from exc


def export_to_json(path: Path, schedule: List[AmortizationRow], summary: PaymentSummary) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": as_serializable(summary), "schedule": as_serializable(schedule)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, schedule: List[AmortizationRow]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        f.write(schedule_to_csv(schedule))


def loan_options(func: Callable) -> Callable:
    func = click.option("--tenure", "-t", "tenure", required=True, type=int, help="Loan tenure in years")(func)
    func = click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")(func)
    func = click.option("--principal", "-p", "principal", required=True, type=AMOUNT, help="Loan amount, e.g. 500k")(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging from the calculation engine")
def cli(verbose: bool) -> None:
    """A command‑line Malaysian mortgage calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
def payment(principal: Decimal, rate: float, tenure: int) -> None:
    """Compute the monthly payment and lifetime totals of a loan."""
    summary = _calculate(compute_monthly_payment, principal, rate, tenure)
    print_payment_summary(summary, principal)


@cli.command()
@loan_options
@click.option("--yearly", is_flag=True, help="Aggregate the schedule by year")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(principal: Decimal, rate: float, tenure: int, yearly: bool, output: Optional[str]) -> None:
    """Compute and print the full amortization schedule."""
    summary = _calculate(compute_monthly_payment, principal, rate, tenure)
    rows = _calculate(generate_amortization_schedule, principal, rate, tenure).rows()
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, rows, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return

    print_payment_summary(summary, principal)
    if yearly:
        print_yearly(aggregate_yearly(rows))
    elif len(rows) > MAX_PRINTED_ROWS:
        # Limit schedule length printed to avoid flooding the terminal
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        print_schedule(rows[:MAX_PRINTED_ROWS])
    else:
        print_schedule(rows)


@cli.command()
@loan_options
@click.option("--extra-monthly", "extra_monthly", type=AMOUNT, default="0", help="Extra principal paid every month")
@click.option("--lump-sum", "lump_sum", type=AMOUNT, default="0", help="One-off extra payment")
@click.option("--lump-sum-month", "lump_sum_month", type=int, default=1, show_default=True, help="Month the lump sum is paid in")
def extra(
    principal: Decimal,
    rate: float,
    tenure: int,
    extra_monthly: Decimal,
    lump_sum: Decimal,
    lump_sum_month: int,
) -> None:
    """Show how extra payments shorten the loan and save interest."""
    loan = _calculate(LoanTerms, principal, rate, tenure)
    result = _calculate(simulate_extra_payments, loan, extra_monthly, lump_sum, lump_sum_month)
    print_extra_payments(result)


@cli.command()
@click.option("--balance", "balance", required=True, type=AMOUNT, help="Outstanding balance")
@click.option("--rate", "rate", required=True, type=float, help="Current annual rate (percent)")
@click.option("--remaining-years", "remaining_years", required=True, type=int, help="Years left on the current loan")
@click.option("--new-rate", "new_rate", required=True, type=float, help="Proposed annual rate (percent)")
@click.option("--new-tenure", "new_tenure", required=True, type=int, help="Proposed tenure in years")
@click.option("--closing-costs", "closing_costs", type=AMOUNT, default="0", help="One-off refinancing costs")
def refinance(
    balance: Decimal,
    rate: float,
    remaining_years: int,
    new_rate: float,
    new_tenure: int,
    closing_costs: Decimal,
) -> None:
    """Compare the current loan with a refinancing offer."""
    result = _calculate(
        compare_refinancing,
        {"balance": balance, "rate": rate, "remaining_years": remaining_years},
        {"rate": new_rate, "tenure_years": new_tenure, "closing_costs": closing_costs},
    )
    print_refinance(result)


@cli.command()
@click.option("--income", "income", required=True, type=AMOUNT, help="Gross monthly income")
@click.option("--commitments", "commitments", type=AMOUNT, default="0", help="Existing monthly debt repayments")
@click.option("--dsr", "dsr", type=float, help="DSR limit in percent (default depends on income)")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", type=int, help="Loan tenure in years")
@click.option("--age", "age", type=int, help="Borrower age; caps the tenure at the maturity age")
@click.option(
    "--employment",
    type=click.Choice(["employed", "self_employed"]),
    default="employed",
    show_default=True,
)
def afford(
    income: Decimal,
    commitments: Decimal,
    dsr: Optional[float],
    rate: float,
    tenure: Optional[int],
    age: Optional[int],
    employment: str,
) -> None:
    """Estimate the largest loan the income can service."""
    if tenure is None and age is None:
        raise click.UsageError("Provide --tenure, --age, or both")
    if age is not None:
        age_limit = _calculate(max_tenure_for_age, age, employment)
        if age_limit <= 0:
            raise click.ClickException(f"No tenure available at age {age} ({employment})")
        tenure = age_limit if tenure is None else min(tenure, age_limit)
        click.echo(f"Tenure used: {tenure} years")
    dsr_limit = None if dsr is None else Decimal(str(dsr)) / 100
    result = _calculate(compute_affordability, income, commitments, dsr_limit, rate, tenure)
    print_affordability(result)


@cli.command()
@click.option("--price", "price", required=True, type=AMOUNT, help="Property price")
@click.option("--loan", "loan", type=AMOUNT, help="Loan amount (default: 90% of price)")
@click.option("--first-time/--not-first-time", "first_time", default=False, help="First-time home buyer")
@click.option("--campaign", is_flag=True, help="Apply the Home Ownership Campaign exemption")
@click.option("--output", "output", type=str, help="Write the breakdown to a .json file")
def costs(price: Decimal, loan: Optional[Decimal], first_time: bool, campaign: bool, output: Optional[str]) -> None:
    """Compute stamp duty, legal fees and other upfront costs."""
    if loan is None:
        loan = price * Decimal("0.9")
    result = _calculate(compute_upfront_costs, price, loan, first_time, campaign)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Cost export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump(as_serializable(result), f, indent=2)
        click.echo(f"Costs exported to {path}")
    else:
        print_upfront_costs(result)


@cli.command()
@click.option("--type", "kind", type=click.Choice(list(FINANCING_KINDS)), default="musharakah_mutanaqisah", show_default=True)
@click.option("--amount", "-a", "amount", required=True, type=AMOUNT, help="Financing amount (property value for musharakah)")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual profit/rental rate (percent)")
@click.option("--tenure", "-t", "tenure", required=True, type=int, help="Tenure in years")
@click.option("--contribution", "contribution", type=AMOUNT, help="Customer's initial share (musharakah only)")
def islamic(kind: str, amount: Decimal, rate: float, tenure: int, contribution: Optional[Decimal]) -> None:
    """Price Islamic (or conventional) home financing."""
    result = _calculate(compute_financing, kind, amount, rate, tenure, contribution)
    print_financing(result)


@cli.command()
@click.option("--type", "loan_type", type=click.Choice(sorted(BANK_RATES)), default="conventional", show_default=True)
@click.option("--principal", "-p", "principal", type=AMOUNT, help="Show each bank's payment for this loan")
@click.option("--tenure", "-t", "tenure", type=int, default=30, show_default=True)
def banks(loan_type: str, principal: Optional[Decimal], tenure: int) -> None:
    """List indicative bank rates, lowest first."""
    rows: List[Dict[str, str]] = []
    for bank in banks_for(loan_type):
        row = {"name": bank.name, "rate": f"{bank.rate}%", "product": bank.product}
        if principal is not None:
            summary = _calculate(compute_monthly_payment, principal, bank.rate, tenure)
            row["payment"] = format_currency(summary.monthly_payment)
        rows.append(row)
    for row in rows:
        line = f"{row['name']:22s} {row['rate']:>7s}"
        if "payment" in row:
            line += f" {row['payment']:>14s}"
        if row["product"]:
            line += f"  {row['product']}"
        click.echo(line)


if __name__ == "__main__":
    cli()
