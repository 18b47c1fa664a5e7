"""Output helpers for the mortgage calculator.

This module renders results as plain text tables for the terminal and
serializes amortization schedules to CSV. Amounts are shown as ringgit
(``RM 1,234.56``) on screen and as plain decimal numbers in CSV.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from .data_models import (
    AffordabilityResult,
    AmortizationRow,
    ExtraPaymentResult,
    Financing,
    LegalFeeResult,
    LevyResult,
    PaymentSummary,
    RefinanceComparison,
    UpfrontCostSummary,
    YearlySummary,
)
from .errors import NOT_APPLICABLE
from .utils import format_currency

CSV_HEADER = ["Month", "Year", "Payment", "Principal", "Interest", "Balance", "Cumulative Interest"]


def schedule_to_csv(rows: Iterable[AmortizationRow]) -> str:
    """Serialize schedule rows as CSV text, one line per month."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.month,
                row.year,
                row.payment,
                row.principal,
                row.interest,
                row.balance,
                row.cumulative_interest,
            ]
        )
    return buffer.getvalue()


def print_payment_summary(summary: PaymentSummary, principal=None) -> None:
    """Print the monthly payment and lifetime totals of a loan."""
    print("Summary")
    print("-" * 72)
    if principal is not None:
        print(f"Loan amount        : {format_currency(principal)}")
    print(f"Monthly payment    : {format_currency(summary.monthly_payment)}")
    print(f"Total interest     : {format_currency(summary.total_interest)}")
    print(f"Total payment      : {format_currency(summary.total_payment)}")
    print(f"Interest / loan    : {summary.effective_rate_percent}%")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationRow]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Month", "Year", "Payment", "Principal", "Interest", "Balance", "CumInterest"]
    print("\t".join(headers))
    for row in schedule:
        print(
            "\t".join(
                [
                    str(row.month),
                    str(row.year),
                    f"{row.payment:.2f}",
                    f"{row.principal:.2f}",
                    f"{row.interest:.2f}",
                    f"{row.balance:.2f}",
                    f"{row.cumulative_interest:.2f}",
                ]
            )
        )


def print_yearly(years: Iterable[YearlySummary]) -> None:
    headers = ["Year", "Payment", "Principal", "Interest", "Balance", "CumInterest"]
    print("\t".join(headers))
    for year in years:
        print(
            "\t".join(
                [
                    str(year.year),
                    f"{year.payment:.2f}",
                    f"{year.principal:.2f}",
                    f"{year.interest:.2f}",
                    f"{year.balance:.2f}",
                    f"{year.cumulative_interest:.2f}",
                ]
            )
        )


def print_extra_payments(result: ExtraPaymentResult) -> None:
    """Print the original loan next to the loan with extra payments."""
    original = result.original
    extra = result.with_extra_payments
    savings = result.savings
    print("Extra payments")
    print("=" * 72)
    print(f"{'Metric':20s} {'Original':>17s} {'With extra':>17s}")
    print(
        f"{'Monthly payment':20s} {format_currency(original.monthly_payment):>17s} "
        f"{format_currency(extra.monthly_payment):>17s}"
    )
    print(f"{'Months':20s} {original.total_months:>17d} {extra.total_months:>17d}")
    print(
        f"{'Total interest':20s} {format_currency(original.total_interest):>17s} "
        f"{format_currency(extra.total_interest):>17s}"
    )
    print(
        f"{'Total payment':20s} {format_currency(original.total_payment):>17s} "
        f"{format_currency(extra.total_payment):>17s}"
    )
    print("-" * 72)
    print(f"Term reduction     : {savings.months_saved} months ({savings.years_saved} years)")
    print(f"Interest saved     : {format_currency(savings.interest_saved)}")
    print(f"Total saved        : {format_currency(savings.total_saved)}")
    print("=" * 72)


def print_refinance(result: RefinanceComparison) -> None:
    current = result.current
    new = result.refinanced
    verdict = result.comparison
    print("Refinancing")
    print("=" * 72)
    print(f"{'Metric':20s} {'Current':>17s} {'Refinanced':>17s}")
    print(
        f"{'Monthly payment':20s} {format_currency(current.monthly_payment):>17s} "
        f"{format_currency(new.monthly_payment):>17s}"
    )
    print(
        f"{'Total interest':20s} {format_currency(current.total_interest):>17s} "
        f"{format_currency(new.total_interest):>17s}"
    )
    print(f"{'Months':20s} {current.remaining_months:>17d} {new.new_tenure_months:>17d}")
    print("-" * 72)
    print(f"Monthly difference : {format_currency(verdict.monthly_difference)}")
    print(f"Interest saved     : {format_currency(verdict.total_interest_saved)}")
    print(f"Closing costs      : {format_currency(new.closing_costs)}")
    if verdict.break_even_months is NOT_APPLICABLE:
        print(f"Break-even         : {verdict.break_even_months}")
    else:
        print(f"Break-even         : {verdict.break_even_months} months ({verdict.break_even_years} years)")
    print(f"Net savings        : {format_currency(verdict.net_savings)}")
    print(f"Worth refinancing  : {'Yes' if verdict.worth_refinancing else 'No'}")
    print("=" * 72)


def print_affordability(result: AffordabilityResult) -> None:
    print("Affordability")
    print("-" * 72)
    if not result.can_afford:
        print(result.message or "Not affordable")
    print(f"Gross income       : {format_currency(result.breakdown.gross_income)}")
    print(f"Commitments        : {format_currency(result.breakdown.existing_commitments)}")
    print(f"DSR (current/max)  : {result.current_dsr_percent}% / {result.max_dsr_percent}%")
    print(f"Max installment    : {format_currency(result.max_monthly_payment)}")
    print(f"Max loan           : {format_currency(result.max_loan_amount)}")
    print(f"Est. property price: {format_currency(result.estimated_property_price)}")
    print("-" * 72)


def _print_breakdown(breakdown) -> None:
    for entry in breakdown:
        print(
            f"  {entry.range_label:32s} {entry.rate_label:>6s} "
            f"{format_currency(entry.taxable_amount):>17s} {format_currency(entry.levy_amount):>14s}"
        )


def print_levy(title: str, result: LevyResult) -> None:
    print(title)
    _print_breakdown(result.breakdown)
    print(f"  Gross              : {format_currency(result.gross_amount)}")
    if result.exemption_amount:
        print(f"  Exemption          : {format_currency(result.exemption_amount)} ({result.exemption_note})")
    print(f"  Net                : {format_currency(result.net_amount)}")


def print_legal_fees(title: str, result: LegalFeeResult) -> None:
    print(title)
    _print_breakdown(result.breakdown)
    print(f"  Scale fee          : {format_currency(result.base_fee)}")
    for name, amount in result.additional_fees.items():
        print(f"  {name.replace('_', ' ').capitalize():19s}: {format_currency(amount)}")
    print(f"  Total              : {format_currency(result.total_fees)}")


def print_upfront_costs(result: UpfrontCostSummary) -> None:
    print("Upfront costs")
    print("=" * 72)
    print(f"Property price     : {format_currency(result.property_price)}")
    print(f"Loan amount        : {format_currency(result.loan_amount)}")
    print(f"Down payment       : {format_currency(result.down_payment)} ({result.down_payment_percent}%)")
    print("-" * 72)
    print_levy("Stamp duty (transfer)", result.transfer_duty)
    print_levy("Stamp duty (loan agreement)", result.loan_duty)
    print_legal_fees("Legal fees (SPA)", result.legal_fees_spa)
    print_legal_fees("Legal fees (loan)", result.legal_fees_loan)
    print(f"Valuation fee      : {format_currency(result.valuation_fee)}")
    print("-" * 72)
    view = result.summary
    print(f"Stamp duty         : {format_currency(view.stamp_duty)}")
    print(f"Legal fees         : {format_currency(view.legal_fees)}")
    print(f"Total upfront      : {format_currency(view.total)}")
    print("=" * 72)


def print_financing(result: Financing) -> None:
    """Print any financing variant using its shared fields."""
    print(result.label)
    print("-" * 72)
    print(f"Monthly payment    : {format_currency(result.monthly_payment)}")
    print(f"Total payment      : {format_currency(result.total_payment)}")
    print(f"Cost of borrowing  : {format_currency(result.cost_of_borrowing)}")
    print(f"Tenure             : {result.tenure_years} years ({result.total_months} months)")
    note = getattr(result, "note", "")
    if note:
        print(f"Note               : {note}")
    print("-" * 72)
