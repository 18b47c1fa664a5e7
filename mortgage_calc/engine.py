"""Core annuity engine for the mortgage calculator.

This module implements the fixed-rate amortizing loan maths that the rest of
the package builds on: the level monthly payment, the month-by-month
amortization schedule, the reverse solve from an affordable payment back to a
principal, and a yearly roll-up of the schedule.

Balances are carried at full ``Decimal`` precision from month to month; only
the values placed into result records are rounded to cents, so rounding error
does not compound over a 35-year schedule.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext
from typing import Dict, Iterable, Iterator, List

from .data_models import AmortizationRow, LoanTerms, PaymentSummary, YearlySummary
from .utils import Number, require_non_negative, require_tenure, round2

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_RESIDUAL = Decimal("0.000001")


def _calculate_annuity_payment(principal: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return principal / Decimal(term)
    factor = (1 + rate_per_month) ** term
    return principal * (rate_per_month * factor) / (factor - 1)


def _present_value(payment: Decimal, rate_per_month: Decimal, term: int) -> Decimal:
    """Inverse of :func:`_calculate_annuity_payment`.

        principal = PMT * ((1 + i)^n - 1) / (i * (1 + i)^n)
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate_per_month == 0:
        return payment * Decimal(term)
    factor = (1 + rate_per_month) ** term
    return payment * (factor - 1) / (rate_per_month * factor)


def compute_monthly_payment(
    principal: Number, annual_rate_percent: Number, tenure_years: int
) -> PaymentSummary:
    """Compute the level monthly payment and lifetime totals of a loan.

    Parameters
    ----------
    principal: number
        Loan amount in ringgit (>= 0).
    annual_rate_percent: number
        Nominal annual rate in percent, e.g. ``4.1``.
    tenure_years: int
        Loan tenure in whole years (> 0).

    Returns
    -------
    PaymentSummary
        Payment, total repaid and total interest rounded to cents, and the
        effective rate (total interest as a percentage of principal). A zero
        principal yields an effective rate of 0.

    Raises
    ------
    InvalidParameter
        If any input is negative, non-numeric, or the tenure is not a whole
        positive number of years.
    """
    terms = LoanTerms(principal, annual_rate_percent, tenure_years)
    rate = terms.monthly_rate
    months = terms.total_months

    if rate == 0:
        summary = PaymentSummary(
            monthly_payment=round2(terms.principal / Decimal(months)),
            total_payment=round2(terms.principal),
            total_interest=round2(_ZERO),
            effective_rate_percent=round2(_ZERO),
        )
    else:
        payment = _calculate_annuity_payment(terms.principal, rate, months)
        total_payment = payment * Decimal(months)
        total_interest = total_payment - terms.principal
        if terms.principal > 0:
            effective = total_interest / terms.principal * Decimal(100)
        else:
            effective = _ZERO
        summary = PaymentSummary(
            monthly_payment=round2(payment),
            total_payment=round2(total_payment),
            total_interest=round2(total_interest),
            effective_rate_percent=round2(effective),
        )
    logger.debug(
        "payment for %s at %s%% over %s years: %s",
        terms.principal,
        terms.annual_rate_percent,
        terms.tenure_years,
        summary.monthly_payment,
    )
    return summary


class AmortizationSchedule:
    """A lazily generated amortization schedule.

    Iterating yields one :class:`AmortizationRow` per month, in order. The
    schedule can be iterated any number of times; each pass recomputes the
    rows from the loan terms and yields identical values. ``len()`` is the
    number of months in the tenure.

    The monthly payment is the installment quoted by
    :func:`compute_monthly_payment`, rounded to cents. The final month pays
    off whatever balance remains, so the last row always ends at ``0.00``.
    """

    def __init__(self, terms: LoanTerms) -> None:
        self.terms = terms
        self.monthly_payment = compute_monthly_payment(
            terms.principal, terms.annual_rate_percent, terms.tenure_years
        ).monthly_payment

    def __len__(self) -> int:
        return self.terms.total_months

    def __iter__(self) -> Iterator[AmortizationRow]:
        rate = self.terms.monthly_rate
        months = self.terms.total_months
        balance = self.terms.principal
        cumulative_interest = _ZERO
        cumulative_principal = _ZERO

        for month in range(1, months + 1):
            interest = balance * rate
            payment = self.monthly_payment
            principal_payment = payment - interest
            if month == months or principal_payment > balance:
                # settle the residual so the schedule closes exactly
                principal_payment = balance
                payment = principal_payment + interest
            balance = max(_ZERO, balance - principal_payment)
            if balance < _RESIDUAL:
                balance = _ZERO

            cumulative_interest += interest
            cumulative_principal += principal_payment

            yield AmortizationRow(
                month=month,
                year=(month + 11) // 12,
                payment=round2(payment),
                principal=round2(principal_payment),
                interest=round2(interest),
                balance=round2(balance),
                cumulative_interest=round2(cumulative_interest),
                cumulative_principal=round2(cumulative_principal),
            )

    def rows(self) -> List[AmortizationRow]:
        return list(self)


def generate_amortization_schedule(
    principal: Number, annual_rate_percent: Number, tenure_years: int
) -> AmortizationSchedule:
    """Return the month-by-month amortization schedule of a loan.

    The result is a restartable iterable of exactly ``tenure_years * 12``
    rows; see :class:`AmortizationSchedule`.
    """
    terms = LoanTerms(principal, annual_rate_percent, tenure_years)
    logger.debug("building %s-month schedule for %s", terms.total_months, terms.principal)
    return AmortizationSchedule(terms)


def solve_max_principal(
    max_monthly_payment: Number, annual_rate_percent: Number, tenure_years: int
) -> Decimal:
    """Return the largest principal that ``max_monthly_payment`` can repay.

    This is the inverse of the annuity formula, rounded to cents.
    """
    payment = require_non_negative(max_monthly_payment, "max_monthly_payment")
    rate_percent = require_non_negative(annual_rate_percent, "annual_rate_percent")
    years = require_tenure(tenure_years)
    rate = rate_percent / Decimal(100) / Decimal(12)
    return round2(_present_value(payment, rate, years * 12))


def aggregate_yearly(rows: Iterable[AmortizationRow]) -> List[YearlySummary]:
    """Roll monthly rows up into one summary per loan year.

    Payment, principal and interest are summed; balance and cumulative
    interest are taken from the year's last month.
    """
    totals: Dict[int, Dict[str, Decimal]] = {}
    for row in rows:
        year = totals.setdefault(
            row.year,
            {"payment": _ZERO, "principal": _ZERO, "interest": _ZERO},
        )
        year["payment"] += row.payment
        year["principal"] += row.principal
        year["interest"] += row.interest
        year["balance"] = row.balance
        year["cumulative_interest"] = row.cumulative_interest
    return [
        YearlySummary(
            year=number,
            payment=round2(values["payment"]),
            principal=round2(values["principal"]),
            interest=round2(values["interest"]),
            balance=values["balance"],
            cumulative_interest=values["cumulative_interest"],
        )
        for number, values in sorted(totals.items())
    ]

