"""Extra-payment simulation.

Replays a loan month by month with an additional fixed amount paid towards
principal every month and an optional one-off lump sum, and compares the
result with the unmodified loan.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from .data_models import ExtraPaymentResult, ExtraPaymentSavings, LoanOutcome, LoanTerms
from .engine import compute_monthly_payment
from .errors import NonAmortizing
from .utils import Number, require_non_negative, require_tenure, round2

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def simulate_extra_payments(
    loan: LoanTerms,
    extra_monthly: Number = 0,
    lump_sum: Number = 0,
    lump_sum_month: int = 1,
) -> ExtraPaymentResult:
    """Simulate paying a loan off early.

    Each month interest accrues on the outstanding balance and the regular
    installment plus ``extra_monthly`` is applied. In month ``lump_sum_month``
    the lump sum is taken off the balance at the start of the month, before
    that month's interest is charged. The last payment is cut down to exactly
    what is owed, so totals never include an overpayment.

    Parameters
    ----------
    loan: LoanTerms
        The loan as originally contracted.
    extra_monthly: number
        Additional principal paid every month (>= 0).
    lump_sum: number
        One-off additional payment (>= 0).
    lump_sum_month: int
        The 1-based month the lump sum is paid in.

    Raises
    ------
    InvalidParameter
        For negative amounts or a lump-sum month before month 1.
    NonAmortizing
        If a month's payment does not cover that month's interest, in which
        case the balance would never fall.
    """
    extra = require_non_negative(extra_monthly, "extra_monthly")
    lump = require_non_negative(lump_sum, "lump_sum")
    lump_sum_month = require_tenure(lump_sum_month, "lump_sum_month")

    baseline = compute_monthly_payment(loan.principal, loan.annual_rate_percent, loan.tenure_years)
    rate = loan.monthly_rate
    payment = baseline.monthly_payment

    balance = loan.principal
    month = 0
    total_interest = _ZERO
    total_paid = _ZERO

    while balance > 0:
        month += 1

        if month == lump_sum_month and lump > 0:
            applied = min(lump, balance)
            balance -= applied
            total_paid += applied
            if balance <= 0:
                break

        interest = balance * rate
        principal_reduction = (payment - interest) + extra
        if principal_reduction <= 0:
            raise NonAmortizing(
                f"month {month}: payment {payment + extra} does not cover interest "
                f"{round2(interest)} on balance {round2(balance)}"
            )

        total_interest += interest
        if principal_reduction >= balance:
            total_paid += balance + interest
            balance = _ZERO
        else:
            balance -= principal_reduction
            total_paid += payment + extra

    original_months = loan.total_months
    original = LoanOutcome(
        monthly_payment=baseline.monthly_payment,
        total_months=original_months,
        total_years=Decimal(loan.tenure_years),
        total_interest=baseline.total_interest,
        total_payment=baseline.total_payment,
    )
    with_extra = LoanOutcome(
        monthly_payment=round2(payment + extra),
        total_months=month,
        total_years=round2(Decimal(month) / 12),
        total_interest=round2(total_interest),
        total_payment=round2(total_paid),
    )
    months_saved = original_months - month
    savings = ExtraPaymentSavings(
        months_saved=months_saved,
        years_saved=round2(Decimal(months_saved) / 12),
        interest_saved=round2(baseline.total_interest - total_interest),
        total_saved=round2(baseline.total_payment - total_paid),
    )
    logger.debug(
        "extra payments of %s/month and %s in month %s: %s months, %s interest saved",
        extra,
        lump,
        lump_sum_month,
        month,
        savings.interest_saved,
    )
    return ExtraPaymentResult(original=original, with_extra_payments=with_extra, savings=savings)
