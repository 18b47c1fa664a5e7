"""Affordability checks based on the debt service ratio (DSR).

Banks cap total monthly debt repayments at a fraction of gross monthly income.
Whatever the applicant's existing commitments leave under that cap is the
largest installment a new housing loan may have, which the annuity engine
turns back into a maximum loan amount.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from .data_models import AffordabilityBreakdown, AffordabilityResult
from .engine import solve_max_principal
from .errors import InvalidParameter
from .reference_data import (
    DEFAULT_MARGIN_OF_FINANCE,
    DSR_CONFIG,
    MAX_AGE_AT_MATURITY,
    MAX_BANK_TENURE_YEARS,
)
from .utils import Number, require_non_negative, require_positive, require_tenure, round2

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def dsr_limit_for_income(monthly_income: Number) -> Decimal:
    """Return the DSR ceiling that applies to ``monthly_income``.

    Incomes at or above the high-income threshold qualify for the higher
    limit.
    """
    income = require_positive(monthly_income, "monthly_income")
    if income >= DSR_CONFIG.high_income_threshold:
        return DSR_CONFIG.max_limit
    return DSR_CONFIG.default_limit


def max_tenure_for_age(
    age: int,
    employment: str = "employed",
    bank_max_tenure: int = MAX_BANK_TENURE_YEARS,
) -> int:
    """Longest tenure a borrower of ``age`` can take.

    The loan must mature by the maximum age for the employment type and may
    not exceed the bank's own maximum tenure. Returns 0 when the borrower is
    already at or past the maturity age.
    """
    try:
        max_age = MAX_AGE_AT_MATURITY[employment]
    except KeyError:
        raise InvalidParameter(
            "employment", f"expected one of {sorted(MAX_AGE_AT_MATURITY)}, got {employment!r}"
        ) from None
    age_years = require_tenure(age, "age")
    return max(0, min(bank_max_tenure, max_age - age_years))


def compute_affordability(
    monthly_income: Number,
    existing_commitments: Number,
    dsr_limit: Optional[Number],
    annual_rate_percent: Number,
    tenure_years: int,
    margin_of_finance: Number = DEFAULT_MARGIN_OF_FINANCE,
) -> AffordabilityResult:
    """Work out the largest loan an applicant can service.

    Parameters
    ----------
    monthly_income: number
        Gross monthly income (> 0).
    existing_commitments: number
        Monthly repayments on existing debts (>= 0).
    dsr_limit: number or None
        DSR ceiling as a fraction, e.g. ``0.6``. ``None`` picks the limit
        from :func:`dsr_limit_for_income`.
    annual_rate_percent, tenure_years:
        Terms of the prospective housing loan.
    margin_of_finance: number
        Loan-to-value ratio used to estimate the property price the maximum
        loan could buy.

    Returns
    -------
    AffordabilityResult
        When existing commitments already use up the DSR allowance,
        ``can_afford`` is False and the maximum loan is 0.
    """
    income = require_positive(monthly_income, "monthly_income")
    commitments = require_non_negative(existing_commitments, "existing_commitments")
    limit = dsr_limit_for_income(income) if dsr_limit is None else require_positive(dsr_limit, "dsr_limit")
    if limit > 1:
        raise InvalidParameter("dsr_limit", f"must be a fraction such as 0.6, got {limit}")
    rate_percent = require_non_negative(annual_rate_percent, "annual_rate_percent")
    years = require_tenure(tenure_years)
    margin = require_positive(margin_of_finance, "margin_of_finance")

    max_total_debt = income * limit
    available = max_total_debt - commitments
    current_dsr = round2(commitments / income * 100)
    max_dsr = round2(limit * 100)

    if available <= 0:
        logger.debug("commitments %s exceed DSR allowance %s", commitments, max_total_debt)
        return AffordabilityResult(
            can_afford=False,
            max_loan_amount=round2(_ZERO),
            max_monthly_payment=round2(_ZERO),
            current_dsr_percent=current_dsr,
            max_dsr_percent=max_dsr,
            available_dsr_percent=round2(_ZERO),
            estimated_property_price=round2(_ZERO),
            breakdown=AffordabilityBreakdown(
                gross_income=round2(income),
                max_total_debt=round2(max_total_debt),
                existing_commitments=round2(commitments),
                available_for_mortgage=round2(_ZERO),
            ),
            message="Existing commitments exceed DSR limit",
        )

    max_loan = solve_max_principal(available, rate_percent, years)

    return AffordabilityResult(
        can_afford=True,
        max_loan_amount=max_loan,
        max_monthly_payment=round2(available),
        current_dsr_percent=current_dsr,
        max_dsr_percent=max_dsr,
        available_dsr_percent=round2(available / income * 100),
        estimated_property_price=round2(max_loan / margin),
        breakdown=AffordabilityBreakdown(
            gross_income=round2(income),
            max_total_debt=round2(max_total_debt),
            existing_commitments=round2(commitments),
            available_for_mortgage=round2(available),
        ),
    )
