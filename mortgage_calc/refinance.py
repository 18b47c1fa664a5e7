"""Refinancing comparison.

Prices the outstanding balance under the current loan and under a proposed
replacement, then works out how long the closing costs take to recover and
whether the switch saves money overall.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Any, Mapping, Union

from .data_models import (
    CurrentLoan,
    CurrentLoanView,
    ProposedLoan,
    RefinanceComparison,
    RefinancedLoanView,
    RefinanceVerdict,
)
from .engine import compute_monthly_payment
from .errors import InvalidParameter, NOT_APPLICABLE
from .utils import require_non_negative, require_tenure, round2

logger = logging.getLogger(__name__)


def _current_loan(value: Union[CurrentLoan, Mapping[str, Any]]) -> CurrentLoan:
    if isinstance(value, CurrentLoan):
        data = {
            "balance": value.balance,
            "rate": value.annual_rate_percent,
            "remaining_years": value.remaining_years,
        }
    elif isinstance(value, Mapping):
        data = dict(value)
        if "annual_rate_percent" in data:
            data["rate"] = data.pop("annual_rate_percent")
    else:
        raise InvalidParameter("current", f"expected a mapping or CurrentLoan, got {value!r}")
    try:
        return CurrentLoan(
            balance=require_non_negative(data["balance"], "balance"),
            annual_rate_percent=require_non_negative(data["rate"], "rate"),
            remaining_years=require_tenure(data["remaining_years"], "remaining_years"),
        )
    except KeyError as exc:
        raise InvalidParameter(str(exc.args[0]), "required for the current loan") from exc


def _proposed_loan(value: Union[ProposedLoan, Mapping[str, Any]]) -> ProposedLoan:
    if isinstance(value, ProposedLoan):
        data = {
            "rate": value.annual_rate_percent,
            "tenure_years": value.tenure_years,
            "closing_costs": value.closing_costs,
        }
    elif isinstance(value, Mapping):
        data = dict(value)
        if "annual_rate_percent" in data:
            data["rate"] = data.pop("annual_rate_percent")
    else:
        raise InvalidParameter("proposed", f"expected a mapping or ProposedLoan, got {value!r}")
    try:
        return ProposedLoan(
            annual_rate_percent=require_non_negative(data["rate"], "rate"),
            tenure_years=require_tenure(data["tenure_years"]),
            closing_costs=require_non_negative(data.get("closing_costs", 0), "closing_costs"),
        )
    except KeyError as exc:
        raise InvalidParameter(str(exc.args[0]), "required for the proposed loan") from exc


def compare_refinancing(
    current: Union[CurrentLoan, Mapping[str, Any]],
    proposed: Union[ProposedLoan, Mapping[str, Any]],
) -> RefinanceComparison:
    """Compare keeping the current loan with refinancing its balance.

    Parameters
    ----------
    current: CurrentLoan or mapping
        ``balance``, ``rate`` (annual percent) and ``remaining_years``.
    proposed: ProposedLoan or mapping
        ``rate``, ``tenure_years`` and ``closing_costs``.

    Returns
    -------
    RefinanceComparison
        Both loans priced, plus the verdict. Break-even is the number of
        months of payment savings needed to recover the closing costs, or
        ``NOT_APPLICABLE`` when the new payment is not lower. Refinancing is
        worthwhile only when net savings are positive *and* break-even comes
        before the end of the new loan.
    """
    loan = _current_loan(current)
    offer = _proposed_loan(proposed)

    existing = compute_monthly_payment(loan.balance, loan.annual_rate_percent, loan.remaining_years)
    replacement = compute_monthly_payment(loan.balance, offer.annual_rate_percent, offer.tenure_years)

    monthly_difference = existing.monthly_payment - replacement.monthly_payment
    interest_difference = existing.total_interest - replacement.total_interest
    net_savings = interest_difference - offer.closing_costs
    new_tenure_months = offer.tenure_years * 12

    if monthly_difference > 0:
        break_even_months = int(math.ceil(offer.closing_costs / monthly_difference))
        break_even_years = round2(Decimal(break_even_months) / 12)
        worth = net_savings > 0 and break_even_months < new_tenure_months
    else:
        break_even_months = NOT_APPLICABLE
        break_even_years = NOT_APPLICABLE
        worth = False
        logger.warning(
            "refinancing at %s%% does not lower the monthly payment; no break-even",
            offer.annual_rate_percent,
        )

    return RefinanceComparison(
        current=CurrentLoanView(
            monthly_payment=existing.monthly_payment,
            total_interest=existing.total_interest,
            total_payment=existing.total_payment,
            remaining_months=loan.remaining_years * 12,
        ),
        refinanced=RefinancedLoanView(
            monthly_payment=replacement.monthly_payment,
            total_interest=replacement.total_interest,
            total_payment=round2(replacement.total_payment + offer.closing_costs),
            new_tenure_months=new_tenure_months,
            closing_costs=round2(offer.closing_costs),
        ),
        comparison=RefinanceVerdict(
            monthly_difference=round2(monthly_difference),
            total_interest_saved=round2(interest_difference),
            break_even_months=break_even_months,
            break_even_years=break_even_years,
            net_savings=round2(net_savings),
            worth_refinancing=worth,
        ),
    )
