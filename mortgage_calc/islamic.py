"""Financing variants: conventional, Murabahah and Musharakah Mutanaqisah.

Each variant returns its own result type (see :mod:`.data_models`), and all
three expose ``cost_of_borrowing`` so display code can treat them alike:
total interest, total profit and total rental respectively.

* Murabahah (BBA): the bank sells the property to the customer at cost plus
  a profit fixed at signing. The profit is simple, not compounding, and the
  installment is flat.
* Musharakah Mutanaqisah: a diminishing partnership. The installment is the
  annuity payment on the bank's share; everything above that share is rental.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from .data_models import (
    ConventionalFinancing,
    Financing,
    LoanTerms,
    MurabahahFinancing,
    MusharakahFinancing,
)
from .engine import _calculate_annuity_payment, compute_monthly_payment
from .errors import InvalidParameter
from .utils import Number, require_non_negative, require_tenure, round2

logger = logging.getLogger(__name__)


def compute_conventional(
    principal: Number, annual_rate_percent: Number, tenure_years: int
) -> ConventionalFinancing:
    terms = LoanTerms(principal, annual_rate_percent, tenure_years)
    summary = compute_monthly_payment(terms.principal, terms.annual_rate_percent, terms.tenure_years)
    return ConventionalFinancing(
        principal=round2(terms.principal),
        annual_rate_percent=terms.annual_rate_percent,
        monthly_payment=summary.monthly_payment,
        total_payment=summary.total_payment,
        total_interest=summary.total_interest,
        effective_rate_percent=summary.effective_rate_percent,
        tenure_years=terms.tenure_years,
        total_months=terms.total_months,
    )


def compute_murabahah(
    principal: Number, profit_rate_percent: Number, tenure_years: int
) -> MurabahahFinancing:
    """Fixed-markup financing: ``profit = principal * rate * years``."""
    amount = require_non_negative(principal, "principal")
    rate = require_non_negative(profit_rate_percent, "profit_rate_percent")
    years = require_tenure(tenure_years)
    months = years * 12

    total_profit = amount * (rate / Decimal(100)) * Decimal(years)
    selling_price = amount + total_profit
    logger.debug("murabahah selling price for %s over %s years: %s", amount, years, selling_price)
    return MurabahahFinancing(
        principal=round2(amount),
        profit_rate_percent=rate,
        total_profit=round2(total_profit),
        selling_price=round2(selling_price),
        monthly_payment=round2(selling_price / Decimal(months)),
        tenure_years=years,
        total_months=months,
    )


def compute_musharakah_mutanaqisah(
    property_value: Number,
    customer_contribution: Number,
    rental_rate_percent: Number,
    tenure_years: int,
) -> MusharakahFinancing:
    """Diminishing-partnership financing on the bank's share of the property."""
    value = require_non_negative(property_value, "property_value")
    contribution = require_non_negative(customer_contribution, "customer_contribution")
    if contribution > value:
        raise InvalidParameter(
            "customer_contribution", f"{contribution} exceeds the property value {value}"
        )
    rate_percent = require_non_negative(rental_rate_percent, "rental_rate_percent")
    years = require_tenure(tenure_years)
    months = years * 12

    bank_share = value - contribution
    payment = _calculate_annuity_payment(bank_share, rate_percent / Decimal(100) / Decimal(12), months)
    total_payment = payment * Decimal(months)
    return MusharakahFinancing(
        property_value=round2(value),
        customer_initial_share=round2(contribution),
        bank_share=round2(bank_share),
        rental_rate_percent=rate_percent,
        monthly_payment=round2(payment),
        total_payment=round2(total_payment),
        total_rental=round2(total_payment - bank_share),
        tenure_years=years,
        total_months=months,
    )


FINANCING_KINDS = (
    ConventionalFinancing.kind,
    MurabahahFinancing.kind,
    MusharakahFinancing.kind,
)


def compute_financing(
    kind: str,
    amount: Number,
    annual_rate_percent: Number,
    tenure_years: int,
    customer_contribution: Any = None,
) -> Financing:
    """Price ``amount`` under the financing variant named by ``kind``.

    For ``musharakah_mutanaqisah`` ``amount`` is the property value and
    ``customer_contribution`` the customer's initial share (defaults to 10% of
    the property value). For the other variants ``amount`` is the financed
    principal.
    """
    if kind == ConventionalFinancing.kind:
        return compute_conventional(amount, annual_rate_percent, tenure_years)
    if kind == MurabahahFinancing.kind:
        return compute_murabahah(amount, annual_rate_percent, tenure_years)
    if kind == MusharakahFinancing.kind:
        value = require_non_negative(amount, "property_value")
        if customer_contribution is None:
            customer_contribution = value * Decimal("0.1")
        return compute_musharakah_mutanaqisah(value, customer_contribution, annual_rate_percent, tenure_years)
    raise InvalidParameter("kind", f"expected one of {', '.join(FINANCING_KINDS)}, got {kind!r}")
