"""Upfront costs of buying a property with a housing loan."""

from __future__ import annotations

import logging
from decimal import Decimal

from .data_models import UpfrontCostSummary, UpfrontCostView
from .errors import InvalidParameter
from .levy import compute_legal_fees, compute_loan_stamp_duty, compute_transfer_stamp_duty
from .reference_data import VALUATION_FEE_MINIMUM, VALUATION_FEE_RATE
from .utils import Number, require_non_negative, require_positive, round2

logger = logging.getLogger(__name__)


def valuation_fee(property_price: Number) -> Decimal:
    """Estimated valuation fee: a percentage of the price, with a floor."""
    price = require_non_negative(property_price, "property_price")
    return round2(max(VALUATION_FEE_MINIMUM, price * VALUATION_FEE_RATE))


def compute_upfront_costs(
    property_price: Number,
    loan_amount: Number,
    is_first_time_buyer: bool = False,
    apply_campaign_exemption: bool = False,
) -> UpfrontCostSummary:
    """Total cash needed up front: down payment, stamp duties, legal and valuation fees.

    Legal fees are charged twice, once on the sale and purchase agreement
    (on the property price) and once on the loan agreement (on the loan
    amount).

    Raises
    ------
    InvalidParameter
        If the loan is larger than the property price.
    """
    price = require_positive(property_price, "property_price")
    loan = require_non_negative(loan_amount, "loan_amount")
    if loan > price:
        raise InvalidParameter("loan_amount", f"{loan} exceeds the property price {price}")

    down_payment = price - loan
    transfer_duty = compute_transfer_stamp_duty(price, is_first_time_buyer, apply_campaign_exemption)
    loan_duty = compute_loan_stamp_duty(loan, is_first_time_buyer, price)
    legal_spa = compute_legal_fees(price)
    legal_loan = compute_legal_fees(loan)
    valuation = valuation_fee(price)

    stamp_duty = transfer_duty.net_amount + loan_duty.net_amount
    legal_fees = legal_spa.total_fees + legal_loan.total_fees
    total = down_payment + stamp_duty + legal_fees + valuation
    logger.debug("upfront costs for %s with loan %s: %s", price, loan, total)

    return UpfrontCostSummary(
        property_price=round2(price),
        loan_amount=round2(loan),
        down_payment=round2(down_payment),
        down_payment_percent=round2(down_payment / price * 100),
        transfer_duty=transfer_duty,
        loan_duty=loan_duty,
        legal_fees_spa=legal_spa,
        legal_fees_loan=legal_loan,
        valuation_fee=valuation,
        total_costs=round2(total),
        summary=UpfrontCostView(
            down_payment=round2(down_payment),
            stamp_duty=round2(stamp_duty),
            legal_fees=round2(legal_fees),
            valuation_fee=valuation,
            total=round2(total),
        ),
    )
