"""Tiered levies: stamp duty and legal fees.

A progressive levy charges each band of the base amount at that band's rate.
:func:`compute_tiered_levy` walks a validated :class:`TierTable` and returns
the gross levy with a per-band breakdown; the statutory calculators on top of
it add their own exemption rules:

* transfer stamp duty (memorandum of transfer) on the property price, with a
  first-time-buyer exemption and a Home Ownership Campaign exemption;
* loan agreement stamp duty on the loan amount, where the first-time-buyer
  exemption only covers the first RM500,000 of the loan;
* legal fees on the scale, plus fixed disbursement-type fees.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .data_models import LegalFeeResult, LevyResult, TierBreakdown, TierTable
from .reference_data import (
    LEGAL_ADDITIONAL_FEES,
    LEGAL_FEE_TIERS,
    LOAN_FIRST_TIME_BUYER,
    LOAN_STAMP_DUTY_TIERS,
    MOT_CAMPAIGN_EXEMPTION,
    MOT_FIRST_TIME_BUYER,
    MOT_STAMP_DUTY_TIERS,
    ExemptionBand,
)
from .utils import Number, format_number, format_percent, require_non_negative, round2

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def build_tier_table(rows: Iterable[Tuple[Any, Any, Any]], name: str = "tier table") -> TierTable:
    """Build and validate a tier table from ``(lower, upper, rate)`` rows.

    ``upper`` is ``None`` for the open-ended top band. Raises
    ``ConfigurationError`` if the bands are not contiguous from 0 or the top
    band is bounded.
    """
    return TierTable.from_rows(rows, name=name)


def _range_label(lower: Decimal, upper: Optional[Decimal]) -> str:
    top = "∞" if upper is None else format_number(upper, decimals=0)
    return f"RM {format_number(lower, decimals=0)} - RM {top}"


def _gross_levy(base: Decimal, tier_table: TierTable) -> Tuple[Decimal, List[TierBreakdown]]:
    levy = _ZERO
    remaining = base
    breakdown: List[TierBreakdown] = []
    for tier in tier_table:
        if remaining <= 0:
            break
        width = tier.width
        taxable = remaining if width is None else min(remaining, width)
        tier_levy = taxable * tier.rate
        levy += tier_levy
        breakdown.append(
            TierBreakdown(
                range_label=_range_label(tier.lower_bound, tier.upper_bound),
                rate_label=format_percent(tier.rate),
                rate=tier.rate,
                taxable_amount=round2(taxable),
                levy_amount=round2(tier_levy),
            )
        )
        remaining -= taxable
    return levy, breakdown


def compute_tiered_levy(base_amount: Number, tier_table: TierTable) -> LevyResult:
    """Compute the gross progressive levy on ``base_amount``.

    No exemption is applied: the exemption amount is 0 and the net amount
    equals the gross amount.
    """
    base = require_non_negative(base_amount, "base_amount")
    levy, breakdown = _gross_levy(base, tier_table)
    gross = round2(levy)
    return LevyResult(
        gross_amount=gross,
        exemption_amount=round2(_ZERO),
        exemption_note="",
        net_amount=gross,
        breakdown=tuple(breakdown),
    )


def _exempted(gross: LevyResult, exemption: Decimal, note: str) -> LevyResult:
    return LevyResult(
        gross_amount=gross.gross_amount,
        exemption_amount=round2(exemption),
        exemption_note=note,
        net_amount=round2(gross.gross_amount - exemption),
        breakdown=gross.breakdown,
    )


def compute_transfer_stamp_duty(
    property_price: Number,
    is_first_time_buyer: bool = False,
    apply_campaign_exemption: bool = False,
    tier_table: TierTable = MOT_STAMP_DUTY_TIERS,
    first_time_buyer: ExemptionBand = MOT_FIRST_TIME_BUYER,
    campaign: ExemptionBand = MOT_CAMPAIGN_EXEMPTION,
) -> LevyResult:
    """Stamp duty on the memorandum of transfer.

    A first-time buyer whose property is within the ceiling pays nothing.
    Otherwise, when the campaign exemption is requested and the price falls in
    its band, the campaign fraction of the duty is waived. At most one
    exemption applies, and the first-time-buyer exemption wins.
    """
    price = require_non_negative(property_price, "property_price")
    gross = compute_tiered_levy(price, tier_table)

    if is_first_time_buyer and first_time_buyer.covers(price):
        result = _exempted(
            gross, gross.gross_amount * first_time_buyer.exemption_rate, first_time_buyer.note
        )
    elif apply_campaign_exemption and campaign.covers(price):
        result = _exempted(gross, gross.gross_amount * campaign.exemption_rate, campaign.note)
    else:
        result = gross
    logger.debug("transfer duty on %s: gross %s net %s", price, result.gross_amount, result.net_amount)
    return result


def compute_loan_stamp_duty(
    loan_amount: Number,
    is_first_time_buyer: bool = False,
    property_price: Number = 0,
    tier_table: TierTable = LOAN_STAMP_DUTY_TIERS,
    first_time_buyer: ExemptionBand = LOAN_FIRST_TIME_BUYER,
) -> LevyResult:
    """Stamp duty on the loan agreement.

    Eligibility for the first-time-buyer exemption is judged on the property
    price; the exemption itself only covers the duty on the first
    ``first_time_buyer.cap`` of the loan.
    """
    loan = require_non_negative(loan_amount, "loan_amount")
    price = require_non_negative(property_price, "property_price")
    gross = compute_tiered_levy(loan, tier_table)

    if is_first_time_buyer and first_time_buyer.covers(price):
        exempt_base = loan if first_time_buyer.cap is None else min(loan, first_time_buyer.cap)
        exempt_levy, _ = _gross_levy(exempt_base, tier_table)
        result = _exempted(gross, exempt_levy * first_time_buyer.exemption_rate, first_time_buyer.note)
    else:
        result = gross
    logger.debug("loan duty on %s: gross %s net %s", loan, result.gross_amount, result.net_amount)
    return result


def compute_legal_fees(
    amount: Number,
    additional_fees: Optional[Mapping[str, Number]] = None,
    tier_table: TierTable = LEGAL_FEE_TIERS,
) -> LegalFeeResult:
    """Legal fees on the solicitors' scale plus fixed additional fees.

    ``additional_fees`` maps a fee name to a fixed amount; it defaults to the
    standard disbursement, search, registration and stamping fees.
    """
    base = require_non_negative(amount, "amount")
    fees = LEGAL_ADDITIONAL_FEES if additional_fees is None else additional_fees
    extras = {name: require_non_negative(value, name) for name, value in fees.items()}
    total_extras = sum(extras.values(), _ZERO)

    scale_fee, breakdown = _gross_levy(base, tier_table)
    return LegalFeeResult(
        base_fee=round2(scale_fee),
        additional_fees=extras,
        total_additional_fees=round2(total_extras),
        total_fees=round2(scale_fee + total_extras),
        breakdown=tuple(breakdown),
    )
