"""Malaysian reference tables used by the calculator.

Stamp duty tiers, legal fee scales, exemption rules, DSR limits and indicative
bank rates. Tier tables are built through :meth:`TierTable.from_rows`, so a
malformed table fails with ``ConfigurationError`` as soon as this module is
imported.

Figures follow the Stamp Act schedule, the Solicitors' Remuneration Order 2023
and Bank Negara DSR guidance as published at the time of writing. Bank rates
are indicative only.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .data_models import TierTable
from .errors import InvalidParameter

# =============================================================================
# STAMP DUTY - MEMORANDUM OF TRANSFER (property price)
# =============================================================================

MOT_STAMP_DUTY_TIERS = TierTable.from_rows(
    [
        (0, 100_000, "0.01"),  # 1% for first RM100,000
        (100_000, 500_000, "0.02"),  # 2% for RM100,001 - RM500,000
        (500_000, 1_000_000, "0.03"),  # 3% for RM500,001 - RM1,000,000
        (1_000_000, None, "0.04"),  # 4% above RM1,000,000
    ],
    name="MOT stamp duty",
)


@dataclass(frozen=True)
class ExemptionBand:
    """A fractional exemption granted when the base amount lies in ``[min_amount, max_amount]``.

    ``cap`` limits the part of the base that the exemption applies to
    (``None`` means the whole base).
    """

    min_amount: Decimal
    max_amount: Decimal
    exemption_rate: Decimal
    note: str
    cap: Optional[Decimal] = None

    def covers(self, amount: Decimal) -> bool:
        return self.min_amount <= amount <= self.max_amount


MOT_FIRST_TIME_BUYER = ExemptionBand(
    min_amount=Decimal("0"),
    max_amount=Decimal("500000"),
    exemption_rate=Decimal("1.0"),
    note="First-time buyer exemption (100% for property ≤ RM500,000)",
)

# Home Ownership Campaign
MOT_CAMPAIGN_EXEMPTION = ExemptionBand(
    min_amount=Decimal("300000"),
    max_amount=Decimal("2500000"),
    exemption_rate=Decimal("0.75"),
    note="Home Ownership Campaign exemption (75%)",
)

# =============================================================================
# STAMP DUTY - LOAN AGREEMENT (loan amount)
# =============================================================================

LOAN_STAMP_DUTY_TIERS = TierTable.from_rows(
    [(0, None, "0.005")],  # flat 0.5% of the loan
    name="loan agreement stamp duty",
)

# Eligibility is decided on the property price; only the first RM500,000 of
# the loan is exempt.
LOAN_FIRST_TIME_BUYER = ExemptionBand(
    min_amount=Decimal("0"),
    max_amount=Decimal("500000"),
    exemption_rate=Decimal("1.0"),
    note="First-time buyer exemption (100% on first RM500,000)",
    cap=Decimal("500000"),
)

# =============================================================================
# LEGAL FEES (Solicitors' Remuneration Order 2023)
# =============================================================================

LEGAL_FEE_TIERS = TierTable.from_rows(
    [
        (0, 500_000, "0.01"),  # 1% for first RM500,000
        (500_000, 1_000_000, "0.008"),
        (1_000_000, 3_000_000, "0.007"),
        (3_000_000, 5_000_000, "0.006"),
        (5_000_000, 7_500_000, "0.005"),
        (7_500_000, None, "0.005"),
    ],
    name="legal fee scale",
)

LEGAL_ADDITIONAL_FEES: Dict[str, Decimal] = {
    "disbursement": Decimal("1500"),  # estimated disbursement
    "search_fees": Decimal("300"),  # title and bankruptcy searches
    "registration_fees": Decimal("200"),  # land office registration
    "stamping_fees": Decimal("100"),  # document stamping
}

# =============================================================================
# VALUATION, MARGIN OF FINANCE AND DSR
# =============================================================================

VALUATION_FEE_MINIMUM = Decimal("500")
VALUATION_FEE_RATE = Decimal("0.0025")  # 0.25% of property price

# Used to estimate a property price from the maximum loan
DEFAULT_MARGIN_OF_FINANCE = Decimal("0.90")


@dataclass(frozen=True)
class DsrPolicy:
    default_limit: Decimal
    max_limit: Decimal
    high_income_threshold: Decimal


DSR_CONFIG = DsrPolicy(
    default_limit=Decimal("0.60"),
    max_limit=Decimal("0.70"),  # for monthly income at or above the threshold
    high_income_threshold=Decimal("10000"),
)

# =============================================================================
# TENURE AND AGE LIMITS
# =============================================================================

COMMON_TENURES: Tuple[int, ...] = (5, 10, 15, 20, 25, 30, 35)
MAX_BANK_TENURE_YEARS = 35

MAX_AGE_AT_MATURITY: Dict[str, int] = {
    "employed": 65,
    "self_employed": 70,
}

# =============================================================================
# INDICATIVE BANK RATES
# =============================================================================


@dataclass(frozen=True)
class BankRate:
    name: str
    rate: Decimal
    loan_type: str  # "conventional" or "islamic"
    min_loan: Decimal
    max_tenure: int
    product: str = ""


def _bank(name: str, rate: str, loan_type: str, min_loan: int = 100_000, product: str = "") -> BankRate:
    return BankRate(
        name=name,
        rate=Decimal(rate),
        loan_type=loan_type,
        min_loan=Decimal(min_loan),
        max_tenure=MAX_BANK_TENURE_YEARS,
        product=product,
    )


BANK_RATES: Dict[str, List[BankRate]] = {
    "conventional": [
        _bank("Maybank", "4.10", "conventional"),
        _bank("CIMB Bank", "4.15", "conventional"),
        _bank("Public Bank", "4.05", "conventional"),
        _bank("RHB Bank", "4.20", "conventional"),
        _bank("Hong Leong Bank", "4.18", "conventional"),
        _bank("AmBank", "4.25", "conventional"),
        _bank("OCBC Bank", "4.12", "conventional"),
        _bank("UOB Bank", "4.22", "conventional"),
        _bank("Alliance Bank", "4.28", "conventional"),
        _bank("Bank Rakyat", "4.30", "conventional", min_loan=50_000),
    ],
    "islamic": [
        _bank("Maybank Islamic", "4.15", "islamic", product="Home Financing-i"),
        _bank("CIMB Islamic", "4.20", "islamic", product="Home Financing-i"),
        _bank("Public Islamic Bank", "4.10", "islamic", product="Musharakah Mutanaqisah"),
        _bank("RHB Islamic", "4.25", "islamic", product="Musharakah Mutanaqisah"),
        _bank("Hong Leong Islamic", "4.22", "islamic", product="Home Financing-i"),
        _bank("Bank Islam", "4.18", "islamic", product="Baiti Home Financing-i"),
        _bank("Bank Muamalat", "4.35", "islamic", min_loan=50_000, product="Home Financing-i"),
        _bank("Affin Islamic", "4.28", "islamic", product="Home Financing-i"),
        _bank("MBSB Bank", "4.40", "islamic", min_loan=50_000, product="Home Financing-i"),
    ],
}


def banks_for(loan_type: str) -> List[BankRate]:
    """Return the banks offering ``loan_type``, lowest rate first."""
    try:
        banks = BANK_RATES[loan_type]
    except KeyError:
        raise InvalidParameter("loan_type", f"unknown loan type {loan_type!r}") from None
    return sorted(banks, key=lambda b: (b.rate, b.name))
