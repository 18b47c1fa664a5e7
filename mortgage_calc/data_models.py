"""Data models for the mortgage calculator.

This module defines dataclasses representing the entities produced and
consumed by the calculator: loan terms, payment summaries, amortization rows,
extra-payment and refinancing comparisons, affordability results, tiered levy
tables and their results, the upfront cost summary and the three financing
variants (conventional, Murabahah and Musharakah Mutanaqisah).

Every record is frozen. A calculation builds its result once and hands it
back by value, so results can be shared freely between callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Dict, Iterable, Iterator, Optional, Tuple, Union

from .errors import ConfigurationError, _NotApplicable
from .utils import require_non_negative, require_tenure, to_decimal

BreakEven = Union[int, _NotApplicable]


@dataclass(frozen=True)
class LoanTerms:
    """The three parameters of a fixed-rate amortizing loan.

    Attributes
    ----------
    principal: Decimal
        The financed amount in ringgit (>= 0).
    annual_rate_percent: Decimal
        Nominal annual rate in percent, e.g. ``Decimal("4.1")``.
    tenure_years: int
        Loan tenure in whole years (> 0).
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_years: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "principal", require_non_negative(self.principal, "principal"))
        object.__setattr__(
            self,
            "annual_rate_percent",
            require_non_negative(self.annual_rate_percent, "annual_rate_percent"),
        )
        object.__setattr__(self, "tenure_years", require_tenure(self.tenure_years))

    @property
    def monthly_rate(self) -> Decimal:
        return self.annual_rate_percent / Decimal(100) / Decimal(12)

    @property
    def total_months(self) -> int:
        return self.tenure_years * 12


@dataclass(frozen=True)
class PaymentSummary:
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    effective_rate_percent: Decimal


@dataclass(frozen=True)
class AmortizationRow:
    """One month of an amortization schedule.

    All amounts are rounded to cents for display; the schedule itself keeps
    full precision between months.
    """

    month: int
    year: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    cumulative_interest: Decimal
    cumulative_principal: Decimal


@dataclass(frozen=True)
class YearlySummary:
    """Totals of one loan year; ``balance`` is the balance after its last month."""

    year: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal
    cumulative_interest: Decimal


@dataclass(frozen=True)
class LoanOutcome:
    monthly_payment: Decimal
    total_months: int
    total_years: Decimal
    total_interest: Decimal
    total_payment: Decimal


@dataclass(frozen=True)
class ExtraPaymentSavings:
    months_saved: int
    years_saved: Decimal
    interest_saved: Decimal
    total_saved: Decimal


@dataclass(frozen=True)
class ExtraPaymentResult:
    original: LoanOutcome
    with_extra_payments: LoanOutcome
    savings: ExtraPaymentSavings


@dataclass(frozen=True)
class CurrentLoan:
    """The loan being refinanced: outstanding balance, rate and years left."""

    balance: Decimal
    annual_rate_percent: Decimal
    remaining_years: int


@dataclass(frozen=True)
class ProposedLoan:
    """The replacement loan offer and its one-off closing costs."""

    annual_rate_percent: Decimal
    tenure_years: int
    closing_costs: Decimal = Decimal("0")


@dataclass(frozen=True)
class CurrentLoanView:
    monthly_payment: Decimal
    total_interest: Decimal
    total_payment: Decimal
    remaining_months: int


@dataclass(frozen=True)
class RefinancedLoanView:
    monthly_payment: Decimal
    total_interest: Decimal
    # includes closing costs
    total_payment: Decimal
    new_tenure_months: int
    closing_costs: Decimal


@dataclass(frozen=True)
class RefinanceVerdict:
    """Outcome of a refinancing comparison.

    ``break_even_months`` and ``break_even_years`` hold ``NOT_APPLICABLE``
    when the new monthly payment is not lower than the current one.
    """

    monthly_difference: Decimal
    total_interest_saved: Decimal
    break_even_months: BreakEven
    break_even_years: Union[Decimal, _NotApplicable]
    net_savings: Decimal
    worth_refinancing: bool


@dataclass(frozen=True)
class RefinanceComparison:
    current: CurrentLoanView
    refinanced: RefinancedLoanView
    comparison: RefinanceVerdict


@dataclass(frozen=True)
class AffordabilityBreakdown:
    gross_income: Decimal
    max_total_debt: Decimal
    existing_commitments: Decimal
    available_for_mortgage: Decimal


@dataclass(frozen=True)
class AffordabilityResult:
    can_afford: bool
    max_loan_amount: Decimal
    max_monthly_payment: Decimal
    current_dsr_percent: Decimal
    max_dsr_percent: Decimal
    available_dsr_percent: Decimal
    estimated_property_price: Decimal
    breakdown: AffordabilityBreakdown
    message: str = ""


@dataclass(frozen=True)
class LevyTier:
    """A band of a progressive levy.

    ``upper_bound`` of ``None`` means the band is unbounded.
    """

    lower_bound: Decimal
    upper_bound: Optional[Decimal]
    rate: Decimal

    @property
    def width(self) -> Optional[Decimal]:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound


@dataclass(frozen=True)
class TierTable:
    """An ordered, contiguous sequence of :class:`LevyTier` covering ``[0, inf)``.

    The table is validated on construction; any gap, overlap, out-of-order
    band, negative rate or bounded final band raises ``ConfigurationError``.
    """

    tiers: Tuple[LevyTier, ...]
    name: str = "tier table"

    def __post_init__(self) -> None:
        tiers = tuple(self.tiers)
        object.__setattr__(self, "tiers", tiers)
        if not tiers:
            raise ConfigurationError(f"{self.name}: at least one tier is required")
        if tiers[0].lower_bound != 0:
            raise ConfigurationError(
                f"{self.name}: first tier must start at 0, starts at {tiers[0].lower_bound}"
            )
        for index, tier in enumerate(tiers):
            if tier.rate < 0:
                raise ConfigurationError(f"{self.name}: tier {index + 1} has a negative rate")
            is_last = index == len(tiers) - 1
            if tier.upper_bound is None:
                if not is_last:
                    raise ConfigurationError(
                        f"{self.name}: only the last tier may be unbounded (tier {index + 1})"
                    )
                continue
            if tier.upper_bound <= tier.lower_bound:
                raise ConfigurationError(
                    f"{self.name}: tier {index + 1} has an empty or inverted range"
                )
            if is_last:
                raise ConfigurationError(
                    f"{self.name}: last tier must be unbounded, ends at {tier.upper_bound}"
                )
            following = tiers[index + 1].lower_bound
            if following > tier.upper_bound:
                raise ConfigurationError(
                    f"{self.name}: gap between {tier.upper_bound} and {following}"
                )
            if following < tier.upper_bound:
                raise ConfigurationError(
                    f"{self.name}: tiers overlap at {following}"
                )

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[Any, Any, Any]], name: str = "tier table") -> "TierTable":
        """Build a table from ``(lower, upper, rate)`` rows; ``upper`` may be ``None``."""
        tiers = []
        for lower, upper, rate in rows:
            tiers.append(
                LevyTier(
                    lower_bound=to_decimal(lower, f"{name} lower bound"),
                    upper_bound=None if upper is None else to_decimal(upper, f"{name} upper bound"),
                    rate=to_decimal(rate, f"{name} rate"),
                )
            )
        return cls(tuple(tiers), name=name)

    def __iter__(self) -> Iterator[LevyTier]:
        return iter(self.tiers)

    def __len__(self) -> int:
        return len(self.tiers)


@dataclass(frozen=True)
class TierBreakdown:
    range_label: str
    rate_label: str
    rate: Decimal
    taxable_amount: Decimal
    levy_amount: Decimal


@dataclass(frozen=True)
class LevyResult:
    gross_amount: Decimal
    exemption_amount: Decimal
    exemption_note: str
    net_amount: Decimal
    breakdown: Tuple[TierBreakdown, ...] = ()


@dataclass(frozen=True)
class LegalFeeResult:
    base_fee: Decimal
    additional_fees: Dict[str, Decimal]
    total_additional_fees: Decimal
    total_fees: Decimal
    breakdown: Tuple[TierBreakdown, ...] = ()


@dataclass(frozen=True)
class UpfrontCostView:
    """Flattened totals for display: one number per cost heading."""

    down_payment: Decimal
    stamp_duty: Decimal
    legal_fees: Decimal
    valuation_fee: Decimal
    total: Decimal


@dataclass(frozen=True)
class UpfrontCostSummary:
    property_price: Decimal
    loan_amount: Decimal
    down_payment: Decimal
    down_payment_percent: Decimal
    transfer_duty: LevyResult
    loan_duty: LevyResult
    legal_fees_spa: LegalFeeResult
    legal_fees_loan: LegalFeeResult
    valuation_fee: Decimal
    total_costs: Decimal
    summary: UpfrontCostView


@dataclass(frozen=True)
class ConventionalFinancing:
    """A conventional interest-bearing housing loan."""

    kind: ClassVar[str] = "conventional"
    label: ClassVar[str] = "Conventional"

    principal: Decimal
    annual_rate_percent: Decimal
    monthly_payment: Decimal
    total_payment: Decimal
    total_interest: Decimal
    effective_rate_percent: Decimal
    tenure_years: int
    total_months: int

    @property
    def cost_of_borrowing(self) -> Decimal:
        return self.total_interest


@dataclass(frozen=True)
class MurabahahFinancing:
    """Cost-plus financing: the selling price is fixed when the contract is signed."""

    kind: ClassVar[str] = "murabahah"
    label: ClassVar[str] = "Murabahah (BBA)"

    principal: Decimal
    profit_rate_percent: Decimal
    total_profit: Decimal
    selling_price: Decimal
    monthly_payment: Decimal
    tenure_years: int
    total_months: int
    note: str = field(
        default="Selling price is fixed at contract signing. No rebate for early settlement typically."
    )

    @property
    def cost_of_borrowing(self) -> Decimal:
        return self.total_profit

    @property
    def total_payment(self) -> Decimal:
        return self.selling_price


@dataclass(frozen=True)
class MusharakahFinancing:
    """Diminishing partnership: the customer buys out the bank's share over time."""

    kind: ClassVar[str] = "musharakah_mutanaqisah"
    label: ClassVar[str] = "Musharakah Mutanaqisah"

    property_value: Decimal
    customer_initial_share: Decimal
    bank_share: Decimal
    rental_rate_percent: Decimal
    monthly_payment: Decimal
    total_payment: Decimal
    total_rental: Decimal
    tenure_years: int
    total_months: int
    note: str = field(
        default="Customer gradually acquires bank's share. Rebate possible for early settlement."
    )

    @property
    def cost_of_borrowing(self) -> Decimal:
        return self.total_rental


Financing = Union[ConventionalFinancing, MurabahahFinancing, MusharakahFinancing]

