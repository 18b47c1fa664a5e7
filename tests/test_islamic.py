from decimal import Decimal

import pytest

from mortgage_calc.engine import compute_monthly_payment
from mortgage_calc.errors import InvalidParameter
from mortgage_calc.islamic import (
    FINANCING_KINDS,
    compute_conventional,
    compute_financing,
    compute_murabahah,
    compute_musharakah_mutanaqisah,
)


def test_murabahah_fixed_markup():
    result = compute_murabahah(300000, 4, 20)
    assert result.kind == "murabahah"
    assert result.total_profit == Decimal("240000.00")
    assert result.selling_price == Decimal("540000.00")
    assert result.monthly_payment == Decimal("2250.00")
    assert result.total_months == 240
    assert result.cost_of_borrowing == result.total_profit
    assert result.total_payment == result.selling_price


def test_musharakah_prices_bank_share():
    result = compute_musharakah_mutanaqisah(500000, 50000, 4.1, 30)
    baseline = compute_monthly_payment(450000, 4.1, 30)
    assert result.kind == "musharakah_mutanaqisah"
    assert result.bank_share == Decimal("450000.00")
    assert result.customer_initial_share == Decimal("50000.00")
    assert result.monthly_payment == baseline.monthly_payment
    assert result.total_rental == baseline.total_interest
    assert result.cost_of_borrowing == result.total_rental


def test_musharakah_contribution_above_value():
    with pytest.raises(InvalidParameter):
        compute_musharakah_mutanaqisah(500000, 600000, 4, 30)


def test_conventional_variant_matches_engine():
    result = compute_conventional(400000, 4.2, 35)
    baseline = compute_monthly_payment(400000, 4.2, 35)
    assert result.kind == "conventional"
    assert result.monthly_payment == baseline.monthly_payment
    assert result.cost_of_borrowing == baseline.total_interest


def test_financing_dispatch():
    assert FINANCING_KINDS == ("conventional", "murabahah", "musharakah_mutanaqisah")
    for kind in FINANCING_KINDS:
        assert compute_financing(kind, 500000, 4, 30).kind == kind


def test_musharakah_default_contribution():
    result = compute_financing("musharakah_mutanaqisah", 500000, 4, 30)
    assert result.customer_initial_share == Decimal("50000.00")
    assert result.bank_share == Decimal("450000.00")


def test_murabahah_costs_more_than_conventional_at_same_rate():
    # simple profit on the full amount for the full tenure exceeds amortizing interest
    murabahah = compute_financing("murabahah", 300000, 4, 20)
    conventional = compute_financing("conventional", 300000, 4, 20)
    assert murabahah.cost_of_borrowing > conventional.cost_of_borrowing


def test_unknown_financing_kind():
    with pytest.raises(InvalidParameter, match="kind"):
        compute_financing("ijarah", 500000, 4, 30)
