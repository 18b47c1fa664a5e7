from decimal import Decimal

import pytest

from mortgage_calc.data_models import MurabahahFinancing
from mortgage_calc.errors import NOT_APPLICABLE, InvalidParameter
from mortgage_calc.utils import (
    as_serializable,
    format_currency,
    format_number,
    format_percent,
    require_tenure,
    round2,
    to_decimal,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("2.345"), Decimal("2.35")),
        (Decimal("-2.345"), Decimal("-2.35")),
        (Decimal("2.344"), Decimal("2.34")),
        (2.675, Decimal("2.68")),  # float parsed via repr, not its binary expansion
        (10, Decimal("10.00")),
    ],
)
def test_round2_half_away_from_zero(value, expected):
    assert round2(value) == expected


def test_to_decimal_accepts_thousands_separators():
    assert to_decimal("1,250,000") == Decimal("1250000")
    assert to_decimal(" 4.10 ") == Decimal("4.10")
    assert to_decimal(4.1) == Decimal("4.1")


@pytest.mark.parametrize("bad", ["abc", "", None, True, float("nan"), float("inf")])
def test_to_decimal_rejects_junk(bad):
    with pytest.raises(InvalidParameter):
        to_decimal(bad, "amount")


def test_invalid_parameter_is_a_value_error():
    with pytest.raises(ValueError, match="amount"):
        to_decimal("x", "amount")


def test_require_tenure():
    assert require_tenure(30) == 30
    assert require_tenure("25") == 25
    for bad in (0, -5, 2.5, False):
        with pytest.raises(InvalidParameter):
            require_tenure(bad)


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "RM 1,234.50"
    assert format_currency(1000000) == "RM 1,000,000.00"
    assert format_currency(None) == "RM 0.00"
    assert format_currency(float("nan")) == "RM 0.00"


def test_format_number_and_percent():
    assert format_number(Decimal("100000"), decimals=0) == "100,000"
    assert format_percent(Decimal("0.01")) == "1%"
    assert format_percent(Decimal("0.008")) == "0.8%"
    assert format_percent(Decimal("0.1")) == "10%"


def test_as_serializable_converts_decimals_and_sentinel():
    data = as_serializable({"a": Decimal("1.50"), "b": NOT_APPLICABLE, "c": (1, 2)})
    assert data == {"a": 1.5, "b": "N/A", "c": [1, 2]}


def test_as_serializable_includes_variant_kind():
    result = MurabahahFinancing(
        principal=Decimal("100"),
        profit_rate_percent=Decimal("4"),
        total_profit=Decimal("4"),
        selling_price=Decimal("104"),
        monthly_payment=Decimal("8.67"),
        tenure_years=1,
        total_months=12,
    )
    data = as_serializable(result)
    assert data["kind"] == "murabahah"
    assert data["selling_price"] == 104.0


def test_not_applicable_sentinel():
    assert str(NOT_APPLICABLE) == "N/A"
    assert not NOT_APPLICABLE
    assert NOT_APPLICABLE != 0
