from decimal import Decimal

import pytest

from mortgage_calc.engine import (
    aggregate_yearly,
    compute_monthly_payment,
    generate_amortization_schedule,
    solve_max_principal,
)
from mortgage_calc.errors import InvalidParameter
from mortgage_calc.utils import round2


def test_textbook_payment():
    summary = compute_monthly_payment(100000, 6, 30)
    assert summary.monthly_payment == Decimal("599.55")


def test_typical_malaysian_loan():
    summary = compute_monthly_payment(500000, "4.10", 30)
    assert Decimal("2410") < summary.monthly_payment < Decimal("2420")
    assert summary.total_interest > 0
    assert summary.total_interest == summary.total_payment - Decimal("500000")
    # total is computed from the unrounded payment
    assert abs(summary.monthly_payment * 360 - summary.total_payment) <= Decimal("1.81")


def test_effective_rate_is_interest_over_principal():
    summary = compute_monthly_payment(200000, 4, 25)
    expected = summary.total_interest / Decimal("200000") * 100
    assert abs(summary.effective_rate_percent - expected) < Decimal("0.01")


def test_zero_rate_loan():
    summary = compute_monthly_payment(24000, 0, 2)
    assert summary.monthly_payment == Decimal("1000.00")
    assert summary.total_payment == Decimal("24000.00")
    assert summary.total_interest == Decimal("0.00")
    assert summary.effective_rate_percent == Decimal("0.00")


def test_zero_principal():
    summary = compute_monthly_payment(0, 4, 10)
    assert summary.monthly_payment == Decimal("0.00")
    assert summary.effective_rate_percent == Decimal("0.00")


@pytest.mark.parametrize(
    "principal, rate, tenure",
    [
        (-1, 4, 30),
        (100000, -0.5, 30),
        (100000, 4, 0),
        (100000, 4, -10),
        ("abc", 4, 30),
        (100000, "four", 30),
    ],
)
def test_invalid_loan_parameters(principal, rate, tenure):
    with pytest.raises(InvalidParameter):
        compute_monthly_payment(principal, rate, tenure)


def test_payment_is_deterministic():
    assert compute_monthly_payment(350000, 4.25, 35) == compute_monthly_payment(350000, 4.25, 35)


# -------- Amortization schedule --------
def test_schedule_length_and_first_row():
    schedule = generate_amortization_schedule(100000, 6, 30)
    rows = schedule.rows()
    assert len(schedule) == 360
    assert len(rows) == 360

    first = rows[0]
    assert first.month == 1
    assert first.year == 1
    assert first.interest == Decimal("500.00")
    assert first.principal == Decimal("99.55")
    assert first.payment == Decimal("599.55")


def test_schedule_uses_quoted_installment():
    summary = compute_monthly_payment(500000, "4.10", 30)
    rows = generate_amortization_schedule(500000, "4.10", 30).rows()

    rate = Decimal("4.10") / 100 / 12
    balance = Decimal("500000")
    for _ in range(359):
        balance -= summary.monthly_payment - balance * rate

    assert all(r.payment == summary.monthly_payment for r in rows[:-1])
    assert rows[120].payment == summary.monthly_payment
    assert rows[358].balance == round2(balance)
    assert rows[-1].balance == Decimal("0.00")


def test_schedule_closes_exactly():
    rows = generate_amortization_schedule(100000, 6, 30).rows()
    last = rows[-1]
    assert last.month == 360
    assert last.year == 30
    assert last.balance == Decimal("0.00")
    assert last.cumulative_principal == Decimal("100000.00")


def test_schedule_balances_never_increase():
    rows = generate_amortization_schedule(250000, 4.5, 15).rows()
    balances = [row.balance for row in rows]
    assert balances == sorted(balances, reverse=True)
    assert all(row.balance >= 0 for row in rows)


def test_schedule_year_numbering():
    rows = generate_amortization_schedule(50000, 3, 2).rows()
    assert [r.year for r in rows[10:14]] == [1, 1, 2, 2]


def test_schedule_is_restartable():
    schedule = generate_amortization_schedule(180000, 3.9, 10)
    first_pass = list(schedule)
    second_pass = list(schedule)
    assert first_pass == second_pass


def test_schedule_is_lazy():
    schedule = generate_amortization_schedule(300000, 4, 35)
    row = next(iter(schedule))
    assert row.month == 1


def test_zero_rate_schedule():
    rows = generate_amortization_schedule(1200, 0, 1).rows()
    assert all(r.payment == Decimal("100.00") for r in rows)
    assert all(r.interest == Decimal("0.00") for r in rows)
    assert rows[-1].balance == Decimal("0.00")


def test_schedule_rejects_invalid_terms():
    with pytest.raises(InvalidParameter):
        generate_amortization_schedule(100000, 4, 0)


# -------- Reverse solve --------
def test_solve_max_principal_inverts_payment():
    assert float(solve_max_principal(Decimal("599.55"), 6, 30)) == pytest.approx(100000, abs=1)


def test_solve_max_principal_zero_rate():
    assert solve_max_principal(1000, 0, 2) == Decimal("24000.00")


def test_solve_max_principal_rejects_negative_payment():
    with pytest.raises(InvalidParameter):
        solve_max_principal(-1, 4, 30)


# -------- Yearly roll-up --------
def test_aggregate_yearly():
    rows = generate_amortization_schedule(100000, 6, 30).rows()
    years = aggregate_yearly(rows)
    assert len(years) == 30
    assert [y.year for y in years] == list(range(1, 31))

    first = years[0]
    assert first.payment == sum((r.payment for r in rows[:12]), Decimal("0"))
    assert first.balance == rows[11].balance
    assert first.cumulative_interest == rows[11].cumulative_interest
    assert years[-1].balance == Decimal("0.00")

    total_principal = sum((y.principal for y in years), Decimal("0"))
    assert float(total_principal) == pytest.approx(100000, abs=2)


def test_aggregate_yearly_empty():
    assert aggregate_yearly([]) == []
