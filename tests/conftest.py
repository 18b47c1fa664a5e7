# tests/conftest.py
from __future__ import annotations

from decimal import Decimal

import pytest

from mortgage_calc.data_models import LoanTerms
from mortgage_calc_web.app import create_app


# -------- Loan fixtures --------
@pytest.fixture
def loan_terms():
    """Factory for validated loan terms (defaults: RM300k, 4%, 20 years)."""

    def _factory(principal="300000", rate="4", tenure=20):
        return LoanTerms(Decimal(principal), Decimal(rate), tenure)

    return _factory


@pytest.fixture
def standard_loan(loan_terms):
    # RM100k at 6% over 30 years: textbook payment of 599.55
    return loan_terms("100000", "6", 30)


# -------- Web fixtures --------
@pytest.fixture
def client():
    app = create_app({"TESTING": True})
    with app.test_client() as c:
        yield c
