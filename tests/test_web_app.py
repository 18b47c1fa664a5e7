import pytest

from mortgage_calc_web.app import create_app


def test_payment_endpoint(client):
    resp = client.post("/api/payment", json={"principal": 100000, "rate": 6, "tenure_years": 30})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["monthly_payment"] == 599.55
    assert data["total_interest"] > 0


def test_payment_missing_field(client):
    resp = client.post("/api/payment", json={"principal": 100000, "rate": 6})
    assert resp.status_code == 400
    assert "tenure_years" in resp.get_json()["error"]


def test_payment_invalid_tenure(client):
    resp = client.post("/api/payment", json={"principal": 100000, "rate": 6, "tenure_years": 0})
    assert resp.status_code == 400
    assert "tenure_years" in resp.get_json()["error"]


def test_payment_requires_json_object(client):
    resp = client.post("/api/payment", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_schedule_preview_is_truncated(client):
    resp = client.post("/api/schedule", json={"principal": 100000, "rate": 6, "tenure_years": 30})
    data = resp.get_json()
    assert data["total_rows"] == 360
    assert len(data["schedule"]) == 120
    assert data["truncated"] == 240
    assert data["schedule"][0]["interest"] == 500.0


def test_full_schedule_with_yearly(client):
    resp = client.post(
        "/api/schedule",
        json={"principal": 100000, "rate": 6, "tenure_years": 30, "full": True, "yearly": "true"},
    )
    data = resp.get_json()
    assert len(data["schedule"]) == 360
    assert "truncated" not in data
    assert len(data["yearly"]) == 30
    assert data["schedule"][-1]["balance"] == 0.0


def test_schedule_preview_is_configurable():
    app = create_app({"TESTING": True, "SCHEDULE_PREVIEW": 12})
    resp = app.test_client().post("/api/schedule", json={"principal": 12000, "rate": 5, "tenure_years": 2})
    data = resp.get_json()
    assert len(data["schedule"]) == 12
    assert data["truncated"] == 12


def test_extra_payments_endpoint(client):
    resp = client.post(
        "/api/extra-payments",
        json={"principal": 300000, "rate": 4, "tenure_years": 20, "extra_monthly": 500},
    )
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["with_extra_payments"]["total_months"] < 240
    assert data["savings"]["interest_saved"] > 0


def test_refinance_endpoint_not_applicable(client):
    resp = client.post(
        "/api/refinance",
        json={
            "current": {"balance": 300000, "rate": 4, "remaining_years": 20},
            "proposed": {"rate": 4.5, "tenure_years": 20, "closing_costs": 0},
        },
    )
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["comparison"]["break_even_months"] == "N/A"
    assert data["comparison"]["worth_refinancing"] is False


def test_refinance_endpoint_missing_section(client):
    resp = client.post("/api/refinance", json={"current": {"balance": 1, "rate": 4, "remaining_years": 1}})
    assert resp.status_code == 400


def test_affordability_endpoint(client):
    resp = client.post(
        "/api/affordability",
        json={
            "monthly_income": 5000,
            "existing_commitments": 3000,
            "dsr_limit_percent": 60,
            "rate": 4.1,
            "tenure_years": 30,
        },
    )
    data = resp.get_json()
    assert data["can_afford"] is False
    assert data["max_loan_amount"] == 0.0
    assert data["message"] == "Existing commitments exceed DSR limit"


@pytest.mark.parametrize("dsr", ["sixty", 150])
def test_affordability_bad_dsr(client, dsr):
    resp = client.post(
        "/api/affordability",
        json={"monthly_income": 8000, "dsr_limit_percent": dsr, "rate": 4, "tenure_years": 30},
    )
    assert resp.status_code == 400


def test_upfront_costs_endpoint(client):
    resp = client.post("/api/upfront-costs", json={"property_price": 600000, "loan_amount": 540000})
    data = resp.get_json()
    assert data["total_costs"] == 91520.0
    assert len(data["transfer_duty"]["breakdown"]) == 3
    assert data["summary"]["stamp_duty"] == 14700.0


def test_islamic_endpoint(client):
    resp = client.post(
        "/api/islamic",
        json={"kind": "murabahah", "amount": 300000, "rate": 4, "tenure_years": 20},
    )
    data = resp.get_json()
    assert data["kind"] == "murabahah"
    assert data["cost_of_borrowing"] == 240000.0


def test_islamic_unknown_kind(client):
    resp = client.post("/api/islamic", json={"kind": "ijarah", "amount": 1, "rate": 4, "tenure_years": 1})
    assert resp.status_code == 400


def test_banks_endpoint(client):
    resp = client.get("/api/banks?type=islamic")
    data = resp.get_json()
    assert list(data) == ["islamic"]
    assert data["islamic"][0]["name"] == "Public Islamic Bank"

    assert client.get("/api/banks?type=bogus").status_code == 400
    assert set(client.get("/api/banks").get_json()) == {"conventional", "islamic"}


@pytest.mark.parametrize("month", [None, "abc", 0])
def test_extra_payments_bad_lump_sum_month(client, month):
    resp = client.post(
        "/api/extra-payments",
        json={
            "principal": 300000,
            "rate": 4,
            "tenure_years": 20,
            "lump_sum": 1000,
            "lump_sum_month": month,
        },
    )
    assert resp.status_code == 400
    assert "lump_sum_month" in resp.get_json()["error"]
