import pytest
from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient

from installment_engine.api.app import app
from installment_engine.api.deps import get_today

TODAY = date(2024, 12, 1)

FINANCING = {
    "car_value": "100000",
    "down_payment": "10000",
    "term_months": 10,
    "annual_rate": "0.12",
    "start_date": "2025-01-15",
}


@pytest.fixture
def client():
    app.dependency_overrides[get_today] = lambda: TODAY
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def entries(client):
    return client.post("/api/v1/schedules/generate", json=FINANCING).json()["entries"]


def _history(n: int) -> list[dict]:
    return [
        {
            "subject_id": "car-1",
            "year": TODAY.year,
            "original_due_date": "2024-10-15",
            "deferred_to_date": "2024-11-15",
            "requested_on": "2024-10-01",
            "original_amount": "9900",
        }
        for _ in range(n)
    ]


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestSchedules:
    def test_generate(self, client):
        resp = client.post("/api/v1/schedules/generate", json=FINANCING)
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["entries"]) == 10
        assert Decimal(body["entries"][0]["amount"]) == Decimal("9900")
        assert Decimal(body["entries"][9]["amount"]) == Decimal("9090")
        assert body["entries"][0]["status"] == "upcoming"
        assert body["summary"]["payment_count"] == 10
        assert Decimal(body["summary"]["total_principal"]) == Decimal("90000")
        assert body["validation"]["can_save"] is True

    def test_generate_amortized(self, client):
        payload = {**FINANCING, "down_payment": "20000", "term_months": 12,
                   "annual_rate": "0", "mode": "amortized_fixed"}
        body = client.post("/api/v1/schedules/generate", json=payload).json()
        assert Decimal(body["summary"]["total_amount"]) == Decimal("79992")
        assert body["validation"]["is_valid"] is True

    def test_generate_invalid_input(self, client):
        resp = client.post("/api/v1/schedules/generate", json={**FINANCING, "down_payment": "150000"})
        assert resp.status_code == 422
        assert "down payment cannot exceed car value" in resp.json()["detail"]

    def test_generate_manual_rejected(self, client):
        resp = client.post("/api/v1/schedules/generate", json={**FINANCING, "mode": "manual"})
        assert resp.status_code == 422

    def test_validate_duplicate_dates(self, client):
        row = {"due_date": "2025-01-15", "amount": "1000", "status": "upcoming"}
        resp = client.post("/api/v1/schedules/validate", json={"entries": [row, row]})
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_valid"] is False
        assert body["can_save"] is False
        assert body["errors"]

    def test_edit_append(self, client, entries):
        resp = client.post("/api/v1/schedules/edit", json={
            "entries": entries,
            "edit": {"action": "append", "amount": "500"},
        })
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["entries"]) == 11
        assert body["entries"][-1]["due_date"] == "2025-11-15"

    def test_edit_bad_index(self, client, entries):
        resp = client.post("/api/v1/schedules/edit", json={
            "entries": entries,
            "edit": {"action": "remove", "index": 42},
        })
        assert resp.status_code == 409

    def test_edit_missing_index(self, client, entries):
        resp = client.post("/api/v1/schedules/edit", json={
            "entries": entries,
            "edit": {"action": "update", "amount": "500"},
        })
        assert resp.status_code == 409

    def test_record_payment(self, client, entries):
        resp = client.post("/api/v1/schedules/record-payment", json={
            "entries": entries, "due_date": "2025-01-15", "paid_date": "2025-01-14",
        })
        assert resp.status_code == 200
        first = resp.json()["entries"][0]
        assert first["status"] == "paid"
        assert first["paid_date"] == "2025-01-14"

    def test_record_payment_unknown_date(self, client, entries):
        resp = client.post("/api/v1/schedules/record-payment", json={
            "entries": entries, "due_date": "2025-01-16", "paid_date": "2025-01-14",
        })
        assert resp.status_code == 409

    def test_aggregate(self, client):
        daily = client.post(
            "/api/v1/schedules/generate", json={**FINANCING, "interval": "daily"}
        ).json()["entries"]
        resp = client.post("/api/v1/schedules/aggregate", json={"entries": daily})
        monthly = resp.json()["entries"]
        assert len(monthly) == 10
        assert Decimal(monthly[0]["amount"]) == Decimal("9900")


class TestDeferrals:
    def test_full_deferral(self, client, entries):
        resp = client.post("/api/v1/deferrals", json={
            "subject_id": "car-1", "entries": entries, "target_due_date": "2025-04-15",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["updated"] is True
        assert body["deferred_to"] == "2025-05-15"
        assert body["remaining_deferrals"] == 2
        assert len(body["history"]) == 1
        assert body["entries"][3]["is_deferred"] is True

    def test_partial_deferral(self, client, entries):
        body = client.post("/api/v1/deferrals", json={
            "subject_id": "car-1",
            "entries": entries,
            "target_due_date": "2025-04-15",
            "amount_to_defer": "4000",
        }).json()
        assert len(body["entries"]) == 11
        assert Decimal(body["entries"][4]["amount"]) == Decimal("4000")

    def test_quota_exhausted(self, client, entries):
        resp = client.post("/api/v1/deferrals", json={
            "subject_id": "car-1",
            "entries": entries,
            "target_due_date": "2025-04-15",
            "history": _history(3),
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["updated"] is False
        assert body["rejection"] == "quota_exhausted"
        assert body["remaining_deferrals"] == 0
        assert body["entries"] == entries

    def test_non_positive_amount(self, client, entries):
        resp = client.post("/api/v1/deferrals", json={
            "subject_id": "car-1",
            "entries": entries,
            "target_due_date": "2025-04-15",
            "amount_to_defer": "0",
        })
        assert resp.status_code == 422


class TestSettlements:
    def test_quote(self, client, entries):
        resp = client.post("/api/v1/settlements/quote", json={
            "entries": entries,
            "policy": {"principal_discount": {"enabled": True, "value": "10"}},
            "as_of": "2025-01-15",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert Decimal(body["months_early"]) == Decimal("9")
        assert Decimal(body["total_discount"]) == Decimal("9000")
        assert Decimal(body["final_amount"]) == Decimal("85950")

    def test_quote_with_tier(self, client, entries):
        body = client.post("/api/v1/settlements/quote", json={
            "entries": entries,
            "policy": {"tiered_discounts": [{"min_months_early": "3", "interest_discount": "50"}]},
            "as_of": "2025-01-15",
        }).json()
        assert Decimal(body["total_discount"]) == Decimal("2475")
        assert Decimal(body["applied_tier"]["min_months_early"]) == Decimal("3")

    def test_quote_defaults_to_today(self, client, entries):
        body = client.post("/api/v1/settlements/quote", json={
            "entries": entries,
            "policy": {"principal_discount": {"enabled": True, "value": "10"}},
        }).json()
        # 2024-12-01 is before the loan start, so the whole term is ahead
        assert Decimal(body["months_early"]) == Decimal("10")
        assert Decimal(body["total_discount"]) == Decimal("9000")
