"""Tests for the generator HTTP API."""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.services import set_service


@pytest.fixture
def client(service):
    """Test client bound to the in-memory service (lifespan not run)."""
    set_service(service)
    yield TestClient(app)
    set_service(None)


@pytest.fixture
def seeded_client(client, service):
    service.initialize()
    return client


class TestDataManagement:
    def test_initialize_seeds(self, client):
        response = client.post("/api/generator/initialize")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "success"
        assert data["customers_created"] == 5
        assert data["cards_created"] == 10
        assert data["data_status"] == "READY"

    def test_initialize_twice_reports_existing(self, client):
        client.post("/api/generator/initialize")
        data = client.post("/api/generator/initialize").json()

        assert data["already_seeded"] is True
        assert data["customers_created"] == 0

    def test_reset_clears_transactions(self, seeded_client, service):
        seeded_client.post("/api/transactions/bulk", params={"count": 3})
        assert service.total_transactions() == 3

        response = seeded_client.post("/api/generator/reset")

        assert response.status_code == 200
        assert response.json()["customers_created"] == 5
        assert service.total_transactions() == 0

    def test_stats(self, seeded_client):
        data = seeded_client.get("/api/generator/stats").json()

        assert data["total_customers"] == 5
        assert data["active_cards"] == 10
        assert data["total_transactions"] == 0

    def test_status_before_and_after_init(self, client):
        before = client.get("/api/generator/status").json()
        client.post("/api/generator/initialize")
        after = client.get("/api/generator/status").json()

        assert before["data_status"] == "NOT_INITIALIZED"
        assert before["initialized"] is False
        assert after["data_status"] == "READY"
        assert after["scheduler_running"] is False


class TestRandomTransaction:
    def test_publishes_the_returned_transaction(self, seeded_client, producer):
        response = seeded_client.post("/api/transactions/random")
        data = response.json()

        assert response.status_code == 200
        assert data["transaction_type"] in ("ONLINE", "POS")
        assert 10.0 <= data["amount"] <= 500.0
        producer.send.assert_called_once()
        assert producer.send.call_args.kwargs["key"] == data["transaction_id"]

    def test_without_cards_returns_400(self, client, producer):
        response = client.post("/api/transactions/random")

        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert "No active cards" in response.json()["message"]
        producer.send.assert_not_called()

    def test_preview_is_wire_payload(self, seeded_client, producer):
        payload = seeded_client.get("/api/transactions/preview").json()

        assert "transactionId" in payload
        assert "transactionAmount" in payload
        assert payload["isCardPresent"] is (payload["transactionType"] == "POS")
        producer.send.assert_not_called()

    def test_preview_without_cards_returns_400(self, client):
        assert client.get("/api/transactions/preview").status_code == 400


class TestBulk:
    def test_default_count(self, seeded_client, producer):
        data = seeded_client.post("/api/transactions/bulk").json()

        assert data["requested_count"] == 10
        assert data["published_count"] == 10
        assert producer.send.call_count == 10

    @pytest.mark.parametrize("count", [0, 1001])
    def test_out_of_range_returns_400(self, seeded_client, producer, count):
        response = seeded_client.post("/api/transactions/bulk", params={"count": count})

        assert response.status_code == 400
        assert "between 1 and 1000" in response.json()["message"]
        producer.send.assert_not_called()

    def test_upper_bound_accepted(self, seeded_client):
        response = seeded_client.post("/api/transactions/bulk", params={"count": 1000})
        assert response.status_code == 200
        assert response.json()["published_count"] == 1000


class TestHealth:
    def test_health_reports_counts(self, seeded_client):
        data = seeded_client.get("/api/transactions/health").json()

        assert data["status"] == "healthy"
        assert data["service"] == "Card Transaction Generator"
        assert data["available_cards"] == 10
        assert data["total_customers"] == 5

    def test_health_empty_dataset(self, client):
        data = client.get("/api/transactions/health").json()
        assert data["available_cards"] == 0
