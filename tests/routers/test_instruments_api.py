# tests/routers/test_instruments_api.py
"""Tests for the instrument and manual price endpoints."""

from decimal import Decimal

from fastapi.testclient import TestClient

INSTRUMENTS = "/api/v1/instruments"


def put_cedear(client: TestClient, ratio: str = "10:1"):
    return client.put(
        f"{INSTRUMENTS}/cedear-aapl",
        json={"id": "cedear-aapl", "symbol": "aapl", "category": "CEDEAR", "cedearRatio": ratio},
    )


class TestInstrumentEndpoints:
    """Tests for /instruments."""

    def test_ratio_is_normalised(self, client: TestClient):
        response = put_cedear(client, "20:1")

        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "AAPL"
        assert Decimal(data["cedearRatio"]) == Decimal("20")

    def test_invalid_ratio_is_rejected(self, client: TestClient):
        response = put_cedear(client, "10:0")

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "ValidationError"
        assert any("cedearRatio" in error["field"] for error in data["details"])

    def test_unknown_instrument(self, client: TestClient):
        response = client.get(f"{INSTRUMENTS}/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "InstrumentNotFoundError"

    def test_list_sorted_by_category_then_symbol(self, client: TestClient):
        client.put(f"{INSTRUMENTS}/crypto-btc", json={"id": "crypto-btc", "symbol": "BTC", "category": "CRYPTO"})
        put_cedear(client)

        symbols = [i["symbol"] for i in client.get(INSTRUMENTS).json()]

        assert symbols == ["AAPL", "BTC"]


class TestManualPriceEndpoints:
    """Tests for manual price overrides."""

    def test_set_and_list(self, client: TestClient):
        put_cedear(client)

        response = client.put(
            f"{INSTRUMENTS}/cedear-aapl/manual-price",
            json={"id": "cedear-aapl", "price": "25000"},
        )

        assert response.status_code == 200
        assert response.json()["updatedAtISO"] is not None
        prices = client.get(f"{INSTRUMENTS}/prices/manual").json()
        assert [(p["id"], Decimal(p["price"]), p["currency"]) for p in prices] == [
            ("cedear-aapl", Decimal("25000"), "ARS"),
        ]

    def test_unknown_instrument(self, client: TestClient):
        response = client.put(f"{INSTRUMENTS}/missing/manual-price", json={"id": "missing", "price": "1"})

        assert response.status_code == 404

    def test_id_must_be_instrument_id(self, client: TestClient):
        put_cedear(client)

        response = client.put(f"{INSTRUMENTS}/cedear-aapl/manual-price", json={"id": "other", "price": "1"})

        assert response.status_code == 400

    def test_delete(self, client: TestClient):
        put_cedear(client)
        client.put(f"{INSTRUMENTS}/cedear-aapl/manual-price", json={"id": "cedear-aapl", "price": "1"})

        assert client.delete(f"{INSTRUMENTS}/cedear-aapl/manual-price").status_code == 204
        missing = client.delete(f"{INSTRUMENTS}/cedear-aapl/manual-price")
        assert missing.status_code == 404
        assert missing.json()["details"]["resource_type"] == "ManualPrice"
