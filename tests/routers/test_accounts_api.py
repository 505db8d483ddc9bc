# tests/routers/test_accounts_api.py
"""
Tests for the account and preferences endpoints.

Test Coverage:
- PUT upsert with camelCase bodies
- Listing sorted by name
- 404 for unknown accounts, 400 for id mismatches
- Preferences defaults and replacement
"""

from fastapi.testclient import TestClient

ACCOUNTS = "/api/v1/accounts"


def account_body(account_id: str = "acc-mp", name: str = "Mercado Pago", **extra) -> dict:
    body = {"id": account_id, "name": name, "kind": "WALLET"}
    body.update(extra)
    return body


class TestAccountEndpoints:
    """Tests for /accounts."""

    def test_put_creates_account(self, client: TestClient):
        response = client.put(
            f"{ACCOUNTS}/acc-mp",
            json=account_body(cashYield={"enabled": True, "tna": "36.5", "lastAccruedDate": "2025-03-01"}),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "acc-mp"
        assert data["cashYield"]["enabled"] is True
        assert data["cashYield"]["lastAccruedDate"] == "2025-03-01"

    def test_get_returns_stored_account(self, client: TestClient):
        client.put(f"{ACCOUNTS}/acc-mp", json=account_body())

        response = client.get(f"{ACCOUNTS}/acc-mp")

        assert response.status_code == 200
        assert response.json()["name"] == "Mercado Pago"

    def test_put_is_upsert(self, client: TestClient):
        client.put(f"{ACCOUNTS}/acc-mp", json=account_body())
        client.put(f"{ACCOUNTS}/acc-mp", json=account_body(name="MP"))

        accounts = client.get(ACCOUNTS).json()

        assert [a["name"] for a in accounts] == ["MP"]

    def test_list_sorted_by_name(self, client: TestClient):
        client.put(f"{ACCOUNTS}/acc-z", json=account_body("acc-z", "zeta"))
        client.put(f"{ACCOUNTS}/acc-a", json=account_body("acc-a", "Alfa"))

        names = [a["name"] for a in client.get(ACCOUNTS).json()]

        assert names == ["Alfa", "zeta"]

    def test_unknown_account(self, client: TestClient):
        response = client.get(f"{ACCOUNTS}/missing")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "AccountNotFoundError"
        assert data["details"] == {"resource_type": "Account", "resource_id": "missing"}

    def test_path_and_body_id_must_match(self, client: TestClient):
        response = client.put(f"{ACCOUNTS}/acc-1", json=account_body("acc-2"))

        assert response.status_code == 400
        assert response.json()["details"] == {"field": "id"}

    def test_delete(self, client: TestClient):
        client.put(f"{ACCOUNTS}/acc-mp", json=account_body())

        assert client.delete(f"{ACCOUNTS}/acc-mp").status_code == 204
        assert client.get(f"{ACCOUNTS}/acc-mp").status_code == 404


class TestPreferencesEndpoints:
    """Tests for /preferences."""

    def test_defaults(self, client: TestClient):
        data = client.get("/api/v1/preferences").json()

        assert data["baseFxForUSD"] == "MEP"
        assert data["stablecoinFx"] == "CRIPTO"

    def test_replace(self, client: TestClient):
        response = client.put("/api/v1/preferences", json={"baseFxForUSD": "CCL", "trackCash": True})

        assert response.status_code == 200
        data = client.get("/api/v1/preferences").json()
        assert data["baseFxForUSD"] == "CCL"
        assert data["trackCash"] is True
