# tests/routers/test_backup_api.py
"""Tests for backup export and import through the API."""

from fastapi.testclient import TestClient

from tests.conftest import create_account, create_instrument, create_trade

BACKUP = "/api/v1/backup"


class TestBackupEndpoints:
    """Tests for /backup/export and /backup/import."""

    def test_export(self, client: TestClient, repository):
        repository.put_account(create_account())
        repository.put_instrument(create_instrument(cedear_ratio="10:1"))
        repository.put_movement(create_trade("b1", "BUY", "10", "20000"))

        response = client.get(f"{BACKUP}/export")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == 1
        assert data["exportedAtISO"]
        assert [m["id"] for m in data["data"]["movements"]] == ["b1"]
        assert data["data"]["instruments"][0]["symbol"] == "AAPL"

    def test_export_then_import_restores_deleted_records(self, client: TestClient, repository):
        repository.put_account(create_account())
        repository.put_movement(create_trade("b1", "BUY", "10", "20000"))
        exported = client.get(f"{BACKUP}/export").json()
        client.delete("/api/v1/movements/b1")
        client.delete("/api/v1/accounts/acc-broker")

        response = client.post(f"{BACKUP}/import", json=exported)

        assert response.status_code == 200
        assert response.json()["movements"] == 1
        assert response.json()["accounts"] == 1
        assert client.get("/api/v1/movements/b1").status_code == 200

    def test_unsupported_version_is_400(self, client: TestClient):
        response = client.post(f"{BACKUP}/import", json={"version": 9, "data": {}})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "BackupFormatError"
        assert data["details"] == {"field": "payload"}

    def test_invalid_movement_writes_nothing(self, client: TestClient):
        payload = {
            "version": 1,
            "data": {
                "accounts": [{"id": "acc-1", "name": "Broker"}],
                "movements": [{"id": "m1", "type": "BUY", "accountId": "acc-1"}],
            },
        }

        response = client.post(f"{BACKUP}/import", json=payload)

        assert response.status_code == 400
        assert client.get("/api/v1/accounts").json() == []
