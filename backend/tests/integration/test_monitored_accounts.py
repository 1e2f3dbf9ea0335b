"""Integration tests for monitored account endpoints"""
import pytest
from httpx import AsyncClient

DAO = "webassemblymusic-treasury.sputnik-dao.near"


class TestMonitoredAccounts:
    """Tests for adding, listing, updating and removing monitored accounts"""

    @pytest.mark.asyncio
    async def test_list_empty(self, client: AsyncClient):
        response = await client.get("/api/v1/monitored-accounts")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_add_account(self, client: AsyncClient):
        response = await client.post("/api/v1/monitored-accounts", json={"account_id": DAO})
        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] == DAO
        assert data["enabled"] is True
        assert data["last_synced_at"] is None
        assert data["created_at"]

    @pytest.mark.asyncio
    async def test_rejects_non_dao_account(self, client: AsyncClient):
        response = await client.post("/api/v1/monitored-accounts", json={"account_id": "alice.near"})
        assert response.status_code == 400
        assert ".sputnik-dao.near" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_add_twice_updates_enabled(self, client: AsyncClient):
        await client.post("/api/v1/monitored-accounts", json={"account_id": DAO})
        response = await client.post(
            "/api/v1/monitored-accounts", json={"account_id": DAO, "enabled": False}
        )
        assert response.status_code == 200
        assert response.json()["enabled"] is False

        listed = (await client.get("/api/v1/monitored-accounts")).json()
        assert len(listed) == 1

    @pytest.mark.asyncio
    async def test_list_filter_and_order(self, client: AsyncClient):
        await client.post("/api/v1/monitored-accounts", json={"account_id": "zeta.sputnik-dao.near"})
        await client.post("/api/v1/monitored-accounts", json={"account_id": "alpha.sputnik-dao.near"})
        await client.post(
            "/api/v1/monitored-accounts", json={"account_id": "beta.sputnik-dao.near", "enabled": False}
        )

        everything = (await client.get("/api/v1/monitored-accounts")).json()
        assert [a["account_id"] for a in everything] == [
            "alpha.sputnik-dao.near", "beta.sputnik-dao.near", "zeta.sputnik-dao.near",
        ]

        enabled = (await client.get("/api/v1/monitored-accounts", params={"enabled": "true"})).json()
        assert [a["account_id"] for a in enabled] == ["alpha.sputnik-dao.near", "zeta.sputnik-dao.near"]

    @pytest.mark.asyncio
    async def test_update_account(self, client: AsyncClient):
        await client.post("/api/v1/monitored-accounts", json={"account_id": DAO})
        response = await client.patch(f"/api/v1/monitored-accounts/{DAO}", json={"enabled": False})
        assert response.status_code == 200
        assert response.json()["enabled"] is False

    @pytest.mark.asyncio
    async def test_update_missing_account(self, client: AsyncClient):
        response = await client.patch(
            "/api/v1/monitored-accounts/missing.sputnik-dao.near", json={"enabled": False}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_account(self, client: AsyncClient):
        await client.post("/api/v1/monitored-accounts", json={"account_id": DAO})
        response = await client.delete(f"/api/v1/monitored-accounts/{DAO}")
        assert response.status_code == 204

        listed = (await client.get("/api/v1/monitored-accounts")).json()
        assert listed == []

    @pytest.mark.asyncio
    async def test_delete_missing_account(self, client: AsyncClient):
        response = await client.delete("/api/v1/monitored-accounts/missing.sputnik-dao.near")
        assert response.status_code == 404
