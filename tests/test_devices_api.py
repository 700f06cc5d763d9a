"""Tests for device registration endpoints."""

import pytest


class TestListDevices:
    """GET /api/devices"""

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get("/api/devices")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_lists_own_devices(self, client, device, auth_headers):
        response = await client.get("/api/devices", headers=auth_headers)

        assert response.status_code == 200
        devices = response.json()
        assert len(devices) == 1
        assert devices[0]["id"] == str(device.id)
        assert devices[0]["macAddress"] == "AA:BB:CC:DD:EE:FF"
        assert devices[0]["isOnline"] is False
        assert devices[0]["lastSeen"] is None

    @pytest.mark.asyncio
    async def test_hides_other_users_devices(self, client, device, other_auth_headers):
        response = await client.get("/api/devices", headers=other_auth_headers)

        assert response.status_code == 200
        assert response.json() == []


class TestRegisterDevice:
    """POST /api/devices"""

    @pytest.mark.asyncio
    async def test_registers_device(self, client, auth_headers):
        response = await client.post(
            "/api/devices",
            json={
                "name": "Bedroom",
                "macAddress": "de:ad:be:ef:00:01",
                "ipAddress": "192.168.1.41",
                "firmware": "1.0.3",
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Bedroom"
        assert body["macAddress"] == "DE:AD:BE:EF:00:01"
        assert body["isOnline"] is False
        assert body["createdAt"].endswith(("+00:00", "Z"))

    @pytest.mark.asyncio
    async def test_duplicate_mac_conflict(self, client, device, other_auth_headers):
        response = await client.post(
            "/api/devices",
            json={"name": "Copy", "macAddress": "aa:bb:cc:dd:ee:ff"},
            headers=other_auth_headers,
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_mac_rejected(self, client, auth_headers):
        response = await client.post(
            "/api/devices",
            json={"name": "Broken", "macAddress": "not-a-mac"},
            headers=auth_headers,
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_mac_is_optional(self, client, auth_headers):
        response = await client.post(
            "/api/devices",
            json={"name": "Unflashed"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["macAddress"] is None
