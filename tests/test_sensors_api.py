"""Tests for reading query endpoints: latest, history and CSV export."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from ecotracker.services.sensor_validation import SensorPayload


@pytest_asyncio.fixture
async def readings(storage, device):
    """Three readings: now, 2 hours ago and 2 days ago."""
    now = datetime.now(UTC)
    for age, payload in (
        (timedelta(days=2), SensorPayload(temperature=15.0, humidity=30.0, air_quality=40)),
        (timedelta(hours=2), SensorPayload(temperature=20.0, humidity=None, air_quality=120)),
        (timedelta(0), SensorPayload(temperature=24.5, humidity=55.0, air_quality=210)),
    ):
        await storage.add_reading(device.id, payload, now - age)
    await storage.commit()
    return now


class TestLatestReading:
    """GET /api/sensors/{deviceId}/latest"""

    @pytest.mark.asyncio
    async def test_latest_with_air_quality_status(self, client, device, readings, auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/latest", headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["temperature"] == 24.5
        assert body["airQuality"] == 210
        assert body["airQualityStatus"] == "Unhealthy"
        assert body["airQualityColor"] == "red"

    @pytest.mark.asyncio
    async def test_no_readings_returns_null(self, client, device, auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/latest", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_foreign_device_not_found(self, client, device, other_auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/latest", headers=other_auth_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_auth(self, client, device):
        response = await client.get(f"/api/sensors/{device.id}/latest")

        assert response.status_code == 401


class TestHistory:
    """GET /api/sensors/{deviceId}/history"""

    @pytest.mark.asyncio
    async def test_defaults_to_last_24_hours(self, client, device, readings, auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/history", headers=auth_headers
        )

        assert response.status_code == 200
        history = response.json()
        assert [r["airQuality"] for r in history] == [210, 120]
        assert history[1]["humidity"] is None

    @pytest.mark.asyncio
    async def test_explicit_range(self, client, device, readings, auth_headers):
        start = (readings - timedelta(days=3)).isoformat()
        end = (readings - timedelta(hours=1)).isoformat()

        response = await client.get(
            f"/api/sensors/{device.id}/history",
            params={"startDate": start, "endDate": end},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [r["airQuality"] for r in response.json()] == [120, 40]

    @pytest.mark.asyncio
    async def test_inverted_range_rejected(self, client, device, auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/history",
            params={
                "startDate": "2026-05-02T00:00:00Z",
                "endDate": "2026-05-01T00:00:00Z",
            },
            headers=auth_headers,
        )

        assert response.status_code == 400


class TestExport:
    """GET /api/sensors/{deviceId}/export"""

    @pytest.mark.asyncio
    async def test_csv_download(self, client, device, readings, auth_headers):
        response = await client.get(
            f"/api/sensors/{device.id}/export", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]

        lines = response.text.strip().split("\n")
        assert lines[0] == "Timestamp,Temperature (°C),Humidity (%),Air Quality"
        assert len(lines) == 3
        # Missing humidity is an empty cell, not 0
        assert lines[2].endswith(",20.0,,120")
