"""Tests for the device ingestion endpoint (POST /api/esp/data)."""

from unittest.mock import AsyncMock

import pytest

from ecotracker.core.errors import SensorValidationError, StorageError
from ecotracker.main import app
from ecotracker.routers.esp import decode_body
from ecotracker.services.pipeline import get_pipeline
from ecotracker.services.storage import SensorStorage

# Registered by the device fixture
TEST_MAC = "AA:BB:CC:DD:EE:FF"


class TestEspIngestion:
    """Device readings posted with a MAC address header."""

    @pytest.mark.asyncio
    async def test_accepts_reading(self, client, device, db_session):
        response = await client.post(
            "/api/esp/data",
            json={"temperature": 22.5, "humidity": 45.0, "airQuality": 80},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["reading"]["temperature"] == 22.5
        assert body["reading"]["airQuality"] == 80
        assert body["reading"]["deviceId"] == str(device.id)
        assert body["alertsCreated"] == 0

        latest = await SensorStorage(db_session).latest_reading(device.id)
        assert latest is not None
        assert latest.humidity == 45.0

    @pytest.mark.asyncio
    async def test_alternate_header_and_lowercase_mac(self, client, device):
        response = await client.post(
            "/api/esp/data",
            json={"humidity": 50.0},
            headers={"mac-address": TEST_MAC.lower()},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_marks_device_online(self, client, device, db_session):
        await client.post(
            "/api/esp/data",
            json={"temperature": 20.0},
            headers={"macaddress": TEST_MAC},
        )

        online = await SensorStorage(db_session).list_online_devices()
        assert [d.id for d in online] == [device.id]

    @pytest.mark.asyncio
    async def test_critical_reading_creates_alert(self, client, device, db_session):
        response = await client.post(
            "/api/esp/data",
            json={"temperature": 22, "humidity": 45, "airQuality": 250},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 200
        assert response.json()["alertsCreated"] == 1

        alerts = await SensorStorage(db_session).unread_alerts(device.id)
        assert len(alerts) == 1
        assert alerts[0].value == 250
        assert alerts[0].threshold == 200

    @pytest.mark.asyncio
    async def test_out_of_range_rejected(self, client, device, db_session):
        response = await client.post(
            "/api/esp/data",
            json={"temperature": 95},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["field"] == "temperature"
        assert body["reason"]
        assert await SensorStorage(db_session).latest_reading(device.id) is None

    @pytest.mark.asyncio
    async def test_float_air_quality_rejected(self, client, device):
        response = await client.post(
            "/api/esp/data",
            json={"airQuality": 80.5},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 400
        assert response.json()["field"] == "airQuality"

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, client, device):
        response = await client.post(
            "/api/esp/data",
            content=b"{not json",
            headers={"macaddress": TEST_MAC, "content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["field"] == "body"

    @pytest.mark.asyncio
    async def test_missing_mac_header(self, client, device):
        response = await client.post("/api/esp/data", json={"temperature": 20.0})

        assert response.status_code == 400
        assert response.json()["detail"] == "MAC address required"

    @pytest.mark.asyncio
    async def test_unknown_mac(self, client, device):
        response = await client.post(
            "/api/esp/data",
            json={"temperature": 20.0},
            headers={"macaddress": "11:22:33:44:55:66"},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_publishes_to_subscribers(self, client, device, broadcaster):
        socket = AsyncMock()
        await broadcaster.subscribe(device.id, socket)

        response = await client.post(
            "/api/esp/data",
            json={"temperature": 23.0},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 200
        message = socket.send_json.await_args.args[0]
        assert message["type"] == "sensorData"
        assert message["deviceId"] == str(device.id)
        assert message["data"]["temperature"] == 23.0

    @pytest.mark.asyncio
    async def test_broken_subscriber_does_not_fail_request(self, client, device, broadcaster):
        socket = AsyncMock()
        socket.send_json.side_effect = RuntimeError("closed")
        await broadcaster.subscribe(device.id, socket)

        response = await client.post(
            "/api/esp/data",
            json={"temperature": 23.0},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 200
        assert broadcaster.subscriber_count(device.id) == 0


class TestEspStorageFailures:
    """Storage errors surface to the device instead of being swallowed."""

    @pytest.fixture
    def failing_pipeline(self):
        pipeline = AsyncMock()
        app.dependency_overrides[get_pipeline] = lambda: pipeline
        yield pipeline
        app.dependency_overrides.pop(get_pipeline, None)

    @pytest.mark.asyncio
    async def test_unavailable_storage_is_503(self, client, failing_pipeline):
        failing_pipeline.ingest.side_effect = StorageError("store reading")

        response = await client.post(
            "/api/esp/data",
            json={"temperature": 20.0},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_constraint_violation_is_409(self, client, failing_pipeline):
        failing_pipeline.ingest.side_effect = StorageError(
            "store reading", constraint=True
        )

        response = await client.post(
            "/api/esp/data",
            json={"temperature": 20.0},
            headers={"macaddress": TEST_MAC},
        )

        assert response.status_code == 409


class TestDecodeBody:
    """JSON decoding of the raw request body."""

    def test_empty_body_is_empty_payload(self):
        assert decode_body(b"") == {}

    def test_malformed_body_hides_decoder_error(self):
        with pytest.raises(SensorValidationError) as exc_info:
            decode_body(b"{not json")

        assert exc_info.value.field == "body"
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True
