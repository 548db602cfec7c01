"""Unit tests for the REST API routes."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import serial
from fastapi.testclient import TestClient

from xtools.api.app import create_app
from xtools.serial.models import PortInfo


@pytest.fixture()
def client(app_context):
    app = create_app(enable_ui=False, context=app_context)
    with TestClient(app) as test_client:
        yield test_client


class TestSerialRoutes:
    def test_ports(self, client):
        ports = [PortInfo(name="COM3", description="FTDI - FT232R USB UART")]
        with patch("xtools.context.list_ports", return_value=ports):
            resp = client.get("/api/serial/ports")

        assert resp.status_code == 200
        assert resp.json() == [{"name": "COM3", "description": "FTDI - FT232R USB UART"}]

    def test_status_disconnected(self, client):
        resp = client.get("/api/serial/status")
        assert resp.status_code == 200
        assert resp.json() == {"state": "disconnected", "config": None}

    def test_connect_send_read(self, client, serial_factory):
        resp = client.post("/api/serial/connect", json={"port": "COM3", "baud_rate": 9600})
        assert resp.status_code == 200
        assert resp.json()["state"] == "connected"
        assert resp.json()["config"]["baud_rate"] == 9600

        resp = client.post("/api/serial/send", json={"data": "48 69", "hex_mode": True})
        assert resp.status_code == 200
        assert resp.json()["hex"] == "48 69"
        assert resp.json()["direction"] == "tx"
        assert bytes(serial_factory.last.written) == b"Hi"

        serial_factory.last.feed(b"OK")
        resp = client.get("/api/serial/read")
        assert resp.status_code == 200
        assert [e["text"] for e in resp.json()["entries"]] == ["OK"]

    def test_double_connect_conflict(self, client):
        client.post("/api/serial/connect", json={"port": "COM3"})
        resp = client.post("/api/serial/connect", json={"port": "COM4"})

        assert resp.status_code == 409
        assert resp.json()["detail"]["error"] == "AlreadyConnectedError"

    def test_send_disconnected_conflict(self, client):
        resp = client.post("/api/serial/send", json={"data": "hi"})
        assert resp.status_code == 409

    def test_invalid_hex(self, client):
        client.post("/api/serial/connect", json={"port": "COM3"})
        resp = client.post("/api/serial/send", json={"data": "AB CD E", "hex_mode": True})

        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "InvalidHexError"

    def test_open_failure_is_device_error(self, client, serial_factory):
        serial_factory.error = serial.SerialException("could not open port COM9")
        resp = client.post("/api/serial/connect", json={"port": "COM9"})

        assert resp.status_code == 502
        assert client.get("/api/serial/status").json()["state"] == "disconnected"

    def test_disconnect(self, client):
        client.post("/api/serial/connect", json={"port": "COM3"})
        resp = client.post("/api/serial/disconnect")

        assert resp.status_code == 200
        assert resp.json()["state"] == "disconnected"

    def test_shutdown_releases_port(self, app_context, serial_factory):
        app = create_app(enable_ui=False, context=app_context)
        with TestClient(app) as client:
            client.post("/api/serial/connect", json={"port": "COM3"})

        assert not app_context.manager.is_connected
        assert serial_factory.last.is_open is False


class TestSettingsRoutes:
    def test_get_config_defaults(self, client):
        resp = client.get("/api/config")
        assert resp.status_code == 200
        assert resp.json()["serial"]["baud_rate"] == 115200
        assert resp.json()["display"]["font_size"] == 14

    def test_put_config_persists(self, client, app_context):
        body = client.get("/api/config").json()
        body["serial"]["baud_rate"] = 9600
        body["display"]["show_hex"] = True

        resp = client.put("/api/config", json=body)

        assert resp.status_code == 200
        saved = app_context.config_store.read()
        assert saved.serial.baud_rate == 9600
        assert saved.display.show_hex is True

    def test_put_config_rejects_invalid(self, client):
        body = client.get("/api/config").json()
        body["serial"]["data_bits"] = 9

        assert client.put("/api/config", json=body).status_code == 422

    def test_save_log_renders_traffic(self, client, tmp_path):
        client.post("/api/serial/connect", json={"port": "COM3"})
        client.post("/api/serial/send", json={"data": "hello"})
        target = tmp_path / "logs" / "session.txt"

        resp = client.post("/api/log", json={"path": str(target)})

        assert resp.status_code == 200
        assert target.read_text(encoding="utf-8").rstrip("\n").endswith("TX: hello")

    def test_save_log_explicit_content(self, client, tmp_path):
        target = tmp_path / "out.txt"
        resp = client.post("/api/log", json={"path": str(target), "content": "abc"})

        assert resp.json() == {"path": str(target), "bytes": 3}
        assert target.read_text(encoding="utf-8") == "abc"

    def test_save_log_failure(self, client, tmp_path):
        resp = client.post("/api/log", json={"path": str(tmp_path), "content": "abc"})
        assert resp.status_code == 500

    def test_clear_log(self, client, app_context):
        client.post("/api/serial/connect", json={"port": "COM3"})
        client.post("/api/serial/send", json={"data": "hello"})

        resp = client.delete("/api/log")

        assert resp.json() == {"cleared": True}
        assert len(app_context.traffic) == 0


class TestSendValidation:
    def test_empty_payload_rejected(self, client, app_context):
        client.post("/api/serial/connect", json={"port": "COM3"})

        resp = client.post("/api/serial/send", json={"data": ""})

        assert resp.status_code == 422
        assert len(app_context.traffic) == 0
