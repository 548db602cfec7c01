"""Unit tests for the click command-line entry points."""

from __future__ import annotations

import json
from unittest.mock import patch

from click.testing import CliRunner

from xtools.cli.main import cli
from xtools.serial.models import PortInfo

PORTS = [
    PortInfo(name="/dev/ttyUSB0", description="FTDI - FT232R USB UART"),
    PortInfo(name="/dev/ttyS0", description="Unknown"),
]


class TestPortsCommand:
    def test_lists_ports(self):
        with patch("xtools.serial.ports.list_ports_or_warn", return_value=(PORTS, None)):
            result = CliRunner().invoke(cli, ["ports"])

        assert result.exit_code == 0
        assert "[1] /dev/ttyUSB0 - FTDI - FT232R USB UART" in result.output
        assert "[2] /dev/ttyS0 - Unknown" in result.output

    def test_json_output(self):
        with patch("xtools.serial.ports.list_ports_or_warn", return_value=(PORTS, None)):
            result = CliRunner().invoke(cli, ["--json-output", "ports"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0] == {
            "name": "/dev/ttyUSB0",
            "description": "FTDI - FT232R USB UART",
        }

    def test_no_ports(self):
        with patch("xtools.serial.ports.list_ports_or_warn", return_value=([], None)):
            result = CliRunner().invoke(cli, ["ports"])

        assert result.exit_code == 0
        assert "No serial ports found." in result.output


class TestSerialMonitor:
    def test_no_ports_and_no_port_given(self):
        with patch("xtools.serial.ports.list_ports_or_warn", return_value=([], None)):
            result = CliRunner().invoke(cli, ["serial"])

        assert result.exit_code == 0
        assert "No serial ports found." in result.output

    def test_connect_failure_exits_nonzero(self):
        with patch("xtools.serial.ports.list_ports_or_warn", return_value=([], None)), \
                patch("xtools.context.AppContext.connect", side_effect=_device_error()):
            result = CliRunner().invoke(cli, ["serial", "--port", "COM9"])

        assert result.exit_code == 1
        assert "ERROR: could not open port COM9" in result.output


def _device_error():
    from xtools.exceptions import DeviceError
    return DeviceError("could not open port COM9")
