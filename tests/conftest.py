# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Shared fixtures for the sysspector test suite.

External commands never run during tests: the global process executor is
replaced with FakeExecutor, which answers from canned outputs registered
per command prefix.
"""

import logging
import os
from typing import List, Optional, Sequence, Tuple

import pytest

from sysspector.utils.config.config import CONFIG_ENV_VAR, ENVIRONMENT_OVERRIDES
from sysspector.utils.core import process
from sysspector.utils.core.process import ProcessResult
from sysspector.utils.system.models import (
    AppInfo,
    BluetoothDevice,
    BluetoothInfo,
    DiskInfo,
    DiskUsage,
    HostEntry,
    LatencyTarget,
    NetworkInterface,
    ProcessInfo,
    RouteEntry,
    SystemReport,
    TemperatureReading,
)

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def read_fixture(name: str) -> str:
    """Read a command output sample from tests/fixtures."""
    with open(os.path.join(FIXTURES_DIR, name), "r", encoding="utf-8") as f:
        return f.read()


class FakeExecutor:
    """
    Process executor answering from registered outputs.

    A registered command matches any invocation starting with the same
    arguments. Unregistered commands behave like a missing binary.
    """

    def __init__(self):
        self.responses: List[Tuple[Tuple[str, ...], ProcessResult]] = []
        self.calls: List[List[str]] = []

    def add(self, command: Sequence[str], stdout: str = "", returncode: int = 0, stderr: str = "") -> None:
        self.responses.append(
            (tuple(command), ProcessResult(returncode=returncode, stdout=stdout, stderr=stderr, command=list(command)))
        )

    def run(
        self,
        command,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        cmd = command.split() if isinstance(command, str) else [str(arg) for arg in command]
        self.calls.append(cmd)
        for prefix, result in self.responses:
            if tuple(cmd[: len(prefix)]) == prefix:
                return result
        return ProcessResult(returncode=127, stderr=f"Command not found: {cmd[0]}", command=cmd, not_found=True)

    def called(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)


@pytest.fixture
def fake_executor(monkeypatch):
    """Replace the global process executor for the duration of a test."""
    executor = FakeExecutor()
    monkeypatch.setattr(process, "_global_executor", executor)
    return executor


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep user settings from the environment out of the tests."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    for var in ENVIRONMENT_OVERRIDES:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by the CLI logging setup."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


@pytest.fixture
def sample_report() -> SystemReport:
    """A report with every section populated."""
    report = SystemReport()

    identity = report.identity
    identity.hostname = "Café-MacBook"
    identity.computer_name = "Café's MacBook Pro"
    identity.os = "darwin"
    identity.system_version = "macOS 14.2.1 (23C71)"
    identity.model = "MacBook Pro"
    identity.model_id = "MacBookPro18,3"
    identity.serial_number = "C02XYZ123"
    identity.uuid = "12345678-ABCD-EF01-2345-6789ABCDEF01"
    identity.uptime_seconds = 90061
    identity.uptime = "1d 1h 1m"

    report.cpu.model = "Apple M1 Pro"
    report.cpu.physical_cores = 10
    report.cpu.logical_cores = 10
    report.cpu.architecture = "arm64"
    report.cpu.apple_silicon = True

    report.memory.total = 17179869184
    report.memory.type = "LPDDR5"
    report.memory.usage.total = 17179869184
    report.memory.usage.used = 8589934592
    report.memory.usage.free = 8589934592
    report.memory.usage.used_percent = 50.0

    report.disks = [DiskInfo(name="disk0", model="APPLE SSD AP0512R", size=500277790720)]
    report.disk_usage = [
        DiskUsage(mount_point="/", filesystem="apfs", total=494384795648, used=250000000000, free=244384795648, used_percent=50.6)
    ]

    report.battery.is_present = True
    report.battery.percentage = 85
    report.battery.status = "Discharging"
    report.battery.cycle_count = 123
    report.battery.health = "Normal"
    report.battery.time_remaining = 272
    report.ac_adapter.name = "96W USB-C Power Adapter"
    report.ac_adapter.wattage = 96

    report.bluetooth = BluetoothInfo(
        is_available=True,
        enabled=True,
        status="On",
        devices=[BluetoothDevice(name="Magic Keyboard", address="11:22:33:44:55:66", type="Keyboard", connected=True)],
    )
    report.temperatures = [TemperatureReading(name="CPU", temperature=45.5, location="CPU")]

    net = report.network
    net.wifi.ssid = "TestNet"
    net.wifi.is_connected = True
    net.wifi.rssi = -55
    net.wifi.noise = -90
    net.wifi.channel = 36
    net.wifi.frequency = "5GHz"
    net.ip_address = "192.168.1.20"
    net.mac_address = "a4:83:e7:12:34:56"
    net.interfaces = [NetworkInterface(name="en0", mac_address="a4:83:e7:12:34:56", addresses=["192.168.1.20"], is_up=True)]
    net.public_ip = "203.0.113.7"
    net.country_code = "US"
    net.dns.servers = ["192.168.1.1", "8.8.8.8"]
    net.dns.host_entries = [HostEntry(ip="127.0.0.1", hostname="localhost")]
    net.latency.targets = [LatencyTarget(name="Google DNS", host="8.8.8.8", min=10.1, avg=12.5, max=15.8, jitter=1.2)]
    net.latency.avg_latency = 12.5
    net.routes = [RouteEntry(destination="default", gateway="192.168.1.1", flags="UGScg", interface="en0")]
    net.traffic_rate = "15.00 KB/s"

    report.software.installed_apps = [AppInfo(name="Safari", version="17.2", install_date="2024-01-15", path="/Applications/Safari.app")]
    report.software.running_apps = [ProcessInfo(pid=123, name="Finder", cpu_percent=1.5, memory=104857600, network_usage=512.0)]
    return report


@pytest.fixture
def fixture_text():
    """Return a reader for command output samples."""
    return read_fixture
