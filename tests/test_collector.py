# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the collector base class, the registry and full collection runs.
"""

import logging
import sys

import pytest
import requests

from sysspector.utils.system import collector as collector_module
from sysspector.utils.system import collect_system_report, network
from sysspector.utils.system.collector import (
    PlatformCollector,
    UnsupportedPlatformError,
    get_collector,
    get_supported_systems,
    register_collector,
)
from sysspector.utils.system.darwin import DarwinCollector
from sysspector.utils.system.darwin import hardware as darwin_hardware
from sysspector.utils.system.darwin import sensors as darwin_sensors
from sysspector.utils.system.models import SystemReport
from sysspector.utils.system.windows import WindowsCollector
from sysspector.utils.system.windows import hardware as windows_hardware


class PartialCollector(PlatformCollector):
    """Collector whose network stage always fails."""

    name = "partial"
    system_name = "Partial"

    def collect_static(self, report):
        report.identity.hostname = "partial-host"

    def collect_dynamic(self, report):
        report.battery.percentage = 42

    def collect_network(self, report):
        raise RuntimeError("interface table unreadable")

    def collect_software(self, report):
        report.identity.system_version = "PartialOS 1.0"


OFFLINE_SETTINGS = {
    "network": {
        "latency": {"enabled": False},
        "trace": {"enabled": False},
        "traffic_sample_interval": 0,
    },
    "software": {"process_network_usage": False, "process_limit": 5},
}


@pytest.fixture
def offline(monkeypatch, fake_executor):
    """No command succeeds and no HTTP service answers."""

    def unreachable(url, timeout):
        raise requests.ConnectionError("network unreachable")

    monkeypatch.setattr(network.requests, "get", unreachable)
    monkeypatch.setattr(darwin_hardware, "cpuinfo_brand", lambda: "")
    monkeypatch.setattr(darwin_sensors, "check_command_available", lambda command: False)
    monkeypatch.setattr(darwin_sensors, "estimate_temperature", lambda: [])
    return fake_executor


def test_failing_stage_does_not_stop_others(caplog):
    collector = PartialCollector()

    with caplog.at_level(logging.WARNING):
        report = collector.collect()

    assert report.identity.hostname == "partial-host"
    assert report.battery.percentage == 42
    assert report.identity.system_version == "PartialOS 1.0"
    assert collector.errors == ["Failed to collect network information: interface table unreadable"]
    assert "Failed to collect network information" in caplog.text


def test_run_step_returns_none_on_failure():
    collector = PartialCollector()

    assert collector.run_step("answer", lambda x: x * 2, 21) == 42
    assert collector.run_step("division", lambda: 1 / 0) is None
    assert collector.errors[0].startswith("Failed to collect division:")


def test_settings_use_dot_notation():
    collector = PartialCollector({"commands": {"query_timeout": 7}})

    assert collector.query_timeout == 7
    assert collector.profiler_timeout == 120
    assert collector.setting("network.latency.ping_count", 5) == 5


def test_get_collector_for_unknown_system():
    with pytest.raises(UnsupportedPlatformError, match="Unsupported operating system: Plan9"):
        get_collector("Plan9")


def test_get_collector_for_macos():
    collector = get_collector("Darwin", {"commands": {"query_timeout": 3}})

    assert isinstance(collector, DarwinCollector)
    assert collector.query_timeout == 3


def test_registry(monkeypatch):
    monkeypatch.setattr(collector_module, "_COLLECTORS", dict(collector_module._COLLECTORS))

    register_collector("Partial", f"{__name__}:PartialCollector")

    assert get_supported_systems() == ["Darwin", "Partial", "Windows"]
    assert isinstance(get_collector("Partial"), PartialCollector)


def test_collect_system_report_returns_errors(monkeypatch):
    monkeypatch.setattr(collector_module, "_COLLECTORS", {"Partial": f"{__name__}:PartialCollector"})

    report, errors = collect_system_report({}, system_name="Partial")

    assert isinstance(report, SystemReport)
    assert report.identity.hostname == "partial-host"
    assert len(errors) == 1


def test_collect_system_report_unsupported(monkeypatch):
    monkeypatch.setattr(collector_module.platform, "system", lambda: "Plan9")

    with pytest.raises(UnsupportedPlatformError):
        collect_system_report({})


def test_macos_collection_without_any_tool(offline, tmp_path):
    """Every command failing still yields a complete, mostly empty report."""
    settings = dict(OFFLINE_SETTINGS, software={**OFFLINE_SETTINGS["software"], "application_dirs": [str(tmp_path)]})
    collector = DarwinCollector(settings)

    report = collector.collect()

    assert isinstance(report, SystemReport)
    assert report.identity.os.startswith("darwin")
    assert report.identity.model_id == ""
    assert report.identity.system_version == ""
    assert report.disks == []
    assert not report.battery.is_present
    assert not report.network.wifi.is_connected
    assert report.network.public_ip == ""
    assert report.network.traffic_rate == ""
    assert report.network.latency.targets == []
    assert report.software.installed_apps == []
    assert [(t.name, t.temperature) for t in report.temperatures] == [("CPU", 0.0)]
    stage_failures = [e for e in collector.errors if " information: " in e]
    assert stage_failures == []
    report.to_json()


def test_windows_collection_without_any_tool(offline, monkeypatch):
    """Without the wmi package or PowerShell every section falls back to empty values."""
    monkeypatch.setitem(sys.modules, "wmi", None)
    monkeypatch.setattr(windows_hardware, "cpuinfo_brand", lambda: "")
    monkeypatch.setattr(windows_hardware, "estimate_temperature", lambda: [])
    collector = WindowsCollector(OFFLINE_SETTINGS)

    report = collector.collect()

    assert report.identity.os.startswith("windows")
    assert report.identity.serial_number == ""
    assert report.identity.uuid == ""
    assert report.cpu.logical_cores > 0
    assert report.memory.total > 0
    assert report.memory.type == "Unknown"
    assert report.disks == []
    assert not report.battery.is_present
    assert not report.bluetooth.is_available
    assert not report.network.wifi.is_connected
    assert not report.network.vpn.is_connected
    assert report.network.public_ip == ""
    assert report.network.routes == []
    assert report.software.installed_apps == []
    assert [(t.name, t.temperature) for t in report.temperatures] == [("CPU", 0.0)]
    assert collector.errors == []
    assert offline.called("powershell")
    report.to_json()
