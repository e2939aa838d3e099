# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS bluetooth and temperature collection.

Both values have several possible sources. Optional third-party tools
(blueutil, istats, osx-cpu-temp) are tried first, then the built-in
tools, then estimates.
"""

import json
import logging
import re
from typing import List, Optional

from ...core.extract import FieldRule, extract_fields, to_int
from ...core.fallback import first_available
from ...core.process import check_command_available, command_output
from ..hardware import classify_bluetooth_device, estimate_temperature, zero_temperature
from ..models import BluetoothDevice, BluetoothInfo, TemperatureReading
from .profiler import profiler_section, system_profiler_text

logger = logging.getLogger(__name__)

BLUETOOTH_STATE_PATTERN = r"(?:State|Bluetooth Power):\s*(On|Off)"

THERMAL_LEVEL_RULES = (
    FieldRule("cpu", r"^machdep\.xcpm\.cpu_thermal_level:\s*(\d+)", to_int),
    FieldRule("gpu", r"^hw\.gpufrequency\.thermal_level:\s*(\d+)", to_int),
)

# sysctl thermal levels are scaled to an approximate temperature
THERMAL_LEVEL_SCALE = 10


def parse_blueutil(power_output: str, devices_output: str) -> Optional[BluetoothInfo]:
    """
    Parse blueutil power state and connected devices.

    Args:
        power_output: `blueutil --power` output ("1" or "0")
        devices_output: `blueutil --connected --format json` output

    Returns:
        BluetoothInfo, or None when the power state is unknown
    """
    state = (power_output or "").strip()
    if state not in ("0", "1"):
        return None

    info = BluetoothInfo(is_available=True, enabled=state == "1")
    info.status = "On" if info.enabled else "Off"
    try:
        devices = json.loads(devices_output) if devices_output else []
    except ValueError:
        devices = []
    for device in devices:
        name = device.get("name") or ""
        info.devices.append(
            BluetoothDevice(
                name=name,
                address=device.get("address", ""),
                type=classify_bluetooth_device(name),
                connected=bool(device.get("connected", True)),
            )
        )
    return info


def parse_bluetooth_profiler(text: str) -> Optional[BluetoothInfo]:
    """
    Parse `system_profiler SPBluetoothDataType` text output.

    Args:
        text: system_profiler output

    Returns:
        BluetoothInfo, or None when the output has no controller state
    """
    state = re.search(BLUETOOTH_STATE_PATTERN, text or "")
    if not state:
        return None

    info = BluetoothInfo(is_available=True, enabled=state.group(1) == "On", status=state.group(1))
    block = profiler_section(text, "Connected")
    device_indent = None
    current = None
    for line in block.splitlines():
        if not line.strip():
            continue
        indent = len(line) - len(line.lstrip())
        header = re.match(r"^\s*([^:]+):\s*$", line)
        if header and (device_indent is None or indent <= device_indent):
            device_indent = indent
            current = BluetoothDevice(name=header.group(1).strip(), connected=True)
            current.type = classify_bluetooth_device(current.name)
            info.devices.append(current)
            continue
        if current is None:
            continue
        address = re.match(r"^\s*Address:\s*([0-9A-Fa-f:-]+)", line)
        if address:
            current.address = address.group(1)
        minor = re.match(r"^\s*Minor Type:\s*(.+)$", line)
        if minor and current.type == "Other":
            current.type = minor.group(1).strip()
    return info


def collect_bluetooth(timeout: Optional[float] = None) -> BluetoothInfo:
    """
    Collect bluetooth state and connected devices.

    Args:
        timeout: Timeout for system_profiler

    Returns:
        BluetoothInfo, empty when no source answered
    """

    def from_blueutil() -> Optional[BluetoothInfo]:
        if not check_command_available("blueutil"):
            return None
        return parse_blueutil(
            command_output(["blueutil", "--power"]) or "",
            command_output(["blueutil", "--connected", "--format", "json"]) or "",
        )

    def from_system_profiler() -> Optional[BluetoothInfo]:
        return parse_bluetooth_profiler(system_profiler_text("SPBluetoothDataType", timeout) or "")

    return first_available([from_blueutil, from_system_profiler], default=BluetoothInfo())


def parse_celsius(output: str) -> float:
    """Return the first temperature in an output such as "CPU temp: 45.5°C"."""
    match = re.search(r"(-?\d+(?:\.\d+)?)\s*°?\s*C\b", output or "")
    return float(match.group(1)) if match else 0.0


def istats_temperature() -> List[TemperatureReading]:
    if not check_command_available("istats"):
        return []
    value = parse_celsius(command_output(["istats", "cpu", "temp"]) or "")
    return [TemperatureReading(name="CPU", temperature=value, location="CPU")] if value > 0 else []


def osx_cpu_temp_temperature() -> List[TemperatureReading]:
    if not check_command_available("osx-cpu-temp"):
        return []
    value = parse_celsius(command_output(["osx-cpu-temp"]) or "")
    return [TemperatureReading(name="CPU", temperature=value, location="CPU")] if value > 0 else []


def parse_thermal_levels(output: str) -> List[TemperatureReading]:
    """
    Convert sysctl thermal levels into approximate readings.

    Args:
        output: `sysctl -a` output

    Returns:
        Readings for every non-zero level
    """
    readings = []
    for key, value in extract_fields(output, THERMAL_LEVEL_RULES).items():
        if value > 0:
            readings.append(
                TemperatureReading(
                    name=f"{key.upper()} thermal level (estimated)",
                    temperature=float(value * THERMAL_LEVEL_SCALE),
                    location=key.upper(),
                )
            )
    return readings


def sysctl_temperature() -> List[TemperatureReading]:
    return parse_thermal_levels(command_output(["sysctl", "-a"]) or "")


def collect_temperatures() -> List[TemperatureReading]:
    """
    Read temperatures from the first source that provides data.

    Returns:
        List of TemperatureReading, a single zero reading when nothing answered
    """
    providers = [istats_temperature, osx_cpu_temp_temperature, sysctl_temperature, estimate_temperature]
    return first_available(providers, default=zero_temperature())
