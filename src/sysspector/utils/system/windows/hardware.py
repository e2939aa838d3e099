# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Windows hardware collection.

Static hardware details are read from a fixed set of WMI classes. Power,
bluetooth and temperature use WMI where it reports them and PowerShell or
OpenHardwareMonitor otherwise.
"""

import logging
import os
import platform
import re
import socket
from typing import Any, Dict, List, Optional

import psutil

from ...core.extract import FieldRule, extract_fields, find_all, to_int
from ...core.fallback import first_available
from ...core.process import command_output, run_powershell
from ..hardware import (
    classify_bluetooth_device,
    cpuinfo_brand,
    estimate_temperature,
    os_label,
    zero_temperature,
)
from ..models import (
    ACAdapterInfo,
    BatteryInfo,
    BluetoothDevice,
    BluetoothInfo,
    CPUInfo,
    DiskInfo,
    IdentityInfo,
    MemoryInfo,
    TemperatureReading,
)
from .wmi_client import WMIClient, powershell_json

logger = logging.getLogger(__name__)

# Win32_PhysicalMemory MemoryType / SMBIOSMemoryType codes
MEMORY_TYPE_MAP = {
    0: "Unknown",
    1: "Other",
    2: "DRAM",
    3: "Synchronous DRAM",
    4: "Cache DRAM",
    5: "EDO",
    6: "EDRAM",
    7: "VRAM",
    8: "SRAM",
    9: "RAM",
    10: "ROM",
    11: "Flash",
    12: "EEPROM",
    13: "FEPROM",
    14: "EPROM",
    15: "CDRAM",
    16: "3DRAM",
    17: "SDRAM",
    18: "SGRAM",
    19: "RDRAM",
    20: "DDR",
    21: "DDR2",
    22: "DDR2 FB-DIMM",
    24: "DDR3",
    25: "FBD2",
    26: "DDR4",
    27: "LPDDR",
    28: "LPDDR2",
    29: "LPDDR3",
    30: "LPDDR4",
    31: "LPDDR5",
    34: "DDR5",
    35: "LPDDR5",
}

BATTERY_STATUS_LABELS = {
    1: "Discharging",
    2: "Charging",
    3: "Fully Charged",
}

# Battery status codes meaning the system runs on AC power
AC_POWERED_STATUSES = (2, 3)

BATTERY_LISTING_RULES = (
    FieldRule("status_code", r"^BatteryStatus\s*:\s*(\d+)", to_int),
    FieldRule("percentage", r"^EstimatedChargeRemaining\s*:\s*(\d+)", to_int),
    FieldRule("name", r"^Name\s*:\s*(.+)$"),
)

OHM_PATH = os.path.join("C:\\", "Program Files", "OpenHardwareMonitor", "OpenHardwareMonitor.exe")
OHM_TEMPERATURE_PATTERN = r"\+-\s*(.+?)\s*:\s*(-?\d+(?:\.\d+)?)[^(\n]*\(/[^)]*/temperature/\d+\)"

# Names of PnP entries that belong to the bluetooth stack rather than a device
BLUETOOTH_STACK_KEYWORDS = (
    "radio",
    "enumerator",
    "adapter",
    "protocol",
    "transport",
    "rfcomm",
    "service",
    "le generic",
    "wireless bluetooth",
)


def _int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _str(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def memory_type_name(code: int) -> str:
    """Map a WMI memory type code to its name."""
    return MEMORY_TYPE_MAP.get(code, f"Unknown ({code})")


def memory_type_from_modules(modules: List[Dict[str, Any]]) -> str:
    """
    Determine the memory type of the installed modules.

    MemoryType is 0 on most modern systems; SMBIOSMemoryType is used then.

    Args:
        modules: Win32_PhysicalMemory rows with MemoryType and SMBIOSMemoryType

    Returns:
        Memory type name of the first module, "Unknown" without modules
    """
    if not modules:
        return "Unknown"
    module = modules[0]
    code = _int(module.get("MemoryType"))
    if code in (0, 1, 2):
        code = _int(module.get("SMBIOSMemoryType")) or code
    return memory_type_name(code)


def collect_identity(client: WMIClient, identity: IdentityInfo) -> Dict[str, Any]:
    """
    Populate hostname, model, serial number and UUID.

    Args:
        client: WMI client
        identity: Identity section to fill

    Returns:
        The Win32_ComputerSystem row
    """
    identity.hostname = socket.gethostname()
    identity.os = os_label("windows", platform.win32_ver()[1])

    system = client.first("Win32_ComputerSystem", ["Model", "Name", "SystemSKUNumber", "TotalPhysicalMemory"])
    identity.model = _str(system.get("Model"))
    identity.model_id = _str(system.get("SystemSKUNumber"))
    identity.computer_name = _str(system.get("Name"))

    identity.serial_number = _str(client.first("Win32_BIOS", ["SerialNumber"]).get("SerialNumber"))
    identity.uuid = _str(client.first("Win32_ComputerSystemProduct", ["UUID"]).get("UUID"))
    return system


def collect_cpu(client: WMIClient, cpu: CPUInfo) -> None:
    """Populate CPU model and core counts from Win32_Processor."""
    processor = client.first("Win32_Processor", ["Name", "NumberOfCores", "NumberOfLogicalProcessors"])
    cpu.physical_cores = _int(processor.get("NumberOfCores")) or psutil.cpu_count(logical=False) or 0
    cpu.logical_cores = _int(processor.get("NumberOfLogicalProcessors")) or psutil.cpu_count(logical=True) or 0
    cpu.architecture = platform.machine()
    cpu.apple_silicon = False
    cpu.model = first_available([lambda: _str(processor.get("Name")), cpuinfo_brand], default="")


def collect_memory(client: WMIClient, memory: MemoryInfo, total: int = 0) -> None:
    """
    Populate installed memory size and type.

    Args:
        client: WMI client
        memory: Memory section to fill
        total: TotalPhysicalMemory from Win32_ComputerSystem, psutil is used when zero
    """
    memory.total = total or psutil.virtual_memory().total
    modules = client.query("Win32_PhysicalMemory", ["Capacity", "MemoryType", "SMBIOSMemoryType"])
    memory.type = memory_type_from_modules(modules)


def parse_disk_rows(rows: List[Dict[str, Any]]) -> List[DiskInfo]:
    """Build DiskInfo entries from Win32_DiskDrive rows."""
    return [
        DiskInfo(
            name=_str(row.get("Caption")),
            model=_str(row.get("Model")),
            size=_int(row.get("Size")),
            serial=_str(row.get("SerialNumber")),
        )
        for row in rows
    ]


def collect_disks(client: WMIClient) -> List[DiskInfo]:
    return parse_disk_rows(client.query("Win32_DiskDrive", ["Caption", "Model", "Size", "SerialNumber"]))


def apply_battery_status(battery: BatteryInfo, status_code: int) -> None:
    """Set the battery status label and charging flag from a Win32_Battery code."""
    battery.status = BATTERY_STATUS_LABELS.get(status_code, "Unknown")
    battery.is_charging = status_code == 2


def parse_battery_listing(output: str, battery: BatteryInfo) -> Optional[int]:
    """
    Parse a `Get-WmiObject Win32_Battery` list dump.

    Args:
        output: PowerShell stdout in "Name : Value" list form
        battery: Battery section to fill

    Returns:
        The battery status code, or None when no battery was listed
    """
    values = extract_fields(output or "", BATTERY_LISTING_RULES)
    if "status_code" not in values and "percentage" not in values:
        return None
    battery.is_present = True
    battery.percentage = values.get("percentage", 0)
    status_code = values.get("status_code", 0)
    apply_battery_status(battery, status_code)
    return status_code


def collect_power(
    client: WMIClient, battery: BatteryInfo, adapter: ACAdapterInfo, timeout: Optional[float] = None
) -> None:
    """
    Populate battery and AC adapter sections.

    Args:
        client: WMI client
        battery: Battery section to fill
        adapter: Adapter section to fill
        timeout: Timeout for the PowerShell fallback
    """
    status_code: Optional[int] = None
    batteries = client.query("Win32_Battery", ["BatteryStatus", "EstimatedChargeRemaining", "Name"])
    if batteries:
        row = batteries[0]
        battery.is_present = True
        battery.percentage = _int(row.get("EstimatedChargeRemaining"))
        status_code = _int(row.get("BatteryStatus"))
        apply_battery_status(battery, status_code)
    else:
        listing = run_powershell(
            "Get-WmiObject -Class Win32_Battery | Format-List BatteryStatus, EstimatedChargeRemaining, Name",
            timeout=timeout,
        )
        status_code = parse_battery_listing(listing or "", battery)

    if status_code is None:
        battery.is_present = False
        return

    adapter.connected = status_code in AC_POWERED_STATUSES
    portable = client.first("Win32_PortableBattery", ["DeviceID", "Name", "Manufacturer"])
    if portable:
        adapter.name = _str(portable.get("Name"))
        adapter.serial_number = _str(portable.get("DeviceID"))
        adapter.manufacturer = _str(portable.get("Manufacturer"))


def _format_bluetooth_address(instance_id: str) -> str:
    match = re.search(r"(?:DEV_|_|&)([0-9A-F]{12})(?![0-9A-F])", instance_id or "", re.IGNORECASE)
    if not match:
        return ""
    raw = match.group(1).upper()
    return ":".join(raw[i : i + 2] for i in range(0, 12, 2))


def parse_pnp_bluetooth(rows: List[Dict[str, Any]]) -> Optional[BluetoothInfo]:
    """
    Build bluetooth state from Get-PnpDevice rows of the Bluetooth class.

    Args:
        rows: Rows with FriendlyName, Status and InstanceId

    Returns:
        BluetoothInfo, or None when no bluetooth device exists
    """
    if not rows:
        return None

    info = BluetoothInfo(is_available=True)
    info.enabled = any(_str(row.get("Status")) == "OK" for row in rows)
    info.status = "On" if info.enabled else "Off"
    for row in rows:
        name = _str(row.get("FriendlyName"))
        if not name or _str(row.get("Status")) != "OK":
            continue
        if any(keyword in name.lower() for keyword in BLUETOOTH_STACK_KEYWORDS):
            continue
        info.devices.append(
            BluetoothDevice(
                name=name,
                address=_format_bluetooth_address(_str(row.get("InstanceId"))),
                type=classify_bluetooth_device(name),
                connected=True,
            )
        )
    return info


def collect_bluetooth(timeout: Optional[float] = None) -> BluetoothInfo:
    rows = powershell_json("Get-PnpDevice -Class Bluetooth | Select-Object FriendlyName, Status, InstanceId", timeout)
    return parse_pnp_bluetooth(rows) or BluetoothInfo()


def parse_ohm_report(output: str) -> List[TemperatureReading]:
    """
    Parse temperature sensors from an OpenHardwareMonitor text report.

    Sensor lines in the report tree end with their identifier, and
    temperature sensors are those whose identifier contains /temperature/.

    Args:
        output: Report text

    Returns:
        One reading per temperature sensor line
    """
    readings = []
    for name, value in find_all(OHM_TEMPERATURE_PATTERN, output or ""):
        readings.append(TemperatureReading(name=name, temperature=float(value), location="System"))
    return readings


def ohm_temperature() -> List[TemperatureReading]:
    if not os.path.exists(OHM_PATH):
        return []
    return parse_ohm_report(command_output([OHM_PATH, "/report"]) or "")


def thermal_zone_readings(rows: List[Dict[str, Any]]) -> List[TemperatureReading]:
    """
    Convert MSAcpi_ThermalZoneTemperature rows to readings.

    CurrentTemperature is reported in tenths of a Kelvin.
    """
    readings = []
    for row in rows:
        raw = _int(row.get("CurrentTemperature"))
        if raw <= 0:
            continue
        readings.append(
            TemperatureReading(
                name=_str(row.get("InstanceName")) or "Thermal Zone",
                temperature=round(raw / 10.0 - 273.15, 1),
                location="ACPI",
            )
        )
    return readings


def sensor_readings(rows: List[Dict[str, Any]]) -> List[TemperatureReading]:
    """Convert Win32_TemperatureSensor rows (tenths of a degree) to readings."""
    return [
        TemperatureReading(
            name=_str(row.get("Name")) or "Sensor",
            temperature=_int(row.get("CurrentReading")) / 10.0,
            location=_str(row.get("Location")),
        )
        for row in rows
        if _int(row.get("CurrentReading")) > 0
    ]


def collect_temperatures(client: WMIClient) -> List[TemperatureReading]:
    """
    Read temperatures from the first source that provides data.

    Args:
        client: WMI client

    Returns:
        List of TemperatureReading, a single zero reading when nothing answered
    """

    def acpi_thermal_zone() -> List[TemperatureReading]:
        rows = client.query("MSAcpi_ThermalZoneTemperature", ["InstanceName", "CurrentTemperature"], "root\\wmi")
        return thermal_zone_readings(rows)

    def temperature_sensor() -> List[TemperatureReading]:
        return sensor_readings(client.query("Win32_TemperatureSensor", ["Name", "CurrentReading", "Location"]))

    providers = [ohm_temperature, acpi_thermal_zone, temperature_sensor, estimate_temperature]
    return first_available(providers, default=zero_temperature())
