# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS battery and power adapter collection.

Battery state comes from `pmset -g batt`; health figures and the AC
charger come from `system_profiler SPPowerDataType`, with the
AppleSmartBattery registry entry as a fallback.
"""

import logging
import re
from typing import Optional

from ...core.extract import FieldRule, assign_fields, extract_fields, to_int
from ...core.process import command_output
from ..models import ACAdapterInfo, BatteryInfo
from .profiler import profiler_section, system_profiler_text

logger = logging.getLogger(__name__)

PMSET_STATUS_LABELS = {
    "charging": "Charging",
    "finishing charge": "Charging",
    "discharging": "Discharging",
    "charged": "Fully Charged",
    "ac attached": "AC Attached",
}

BATTERY_HEALTH_RULES = (
    FieldRule("cycle_count", r"Cycle Count:\s*(\d+)", to_int),
    FieldRule("health", r"Condition:\s*(.+)$"),
    FieldRule("max_capacity", r"Maximum Capacity:\s*(\d+)%", to_int),
)

SMART_BATTERY_RULES = (
    FieldRule("cycle_count", r'"CycleCount" = (\d+)', to_int),
    FieldRule("percentage", r'"CurrentCapacity" = (\d+)', to_int),
    FieldRule("is_charging", r'"IsCharging" = (Yes|No)', lambda v: v == "Yes"),
)

AC_CHARGER_RULES = (
    FieldRule("connected", r"Connected:\s*(Yes|No)", lambda v: v == "Yes"),
    FieldRule("wattage", r"Wattage \(W\):\s*(\d+)", to_int),
    FieldRule("name", r"^\s*Name:\s*(.+)$"),
    FieldRule("serial_number", r"Serial Number:\s*(.+)$"),
    FieldRule("manufacturer", r"Manufacturer:\s*(.+)$"),
)


def parse_pmset_battery(output: str, battery: BatteryInfo) -> BatteryInfo:
    """
    Parse `pmset -g batt` output.

    Args:
        output: pmset stdout
        battery: Battery section to fill

    Returns:
        The battery section
    """
    if not output or "No batteries available" in output or "%" not in output:
        battery.is_present = False
        return battery

    battery.is_present = True
    percent = re.search(r"(\d+)%", output)
    if percent:
        battery.percentage = int(percent.group(1))

    state = re.search(r"\d+%;\s*([^;]+);", output)
    if state:
        raw_state = state.group(1).strip().lower()
        battery.status = PMSET_STATUS_LABELS.get(raw_state, raw_state.title())
        battery.is_charging = raw_state in ("charging", "finishing charge")

    remaining = re.search(r"(\d+):(\d+) remaining", output)
    if remaining:
        battery.time_remaining = int(remaining.group(1)) * 60 + int(remaining.group(2))
    return battery


def parse_ac_charger(power_text: str, adapter: ACAdapterInfo) -> ACAdapterInfo:
    """
    Parse the "AC Charger Information" block of SPPowerDataType.

    Args:
        power_text: system_profiler SPPowerDataType text output
        adapter: Adapter section to fill

    Returns:
        The adapter section
    """
    block = profiler_section(power_text, "AC Charger Information")
    if not block.strip():
        return adapter
    adapter.connected = True
    assign_fields(adapter, extract_fields(block, AC_CHARGER_RULES))
    if not adapter.wattage and adapter.name:
        watts = re.search(r"(\d+)W", adapter.name)
        if watts:
            adapter.wattage = int(watts.group(1))
    return adapter


def collect_power(battery: BatteryInfo, adapter: ACAdapterInfo, timeout: Optional[float] = None) -> None:
    """
    Populate battery and AC adapter sections.

    Args:
        battery: Battery section to fill
        adapter: Adapter section to fill
        timeout: Timeout for system_profiler
    """
    pmset = command_output(["pmset", "-g", "batt"])
    if pmset is not None:
        parse_pmset_battery(pmset, battery)
    else:
        registry = extract_fields(command_output(["ioreg", "-rn", "AppleSmartBattery"]) or "", SMART_BATTERY_RULES)
        if registry:
            battery.is_present = True
            assign_fields(battery, registry)

    power_text = system_profiler_text("SPPowerDataType", timeout) or ""
    if battery.is_present:
        health_block = profiler_section(power_text, "Health Information") or power_text
        assign_fields(battery, extract_fields(health_block, BATTERY_HEALTH_RULES))

    parse_ac_charger(power_text, adapter)
