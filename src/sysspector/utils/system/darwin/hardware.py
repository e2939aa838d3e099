# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS static hardware collection.

Identity, CPU, memory and disk details come from sysctl, ioreg and
system_profiler. Each value is described by an extraction rule; the
tables below are the single place where the scraped keys are listed.
"""

import logging
import platform
import re
import socket
from typing import Any, Dict, List, Optional

import psutil

from ...core.extract import CommandSpec, FieldRule, assign_fields, extract_fields, run_extractions, to_int
from ...core.fallback import first_available
from ...core.process import command_output, run_command
from ..hardware import cpuinfo_brand, os_label
from ..models import CPUInfo, DiskInfo, IdentityInfo, MemoryInfo
from .profiler import system_profiler_items, system_profiler_text

logger = logging.getLogger(__name__)

# Identity sources, in priority order
IDENTITY_SPECS = (
    CommandSpec(("sysctl", "-n", "hw.model"), (FieldRule("model_id", r"^\s*(\S+)"),)),
    CommandSpec(
        ("ioreg", "-c", "IOPlatformExpertDevice", "-d", "2"),
        (
            FieldRule("serial_number", r'"IOPlatformSerialNumber" = "([^"]+)"'),
            FieldRule("uuid", r'"IOPlatformUUID" = "([^"]+)"'),
        ),
    ),
)

HARDWARE_OVERVIEW_RULES = (
    FieldRule("model", r"Model Name:\s*(.+)$"),
    FieldRule("model_id", r"Model Identifier:\s*(.+)$"),
    FieldRule("serial_number", r"Serial Number \(system\):\s*(.+)$"),
    FieldRule("uuid", r"Hardware UUID:\s*(.+)$"),
    FieldRule("chip", r"Chip:\s*(.+)$"),
)

CPU_SYSCTL_RULES = (
    FieldRule("physical_cores", r"^hw\.physicalcpu:\s*(\d+)", to_int),
    FieldRule("logical_cores", r"^hw\.logicalcpu:\s*(\d+)", to_int),
    FieldRule("architecture", r"^hw\.machine:\s*(\S+)"),
    FieldRule("memory_total", r"^hw\.memsize:\s*(\d+)", to_int),
)

MEMORY_TYPE_RULES = (FieldRule("type", r"^\s*Type:\s*((?:LP)?DDR\w*)"),)

# Apple Silicon model identifiers and their chips
APPLE_SILICON_MODELS = {
    "MacBookAir10,1": "Apple M1",
    "MacBookPro17,1": "Apple M1",
    "Macmini9,1": "Apple M1",
    "iMac21,1": "Apple M1",
    "iMac21,2": "Apple M1",
    "MacBookPro18,1": "Apple M1 Pro",
    "MacBookPro18,3": "Apple M1 Pro",
    "MacBookPro18,2": "Apple M1 Max",
    "MacBookPro18,4": "Apple M1 Max",
    "Mac13,1": "Apple M1 Max",
    "Mac13,2": "Apple M1 Ultra",
    "Mac14,2": "Apple M2",
    "Mac14,3": "Apple M2",
    "Mac14,7": "Apple M2",
    "Mac14,15": "Apple M2",
    "Mac14,9": "Apple M2 Pro",
    "Mac14,10": "Apple M2 Pro",
    "Mac14,12": "Apple M2 Pro",
    "Mac14,5": "Apple M2 Max",
    "Mac14,6": "Apple M2 Max",
    "Mac14,13": "Apple M2 Max",
    "Mac14,14": "Apple M2 Ultra",
    "Mac14,8": "Apple M2 Ultra",
    "Mac15,3": "Apple M3",
    "Mac15,4": "Apple M3",
    "Mac15,5": "Apple M3",
    "Mac15,12": "Apple M3",
    "Mac15,13": "Apple M3",
    "Mac15,6": "Apple M3 Pro",
    "Mac15,8": "Apple M3 Pro",
    "Mac15,7": "Apple M3 Max",
    "Mac15,9": "Apple M3 Max",
    "Mac15,10": "Apple M3 Max",
    "Mac15,11": "Apple M3 Max",
}


def collect_identity(identity: IdentityInfo, timeout: Optional[float] = None) -> Dict[str, Any]:
    """
    Populate hostname, model, model ID, serial number and hardware UUID.

    Args:
        identity: Identity section to fill
        timeout: Timeout for system_profiler

    Returns:
        Values parsed from the hardware overview (including the chip name)
    """
    identity.hostname = socket.gethostname()
    identity.os = os_label("darwin", platform.mac_ver()[0])

    run_extractions(IDENTITY_SPECS, identity)

    overview = extract_fields(system_profiler_text("SPHardwareDataType", timeout) or "", HARDWARE_OVERVIEW_RULES)
    identity.model = overview.get("model", identity.model)
    for key in ("model_id", "serial_number", "uuid"):
        if not getattr(identity, key) and overview.get(key):
            setattr(identity, key, overview[key])
    return overview


def detect_apple_silicon(architecture: str) -> bool:
    """
    Decide whether the machine runs on Apple Silicon.

    Args:
        architecture: Value of hw.machine, empty when unknown

    Returns:
        True for arm64 machines
    """
    if architecture:
        return architecture == "arm64"
    # Performance levels only exist on Apple Silicon
    return run_command(["sysctl", "-n", "hw.perflevel0.physicalcpu"]).success


def apple_silicon_chip(model_id: str) -> str:
    """Look up the chip of a known Apple Silicon model identifier."""
    return APPLE_SILICON_MODELS.get(model_id, "")


def collect_cpu(cpu: CPUInfo, model_id: str = "", chip: str = "") -> Dict[str, Any]:
    """
    Populate CPU model, core counts and architecture.

    Args:
        cpu: CPU section to fill
        model_id: Model identifier used for the chip lookup
        chip: Chip name reported by the hardware overview, if any

    Returns:
        Raw sysctl values (including hw.memsize)
    """
    output = command_output(["sysctl", "hw.physicalcpu", "hw.logicalcpu", "hw.machine", "hw.memsize"])
    values = extract_fields(output or "", CPU_SYSCTL_RULES)
    cpu.physical_cores = values.get("physical_cores") or psutil.cpu_count(logical=False) or 0
    cpu.logical_cores = values.get("logical_cores") or psutil.cpu_count(logical=True) or 0
    cpu.architecture = values.get("architecture", "")
    cpu.apple_silicon = detect_apple_silicon(cpu.architecture)

    def brand_string() -> str:
        return (command_output(["sysctl", "-n", "machdep.cpu.brand_string"]) or "").strip()

    providers = [brand_string]
    if cpu.apple_silicon:
        providers += [lambda: chip, lambda: apple_silicon_chip(model_id)]
    providers.append(cpuinfo_brand)

    default = "Apple Silicon" if cpu.apple_silicon else ""
    cpu.model = first_available(providers, default=default)
    return values


def collect_memory(memory: MemoryInfo, memsize: int = 0, timeout: Optional[float] = None) -> None:
    """
    Populate installed memory size and type.

    Args:
        memory: Memory section to fill
        memsize: hw.memsize value, psutil is used when zero
        timeout: Timeout for system_profiler
    """
    memory.total = memsize or psutil.virtual_memory().total
    output = system_profiler_text("SPMemoryDataType", timeout)
    assign_fields(memory, extract_fields(output or "", MEMORY_TYPE_RULES))


def parse_storage_items(items: List[Dict[str, Any]]) -> List[DiskInfo]:
    """
    Build one DiskInfo per physical drive from SPStorageDataType items.

    Args:
        items: Parsed `system_profiler -xml SPStorageDataType` items

    Returns:
        List of DiskInfo
    """
    disks: Dict[str, DiskInfo] = {}
    for volume in items:
        drive = volume.get("physical_drive") or {}
        model = drive.get("device_name", "")
        bsd_name = volume.get("bsd_name", "")
        key = model or bsd_name
        if not key:
            continue
        name = re.sub(r"(?:s\d+)+$", "", bsd_name) if bsd_name else ""
        size = int(volume.get("size_in_bytes", 0) or 0)
        disk = disks.get(key)
        if disk is None:
            disks[key] = DiskInfo(name=name, model=model, size=size, serial="")
        elif size > disk.size:
            disk.size = size
    return list(disks.values())


def collect_disks(timeout: Optional[float] = None) -> List[DiskInfo]:
    """Collect physical disks from system_profiler."""
    return parse_storage_items(system_profiler_items("SPStorageDataType", timeout))
