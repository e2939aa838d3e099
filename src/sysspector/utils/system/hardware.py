# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Cross-platform hardware collection utilities.

Provides the psutil and py-cpuinfo based pieces shared by the platform
collectors: disk and memory usage, uptime, CPU brand, temperature
estimation and bluetooth device classification.
"""

import logging
import time
from typing import List, Optional, Sequence

import cpuinfo
import psutil

from .models import DiskUsage, MemoryUsage, TemperatureReading

logger = logging.getLogger(__name__)

# Fixed linear estimate used when no sensor can be read
ESTIMATE_BASE_CELSIUS = 30.0
ESTIMATE_CELSIUS_PER_CPU_PERCENT = 0.6

BLUETOOTH_TYPE_KEYWORDS = [
    ("Keyboard", ("keyboard",)),
    ("Mouse", ("mouse", "trackpad")),
    ("Headphones", ("airpods", "headphone", "earphone", "headset", "buds")),
    ("Speaker", ("speaker",)),
]


def collect_disk_usage(ignored_prefixes: Sequence[str] = ()) -> List[DiskUsage]:
    """
    Collect usage for every mounted filesystem.

    Args:
        ignored_prefixes: Mount point prefixes to leave out

    Returns:
        List of DiskUsage entries
    """
    usage_list = []
    for partition in psutil.disk_partitions(all=False):
        mount_point = partition.mountpoint
        if not partition.fstype or "cdrom" in partition.opts:
            continue
        if any(mount_point.startswith(prefix) for prefix in ignored_prefixes):
            continue
        try:
            usage = psutil.disk_usage(mount_point)
        except (PermissionError, OSError) as e:
            logger.debug(f"Cannot read usage for {mount_point}: {e}")
            continue
        usage_list.append(
            DiskUsage(
                mount_point=mount_point,
                filesystem=partition.fstype,
                total=usage.total,
                used=usage.used,
                free=usage.free,
                used_percent=usage.percent,
            )
        )
    return usage_list


def collect_memory_usage() -> MemoryUsage:
    """
    Collect current memory utilization.

    Returns:
        MemoryUsage populated from psutil.virtual_memory
    """
    memory = psutil.virtual_memory()
    return MemoryUsage(
        total=memory.total,
        used=memory.used,
        free=memory.available,
        used_percent=memory.percent,
        active=getattr(memory, "active", 0),
        inactive=getattr(memory, "inactive", 0),
        cached=getattr(memory, "cached", 0),
    )


def format_uptime(seconds: int) -> str:
    """
    Format an uptime in seconds as "Nd Nh Nm".

    Args:
        seconds: Uptime in seconds

    Returns:
        Formatted uptime string
    """
    seconds = max(int(seconds), 0)
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    return f"{days}d {hours}h {minutes}m"


def uptime_since(boot_time: float, now: Optional[float] = None) -> int:
    """Return the whole seconds elapsed since a boot timestamp."""
    now = time.time() if now is None else now
    return max(int(now - boot_time), 0)


def psutil_uptime() -> int:
    """Uptime in seconds based on psutil.boot_time."""
    return uptime_since(psutil.boot_time())


def cpuinfo_brand() -> str:
    """CPU brand string reported by py-cpuinfo."""
    return cpuinfo.get_cpu_info().get("brand_raw", "")


def estimate_temperature() -> List[TemperatureReading]:
    """
    Estimate the CPU temperature from the current utilization.

    Returns:
        Single estimated reading
    """
    cpu_percent = psutil.cpu_percent(interval=0.5)
    temperature = ESTIMATE_BASE_CELSIUS + cpu_percent * ESTIMATE_CELSIUS_PER_CPU_PERCENT
    return [TemperatureReading(name="CPU (estimated)", temperature=round(temperature, 1), location="CPU")]


def os_label(name: str, version: str) -> str:
    """Join the platform name and its release, e.g. "darwin 14.2.1"."""
    return f"{name} {version}".strip()


def zero_temperature() -> List[TemperatureReading]:
    """Reading used when no temperature source is available."""
    return [TemperatureReading(name="CPU", temperature=0.0, location="CPU")]


def classify_bluetooth_device(name: str) -> str:
    """
    Infer a bluetooth device type from its name.

    Args:
        name: Device name

    Returns:
        Device type label
    """
    lowered = (name or "").lower()
    for device_type, keywords in BLUETOOTH_TYPE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return device_type
    return "Other"
