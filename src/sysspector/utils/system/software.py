# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Cross-platform software collection utilities.

Provides the running process listing shared by the platform collectors.
"""

import logging
import time
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import psutil

from .models import ProcessInfo

logger = logging.getLogger(__name__)


def _average_cpu_percent(proc: psutil.Process, now: float) -> float:
    """CPU usage averaged over the process lifetime, in percent of one core."""
    times = proc.cpu_times()
    elapsed = now - proc.create_time()
    if elapsed <= 0:
        return 0.0
    return round((times.user + times.system) / elapsed * 100, 2)


def collect_running_processes(
    skip_prefixes: Sequence[str] = (),
    limit: Optional[int] = None,
    network_usage: Optional[Dict[int, float]] = None,
) -> List[ProcessInfo]:
    """
    Enumerate running processes with CPU and memory usage.

    Args:
        skip_prefixes: Process name prefixes to leave out
        limit: Maximum number of processes kept, busiest first
        network_usage: Optional pid to bytes/sec mapping

    Returns:
        List of ProcessInfo sorted by CPU usage
    """
    network_usage = network_usage or {}
    now = time.time()
    processes = []

    for proc in psutil.process_iter(["pid", "name"]):
        name = proc.info.get("name") or ""
        if not name or any(name.startswith(prefix) for prefix in skip_prefixes):
            continue
        try:
            cpu_percent = _average_cpu_percent(proc, now)
            memory = proc.memory_info().rss
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
        pid = proc.info["pid"]
        processes.append(
            ProcessInfo(
                pid=pid,
                name=name,
                cpu_percent=cpu_percent,
                memory=memory,
                network_usage=network_usage.get(pid, 0.0),
            )
        )

    processes.sort(key=lambda p: p.cpu_percent, reverse=True)
    if limit:
        processes = processes[:limit]
    logger.debug(f"Collected {len(processes)} running processes")
    return processes


def format_timestamp(timestamp: float) -> str:
    """Format a POSIX timestamp as a local date string."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
