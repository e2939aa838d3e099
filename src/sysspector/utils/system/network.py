# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Cross-platform network collection utilities.

Provides the pieces of network collection that do not depend on the
operating system's own tooling: interface enumeration through psutil,
traffic rate sampling, hosts file parsing, ping and mtr output parsing,
and public IP / country lookups over HTTP.
"""

import ipaddress
import logging
import platform
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import psutil
import requests

from ..core.extract import find_all
from ..core.process import check_command_available, run_command
from .models import HostEntry, LatencyInfo, LatencyTarget, NetworkHop, NetworkInterface

logger = logging.getLogger(__name__)

UNIX_RTT_PATTERN = r"min/avg/max/(?:stddev|mdev) = ([\d.]+)/([\d.]+)/([\d.]+)/([\d.]+)"
UNIX_LOSS_PATTERN = r"([\d.]+)% packet loss"
WINDOWS_RTT_PATTERN = r"Minimum = (\d+)ms, Maximum = (\d+)ms, Average = (\d+)ms"
WINDOWS_LOSS_PATTERN = r"\((\d+)% loss\)"
MTR_HOP_PATTERN = (
    r"^\s*(\d+)\.\|--\s+(\S+)\s+([\d.]+)%\s+(\d+)\s+([\d.]+)\s+([\d.]+)\s+([\d.]+)\s+([\d.]+)\s+([\d.]+)"
)


@dataclass
class TrafficSample:
    """Cumulative byte counters read at a point in time."""

    bytes_recv: int
    bytes_sent: int
    timestamp: float


def compute_traffic_rate(first: TrafficSample, second: TrafficSample) -> float:
    """
    Compute the combined in+out rate between two samples.

    Args:
        first: Earlier sample
        second: Later sample

    Returns:
        Rate in KB/s, 0.0 when the samples are not ordered in time
    """
    elapsed = second.timestamp - first.timestamp
    if elapsed <= 0:
        return 0.0
    delta = (second.bytes_recv - first.bytes_recv) + (second.bytes_sent - first.bytes_sent)
    return max(delta, 0) / 1024 / elapsed


def format_traffic_rate(rate_kbps: float) -> str:
    return f"{rate_kbps:.2f} KB/s"


def band_for_channel(channel: int) -> str:
    """Return the WiFi band of a channel number."""
    if channel <= 0:
        return ""
    return "5GHz" if channel > 14 else "2.4GHz"


def measure_traffic_rate(
    sampler: Callable[[], Optional[TrafficSample]],
    interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Take two counter samples separated by a sleep and format the rate.

    Args:
        sampler: Callable returning a TrafficSample, or None when unavailable
        interval: Seconds between the samples
        sleep: Sleep function

    Returns:
        Formatted rate, or an empty string if a sample could not be read
    """
    first = sampler()
    if first is None:
        return ""
    sleep(interval)
    second = sampler()
    if second is None:
        return ""
    return format_traffic_rate(compute_traffic_rate(first, second))


def psutil_traffic_sample(interface: Optional[str] = None) -> Optional[TrafficSample]:
    """
    Read byte counters through psutil.

    Args:
        interface: Interface name, all interfaces are summed when omitted

    Returns:
        TrafficSample or None when the interface is unknown
    """
    if interface:
        counters = psutil.net_io_counters(pernic=True).get(interface)
    else:
        counters = psutil.net_io_counters()
    if counters is None:
        return None
    return TrafficSample(bytes_recv=counters.bytes_recv, bytes_sent=counters.bytes_sent, timestamp=time.time())


def collect_interfaces() -> List[NetworkInterface]:
    """
    Enumerate network interfaces with addresses, state and counters.

    Returns:
        List of NetworkInterface entries
    """
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()
    counters = psutil.net_io_counters(pernic=True)
    link_families = {getattr(psutil, "AF_LINK", None)}

    interfaces = []
    for name, addr_list in addrs.items():
        interface = NetworkInterface(name=name)
        for addr in addr_list:
            if addr.family in link_families:
                interface.mac_address = addr.address
            elif addr.address:
                interface.addresses.append(addr.address.split("%")[0])
        if name in stats:
            interface.is_up = stats[name].isup
            interface.speed = stats[name].speed
        if name in counters:
            interface.bytes_sent = counters[name].bytes_sent
            interface.bytes_recv = counters[name].bytes_recv
        interfaces.append(interface)
    return interfaces


def parse_hosts_file(text: str) -> List[HostEntry]:
    """
    Parse a hosts file into one entry per hostname.

    Args:
        text: Hosts file content

    Returns:
        List of HostEntry
    """
    entries = []
    for line in (text or "").splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        fields = line.split()
        if len(fields) < 2:
            continue
        ip = fields[0]
        for hostname in fields[1:]:
            entries.append(HostEntry(ip=ip, hostname=hostname))
    return entries


def read_hosts_file(path: str) -> List[HostEntry]:
    """Read and parse a hosts file; an unreadable file yields no entries."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return parse_hosts_file(f.read())
    except OSError as e:
        logger.info(f"Cannot read hosts file {path}: {e}")
        return []


def parse_resolv_conf(text: str) -> Dict[str, List[str]]:
    """
    Parse nameserver and search entries of a resolv.conf file.

    Returns:
        Dict with "servers" and "search_domains" lists
    """
    servers = [m[0] for m in find_all(r"^\s*nameserver\s+(\S+)", text)]
    search_domains: List[str] = []
    for (domains,) in find_all(r"^\s*(?:search|domain)\s+(.+)$", text):
        search_domains.extend(domains.split())
    return {"servers": servers, "search_domains": search_domains}


def parse_ping_summary(output: str) -> Optional[Dict[str, float]]:
    """
    Parse the summary of a ping run (macOS/Linux or Windows format).

    Args:
        output: ping stdout

    Returns:
        Dict with min/avg/max/stddev/jitter/packet_loss, or None without a loss line
    """
    if not output:
        return None

    stats: Dict[str, float] = {"min": 0.0, "avg": 0.0, "max": 0.0, "stddev": 0.0, "jitter": 0.0}

    loss = re.search(UNIX_LOSS_PATTERN, output) or re.search(WINDOWS_LOSS_PATTERN, output)
    if not loss:
        return None
    stats["packet_loss"] = float(loss.group(1))

    unix = re.search(UNIX_RTT_PATTERN, output)
    if unix:
        stats["min"], stats["avg"], stats["max"], stats["stddev"] = (float(v) for v in unix.groups())
        stats["jitter"] = stats["stddev"]
        return stats

    windows = re.search(WINDOWS_RTT_PATTERN, output)
    if windows:
        stats["min"], stats["max"], stats["avg"] = (float(v) for v in windows.groups())
        stats["jitter"] = stats["max"] - stats["min"]
    return stats


def build_ping_command(host: str, count: int, system: Optional[str] = None) -> List[str]:
    system = system or platform.system()
    if system == "Windows":
        return ["ping", "-n", str(count), host]
    return ["ping", "-c", str(count), "-q", host]


def probe_targets(targets: Iterable[Dict[str, Any]], count: int = 5, system: Optional[str] = None) -> List[LatencyTarget]:
    """
    Ping every configured target and collect round-trip statistics.

    Unreachable targets are kept with their packet loss so the report
    still shows them.

    Args:
        targets: Dicts with "name" and "host"
        count: Packets per target
        system: Operating system name used to pick the ping syntax

    Returns:
        List of LatencyTarget
    """
    results = []
    for target in targets:
        host = target.get("host")
        if not host:
            continue
        name = target.get("name", host)
        # ping exits non-zero on loss but still prints its summary
        result = run_command(build_ping_command(host, count, system))
        stats = parse_ping_summary(result.stdout)
        if stats is None:
            logger.info(f"No ping statistics for {name} ({host})")
            continue
        results.append(LatencyTarget(name=name, host=host, **stats))
    return results


def summarize_latency(targets: Sequence[LatencyTarget]) -> LatencyInfo:
    """
    Build aggregate latency figures from per-target statistics.

    Averages, jitter and packet loss only include targets that answered.
    When no target answered the loss is reported as 100%.

    Args:
        targets: Per-target statistics

    Returns:
        LatencyInfo with targets and aggregates
    """
    info = LatencyInfo(targets=list(targets))
    if not targets:
        return info
    answered = [t for t in targets if t.packet_loss < 100]
    if answered:
        info.avg_latency = round(sum(t.avg for t in answered) / len(answered), 3)
        info.jitter = round(sum(t.jitter for t in answered) / len(answered), 3)
        info.packet_loss = round(sum(t.packet_loss for t in answered) / len(answered), 2)
    else:
        info.packet_loss = 100.0
    return info


def parse_mtr_report(output: str) -> List[NetworkHop]:
    """
    Parse an `mtr -r` report into hops.

    Args:
        output: mtr stdout

    Returns:
        List of NetworkHop
    """
    hops = []
    for groups in find_all(MTR_HOP_PATTERN, output):
        hop, host, loss, sent, last, avg, best, worst, stddev = groups
        hops.append(
            NetworkHop(
                hop=int(hop),
                host=host,
                loss=float(loss),
                sent=int(sent),
                last=float(last),
                avg=float(avg),
                best=float(best),
                worst=float(worst),
                stddev=float(stddev),
            )
        )
    return hops


def trace_route(target: str, count: int = 5) -> List[NetworkHop]:
    """
    Run mtr in report mode when it is installed.

    Args:
        target: Host to trace
        count: Pings per hop

    Returns:
        List of NetworkHop, empty when mtr is unavailable
    """
    if not check_command_available("mtr"):
        logger.debug("mtr not installed, skipping route trace")
        return []
    result = run_command(["mtr", "-r", "-c", str(count), target])
    if result.failed:
        return []
    return parse_mtr_report(result.stdout)


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
        return True
    except ValueError:
        return False


def fetch_public_ip(services: Sequence[str], timeout: float = 5) -> str:
    """
    Look up the public IP address through external services.

    Services are tried in order; JSON responses with an "ip" key and plain
    text responses are both accepted.

    Args:
        services: Lookup URLs
        timeout: Per-request timeout in seconds

    Returns:
        Public IPv4 address or an empty string
    """
    for url in services:
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.info(f"Public IP lookup via {url} failed: {e}")
            continue

        text = response.text.strip()
        try:
            candidate = str(response.json().get("ip", ""))
        except (ValueError, AttributeError):
            candidate = text
        if _is_ipv4(candidate):
            return candidate
        logger.debug(f"Ignoring invalid public IP response from {url}: {text[:60]}")
    return ""


def fetch_country_code(url: str, timeout: float = 5) -> str:
    """
    Look up the country code of the public IP address.

    Args:
        url: Geolocation service URL returning JSON with "countryCode"
        timeout: Request timeout in seconds

    Returns:
        ISO country code or an empty string
    """
    if not url:
        return ""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return str(response.json().get("countryCode", ""))
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.info(f"Country lookup via {url} failed: {e}")
        return ""
