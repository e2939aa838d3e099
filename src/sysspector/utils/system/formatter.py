# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
System information formatting utilities.

Provides functions to format a SystemReport into a column-aligned text
report, a short summary for the text save file and pretty-printed JSON,
and to write the result to disk.
"""

import logging
from typing import Any, List

from .models import SystemReport

logger = logging.getLogger(__name__)

LABEL_WIDTH = 24
EMPTY_VALUE = "-"


class ReportWriteError(Exception):
    """Exception raised when the report file cannot be written."""

    pass


def format_bytes(num_bytes: float) -> str:
    """
    Format a byte count with a binary unit.

    Args:
        num_bytes: Size in bytes

    Returns:
        String such as "16.00 GB"
    """
    value = float(num_bytes or 0)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(value) < 1024 or unit == "TB":
            return f"{value:.0f} {unit}" if unit == "B" else f"{value:.2f} {unit}"
        value /= 1024
    return f"{value:.2f} TB"


def _value(value: Any) -> str:
    if value is None or value == "" or value == []:
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _field(label: str, value: Any, indent: int = 0) -> str:
    prefix = " " * indent
    width = max(LABEL_WIDTH - indent, 0)
    return f"{prefix}{label + ':':<{width}} {_value(value)}"


def _section(lines: List[str], title: str) -> None:
    lines.append("")
    lines.append(title)
    lines.append("-" * 40)


def _format_static(report: SystemReport, lines: List[str]) -> None:
    identity = report.identity
    cpu = report.cpu
    _section(lines, "STATIC HARDWARE")
    lines.append(_field("Hostname", identity.hostname))
    lines.append(_field("Computer Name", identity.computer_name))
    lines.append(_field("OS", identity.os))
    lines.append(_field("System Version", identity.system_version))
    lines.append(_field("Model", identity.model))
    lines.append(_field("Model ID", identity.model_id))
    lines.append(_field("Serial Number", identity.serial_number))
    lines.append(_field("Hardware UUID", identity.uuid))
    lines.append(_field("CPU", cpu.model))
    lines.append(_field("Cores", f"{cpu.physical_cores} physical, {cpu.logical_cores} logical"))
    lines.append(_field("Architecture", cpu.architecture))
    lines.append(_field("Apple Silicon", cpu.apple_silicon))
    memory_line = format_bytes(report.memory.total)
    if report.memory.type:
        memory_line += f" ({report.memory.type})"
    lines.append(_field("Memory", memory_line))
    lines.append(_field("Disks", len(report.disks)))
    for i, disk in enumerate(report.disks):
        lines.append(f"  {i + 1}. {disk.model or disk.name or EMPTY_VALUE} ({disk.name}) - {format_bytes(disk.size)}")
        if disk.serial:
            lines.append(_field("Serial", disk.serial, indent=5))


def _format_dynamic(report: SystemReport, lines: List[str]) -> None:
    usage = report.memory.usage
    battery = report.battery
    adapter = report.ac_adapter
    bluetooth = report.bluetooth
    _section(lines, "DYNAMIC HARDWARE")
    lines.append(_field("Uptime", report.identity.uptime))
    lines.append(
        _field("Memory Usage", f"{format_bytes(usage.used)} / {format_bytes(usage.total)} ({usage.used_percent:.1f}%)")
    )
    if usage.active or usage.inactive or usage.cached:
        lines.append(_field("Active", format_bytes(usage.active), indent=2))
        lines.append(_field("Inactive", format_bytes(usage.inactive), indent=2))
        lines.append(_field("Cached", format_bytes(usage.cached), indent=2))

    lines.append(_field("Disk Usage", len(report.disk_usage)))
    for disk in report.disk_usage:
        lines.append(
            f"  {disk.mount_point} ({disk.filesystem}): {format_bytes(disk.used)} / {format_bytes(disk.total)} "
            f"({disk.used_percent:.1f}%), {format_bytes(disk.free)} free"
        )

    lines.append(_field("Battery", battery.is_present))
    if battery.is_present:
        lines.append(_field("Charge", f"{battery.percentage}%", indent=2))
        lines.append(_field("Status", battery.status, indent=2))
        lines.append(_field("Charging", battery.is_charging, indent=2))
        lines.append(_field("Cycle Count", battery.cycle_count, indent=2))
        lines.append(_field("Health", battery.health, indent=2))
        if battery.max_capacity:
            lines.append(_field("Maximum Capacity", f"{battery.max_capacity}%", indent=2))
        if battery.time_remaining:
            hours, minutes = divmod(battery.time_remaining, 60)
            lines.append(_field("Time Remaining", f"{hours}:{minutes:02d}", indent=2))

    lines.append(_field("AC Adapter", "Connected" if adapter.connected else "Not connected"))
    if adapter.name or adapter.wattage:
        lines.append(_field("Name", adapter.name, indent=2))
        lines.append(_field("Wattage", f"{adapter.wattage} W" if adapter.wattage else "", indent=2))
        lines.append(_field("Manufacturer", adapter.manufacturer, indent=2))
        lines.append(_field("Serial Number", adapter.serial_number, indent=2))

    lines.append(_field("Bluetooth", bluetooth.status if bluetooth.is_available else "Unavailable"))
    for device in bluetooth.devices:
        address = f" [{device.address}]" if device.address else ""
        lines.append(f"  - {device.name} ({device.type}){address}")

    lines.append(_field("Temperatures", len(report.temperatures)))
    for reading in report.temperatures:
        lines.append(_field(reading.name, f"{reading.temperature:.1f} °C", indent=2))


def _format_network(report: SystemReport, lines: List[str]) -> None:
    net = report.network
    wifi = net.wifi
    latency = net.latency
    _section(lines, "NETWORK")
    lines.append(_field("IP Address", net.ip_address))
    lines.append(_field("MAC Address", net.mac_address))
    lines.append(_field("Public IP", net.public_ip))
    lines.append(_field("Country Code", net.country_code))
    lines.append(_field("Traffic Rate", net.traffic_rate))

    lines.append(_field("WiFi", "Connected" if wifi.is_connected else "Not connected"))
    if wifi.ssid or wifi.is_connected:
        lines.append(_field("SSID", wifi.ssid, indent=2))
        lines.append(_field("BSSID", wifi.bssid, indent=2))
        lines.append(_field("RSSI / Noise", f"{wifi.rssi} dBm / {wifi.noise} dBm", indent=2))
        if wifi.signal_strength:
            lines.append(_field("Signal", f"{wifi.signal_strength}%", indent=2))
        lines.append(_field("Channel", f"{wifi.channel} ({wifi.frequency or EMPTY_VALUE})", indent=2))
        lines.append(_field("PHY Mode", wifi.phy_mode, indent=2))
        lines.append(_field("Transmit Rate", f"{wifi.tx_rate} Mbps" if wifi.tx_rate else "", indent=2))
        lines.append(_field("MCS / NSS", f"{wifi.mcs} / {wifi.nss}", indent=2))
        lines.append(_field("Security", wifi.security, indent=2))
    if wifi.supported_phy:
        lines.append(_field("Supported PHY", wifi.supported_phy, indent=2))
    if wifi.country_code:
        lines.append(_field("WiFi Country", wifi.country_code, indent=2))
    if net.auto_join.status:
        lines.append(_field("Auto-Join", net.auto_join.status, indent=2))
        for network in net.auto_join.networks:
            lines.append(f"    - {network.ssid}")
    if net.awdl_status:
        lines.append(_field("AWDL", net.awdl_status))

    lines.append(_field("Interfaces", len(net.interfaces)))
    for interface in net.interfaces:
        state = "up" if interface.is_up else "down"
        addresses = ", ".join(interface.addresses) or EMPTY_VALUE
        lines.append(f"  {interface.name} ({state}): {addresses}")

    dns = net.dns
    lines.append(_field("DNS Servers", dns.servers))
    lines.append(_field("Search Domains", dns.search_domains))
    if dns.resolution_order:
        lines.append(_field("Resolution Order", dns.resolution_order))
    lines.append(_field("Hosts Entries", len(dns.host_entries)))

    vpn = net.vpn
    lines.append(_field("VPN", vpn.status or ("Connected" if vpn.is_connected else "")))
    if vpn.is_connected:
        lines.append(_field("Provider", vpn.provider, indent=2))
        lines.append(_field("Node", vpn.node_name, indent=2))
        lines.append(_field("Server", vpn.server, indent=2))
    if vpn.interfaces:
        lines.append(_field("Tunnel Interfaces", vpn.interfaces, indent=2))

    proxy = net.proxy
    proxy_value = "Disabled"
    if proxy.enabled:
        proxy_value = f"{proxy.server}:{proxy.port}" if proxy.port else proxy.server or "Enabled"
    lines.append(_field("Proxy", proxy_value))

    lines.append(
        _field(
            "Latency",
            f"avg {latency.avg_latency:.2f} ms, jitter {latency.jitter:.2f} ms, loss {latency.packet_loss:.1f}%",
        )
    )
    for target in latency.targets:
        lines.append(
            f"  {target.name} ({target.host}): min/avg/max {target.min:.2f}/{target.avg:.2f}/{target.max:.2f} ms, "
            f"jitter {target.jitter:.2f} ms, loss {target.packet_loss:.1f}%"
        )
    if latency.hops:
        lines.append(_field("Route Trace", f"{len(latency.hops)} hops"))
        for hop in latency.hops:
            lines.append(f"  {hop.hop:>2}. {hop.host:<40} loss {hop.loss:.1f}%  avg {hop.avg:.1f} ms")

    lines.append(_field("Routes", len(net.routes)))
    for route in net.routes:
        lines.append(f"  {route.destination:<20} {route.gateway:<20} {route.interface}")


def _format_software(report: SystemReport, lines: List[str], show_apps: bool, show_processes: bool) -> None:
    software = report.software
    _section(lines, "SOFTWARE")
    lines.append(_field("Installed Applications", len(software.installed_apps)))
    if show_apps:
        for app in software.installed_apps:
            version = f" {app.version}" if app.version else ""
            date = f" (installed {app.install_date})" if app.install_date else ""
            lines.append(f"  - {app.name}{version}{date}")

    lines.append(_field("Running Processes", len(software.running_apps)))
    if show_processes and software.running_apps:
        lines.append(f"  {'PID':>7}  {'CPU%':>6}  {'MEMORY':>10}  {'NET':>12}  NAME")
        for proc in software.running_apps:
            lines.append(
                f"  {proc.pid:>7}  {proc.cpu_percent:>6.1f}  {format_bytes(proc.memory):>10}  "
                f"{proc.network_usage:>8.0f} B/s  {proc.name}"
            )


def format_text_report(report: SystemReport, show_apps: bool = False, show_processes: bool = False) -> str:
    """
    Format the full report as column-aligned text.

    Args:
        report: Collected system report
        show_apps: List every installed application instead of a count
        show_processes: List every running process instead of a count

    Returns:
        Formatted report
    """
    lines = ["=" * 80, "SYSTEM INFORMATION", "=" * 80]
    _format_static(report, lines)
    _format_dynamic(report, lines)
    _format_network(report, lines)
    _format_software(report, lines, show_apps, show_processes)
    lines.append("")
    lines.append("=" * 80)
    return "\n".join(lines)


def format_summary(report: SystemReport) -> str:
    """
    Format the short summary written to a text save file.

    Args:
        report: Collected system report

    Returns:
        Eight-line summary
    """
    identity = report.identity
    os_name = identity.system_version or identity.os
    first_disk = EMPTY_VALUE
    if report.disks:
        disk = report.disks[0]
        first_disk = f"{disk.model or disk.name} ({format_bytes(disk.size)})"
    memory = format_bytes(report.memory.total)
    if report.memory.type:
        memory += f" {report.memory.type}"

    lines = [
        _field("Hostname", f"{_value(identity.hostname)} ({_value(os_name)})"),
        _field("Model", identity.model),
        _field("Model ID", identity.model_id),
        _field("Serial Number", identity.serial_number),
        _field("CPU", f"{_value(report.cpu.model)} ({report.cpu.physical_cores} cores)"),
        _field("Hardware UUID", identity.uuid),
        _field("Disk", first_disk),
        _field("Memory", memory),
    ]
    return "\n".join(lines) + "\n"


def format_json_report(report: SystemReport) -> str:
    """Pretty-print the report as JSON with non-ASCII characters kept."""
    return report.to_json(indent=2)


def is_json_path(path: str) -> bool:
    return path.lower().endswith(".json")


def write_report(path: str, content: str) -> None:
    """
    Write a formatted report, overwriting any existing file.

    Args:
        path: Output file path
        content: Report text

    Raises:
        ReportWriteError: If the file cannot be written
    """
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise ReportWriteError(f"Failed to write report to {path}: {e}") from e
    logger.debug(f"Wrote {len(content)} characters to {path}")
