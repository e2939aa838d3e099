# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS network collection.

WiFi details come from the airport utility or system_profiler, interface
state from ifconfig, DNS from scutil, proxy settings from networksetup and
routes and traffic counters from netstat. VPN detection combines several
independent heuristics.
"""

import logging
import os
import re
import time
from typing import Any, Dict, List, Optional, Sequence

import psutil

from ...core.extract import FieldRule, extract_fields, find_all, to_int
from ...core.fallback import first_available
from ...core.process import command_output, run_command
from ..models import DNSConfig, ProxyInfo, RouteEntry, VPNConnection, VPNInfo, WiFiAutoJoin, WiFiInfo, WiFiNetwork
from ..network import TrafficSample, band_for_channel, parse_resolv_conf
from .profiler import profiler_section, system_profiler_text

logger = logging.getLogger(__name__)

AIRPORT_PATH = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/Current/Resources/airport"
DEFAULT_WIFI_DEVICE = "en0"
RESOLV_CONF_PATH = "/etc/resolv.conf"

AIRPORT_RULES = (
    FieldRule("rssi", r"^\s*agrCtlRSSI:\s*(-?\d+)", to_int),
    FieldRule("noise", r"^\s*agrCtlNoise:\s*(-?\d+)", to_int),
    FieldRule("ssid", r"^\s*SSID:\s*(.+)$"),
    FieldRule("bssid", r"^\s*BSSID:\s*(\S+)"),
    FieldRule("tx_rate", r"^\s*lastTxRate:\s*(\d+)"),
    FieldRule("mcs", r"^\s*MCS:\s*(\d+)", to_int),
    FieldRule("nss", r"^\s*NSS:\s*(\d+)", to_int),
    FieldRule("channel", r"^\s*channel:\s*(\d+)", to_int),
    FieldRule("security", r"^\s*link auth:\s*(.+)$"),
)

PROFILER_NETWORK_RULES = (
    FieldRule("phy_mode", r"PHY Mode:\s*(.+)$"),
    FieldRule("channel", r"Channel:\s*(\d+)", to_int),
    FieldRule("frequency", r"Channel:\s*\d+\s*\(([\d.]+\s*GHz)"),
    FieldRule("rssi", r"Signal / Noise:\s*(-?\d+)\s*dBm", to_int),
    FieldRule("noise", r"Signal / Noise:\s*-?\d+\s*dBm\s*/\s*(-?\d+)\s*dBm", to_int),
    FieldRule("tx_rate", r"Transmit Rate:\s*(\d+)"),
    FieldRule("mcs", r"MCS Index:\s*(\d+)", to_int),
    FieldRule("bssid", r"BSSID:\s*(\S+)"),
    FieldRule("security", r"Security:\s*(.+)$"),
    FieldRule("country_code", r"Country Code:\s*(\S+)"),
)

PROFILER_INTERFACE_RULES = (
    FieldRule("supported_phy", r"Supported PHY Modes:\s*(.+)$"),
    FieldRule("country_code", r"Country Code:\s*(\S+)"),
)

PROXY_RULES = (
    FieldRule("enabled", r"^Enabled:\s*(Yes|No)", lambda v: v == "Yes"),
    FieldRule("server", r"^Server:[ \t]*(\S+)"),
    FieldRule("port", r"^Port:[ \t]*(\d+)"),
)

ANYCONNECT_RULES = (
    FieldRule("state", r"state:\s*(\w+)"),
    FieldRule("server", r">>\s*server\s*:\s*(\S+)"),
)

SCUTIL_VPN_PATTERN = r"\((\w+)\)\s+([0-9A-Fa-f-]{36})\s+.*?\"([^\"]+)\""


def parse_airport_info(output: str) -> Optional[WiFiInfo]:
    """
    Parse `airport -I` output.

    Args:
        output: airport stdout

    Returns:
        WiFiInfo, or None when the output holds no association data
    """
    values = extract_fields(output, AIRPORT_RULES)
    if not values.get("ssid") and "rssi" not in values:
        return None
    wifi = WiFiInfo(**values)
    wifi.is_connected = bool(wifi.ssid)
    wifi.frequency = band_for_channel(wifi.channel)
    return wifi


def parse_airport_profiler(text: str) -> Optional[WiFiInfo]:
    """
    Parse `system_profiler SPAirPortDataType` text output.

    Args:
        text: system_profiler output

    Returns:
        WiFiInfo, or None when no interface data was found
    """
    if not text or "Interfaces:" not in text:
        return None

    wifi = WiFiInfo()
    interface_values = extract_fields(text, PROFILER_INTERFACE_RULES)
    wifi.supported_phy = interface_values.get("supported_phy", "")

    block = profiler_section(text, "Current Network Information")
    if block.strip():
        name = re.match(r"^\s*(.+?):\s*$", block.strip("\n").splitlines()[0])
        if name:
            wifi.ssid = name.group(1).strip()
        for key, value in extract_fields(block, PROFILER_NETWORK_RULES).items():
            setattr(wifi, key, value)
        wifi.is_connected = bool(wifi.ssid)
        if wifi.frequency:
            wifi.frequency = wifi.frequency.replace(" ", "")
        else:
            wifi.frequency = band_for_channel(wifi.channel)

    if not wifi.country_code:
        wifi.country_code = interface_values.get("country_code", "")
    return wifi


def collect_wifi(timeout: Optional[float] = None) -> WiFiInfo:
    """
    Collect WiFi association details.

    Args:
        timeout: Timeout for system_profiler

    Returns:
        WiFiInfo, empty when no source answered
    """
    profiler_text = {}

    def from_airport() -> Optional[WiFiInfo]:
        if not os.path.exists(AIRPORT_PATH):
            return None
        return parse_airport_info(command_output([AIRPORT_PATH, "-I"]) or "")

    def from_system_profiler() -> Optional[WiFiInfo]:
        profiler_text["text"] = system_profiler_text("SPAirPortDataType", timeout) or ""
        return parse_airport_profiler(profiler_text["text"])

    wifi = first_available([from_airport, from_system_profiler], default=WiFiInfo())

    # airport -I does not report supported modes or the regulatory domain
    if wifi.is_connected and not wifi.supported_phy:
        text = profiler_text.get("text")
        if text is None:
            text = system_profiler_text("SPAirPortDataType", timeout) or ""
        values = extract_fields(text, PROFILER_INTERFACE_RULES)
        wifi.supported_phy = values.get("supported_phy", "")
        wifi.country_code = wifi.country_code or values.get("country_code", "")
    return wifi


def parse_wifi_device(output: str) -> str:
    """
    Find the WiFi device name in `networksetup -listallhardwareports` output.

    Returns:
        Device name such as en0, or the default when not found
    """
    match = re.search(r"Hardware Port:\s*(?:Wi-Fi|AirPort)\s*\n\s*Device:\s*(\S+)", output or "")
    return match.group(1) if match else DEFAULT_WIFI_DEVICE


def parse_preferred_networks(output: str) -> WiFiAutoJoin:
    """
    Parse `networksetup -listpreferredwirelessnetworks` output.

    Args:
        output: networksetup stdout

    Returns:
        WiFiAutoJoin with every preferred network
    """
    auto_join = WiFiAutoJoin()
    lines = (output or "").splitlines()
    if not lines or not lines[0].startswith("Preferred networks"):
        auto_join.status = "Unavailable"
        return auto_join
    for line in lines[1:]:
        ssid = line.strip()
        if ssid:
            auto_join.networks.append(WiFiNetwork(ssid=ssid, auto_join=True))
    auto_join.is_configured = bool(auto_join.networks)
    auto_join.status = "Configured" if auto_join.is_configured else "No preferred networks"
    return auto_join


def collect_auto_join(device: str) -> WiFiAutoJoin:
    return parse_preferred_networks(command_output(["networksetup", "-listpreferredwirelessnetworks", device]) or "")


def parse_ifconfig(output: str) -> Dict[str, Dict[str, Any]]:
    """
    Split `ifconfig -a` output into per-interface details.

    Args:
        output: ifconfig stdout

    Returns:
        Dict mapping interface names to ipv4/mac/status/up values
    """
    interfaces: Dict[str, Dict[str, Any]] = {}
    current = None
    for line in (output or "").splitlines():
        header = re.match(r"^(\S+?):\s+flags=\d+<([^>]*)>", line)
        if header:
            current = {"ipv4": [], "mac": "", "status": "", "up": "UP" in header.group(2).split(",")}
            interfaces[header.group(1)] = current
            continue
        if current is None:
            continue
        inet = re.match(r"^\s+inet (\d+\.\d+\.\d+\.\d+)", line)
        if inet:
            current["ipv4"].append(inet.group(1))
        ether = re.match(r"^\s+ether ([0-9a-fA-F:]{17})", line)
        if ether:
            current["mac"] = ether.group(1)
        status = re.match(r"^\s+status:\s*(\S+)", line)
        if status:
            current["status"] = status.group(1)
    return interfaces


def primary_address(interfaces: Dict[str, Dict[str, Any]], preferred: str = DEFAULT_WIFI_DEVICE) -> Dict[str, str]:
    """
    Pick the IPv4 and MAC address of the primary interface.

    The preferred interface wins when it has an IPv4 address, otherwise
    the first active en* interface with one is used.

    Returns:
        Dict with "ip" and "mac"
    """
    candidates = [preferred] + sorted(name for name in interfaces if name.startswith("en") and name != preferred)
    for name in candidates:
        details = interfaces.get(name)
        if details and details["ipv4"]:
            return {"ip": details["ipv4"][0], "mac": details["mac"]}
    details = interfaces.get(preferred, {})
    return {"ip": "", "mac": details.get("mac", "")}


def awdl_state(interfaces: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Return the AWDL enabled flag and status from parsed ifconfig data."""
    awdl = interfaces.get("awdl0")
    if awdl is None:
        return {"enabled": False, "status": "Not present"}
    enabled = awdl["up"]
    status = awdl["status"] or ("up" if enabled else "down")
    return {"enabled": enabled, "status": status.capitalize()}


def parse_scutil_dns(output: str) -> DNSConfig:
    """
    Parse `scutil --dns` output.

    Only the main configuration is read; scoped resolvers repeat the same
    servers.

    Args:
        output: scutil stdout

    Returns:
        DNSConfig with servers, search domains and resolver order
    """
    dns = DNSConfig()
    main = (output or "").split("DNS configuration (for scoped queries)")[0]

    for (server,) in find_all(r"nameserver\[\d+\]\s*:\s*(\S+)", main):
        if server not in dns.servers:
            dns.servers.append(server)
    for (domain,) in find_all(r"search domain\[\d+\]\s*:\s*(\S+)", main):
        if domain not in dns.search_domains:
            dns.search_domains.append(domain)

    for number, body in find_all(r"resolver #(\d+)\n(.*?)(?=\nresolver #|\Z)", main, re.DOTALL):
        domain = re.search(r"^\s*domain\s*:\s*(\S+)", body, re.MULTILINE)
        server = re.search(r"nameserver\[0\]\s*:\s*(\S+)", body)
        label = domain.group(1) if domain else "default"
        if server:
            label = f"{label} ({server.group(1)})"
        dns.resolution_order.append(f"#{number} {label}")
    return dns


def collect_dns(timeout: Optional[float] = None, resolv_conf: str = RESOLV_CONF_PATH) -> DNSConfig:
    """Collect resolver configuration, falling back to resolv.conf."""
    dns = parse_scutil_dns(command_output(["scutil", "--dns"], timeout=timeout) or "")
    if not dns.servers:
        try:
            with open(resolv_conf, "r", encoding="utf-8") as f:
                resolv = parse_resolv_conf(f.read())
        except OSError as e:
            logger.info(f"Cannot read {resolv_conf}: {e}")
        else:
            dns.servers = resolv["servers"]
            dns.search_domains = dns.search_domains or resolv["search_domains"]
    return dns


def parse_vpn_services(output: str) -> List[str]:
    """Return network services whose name mentions VPN."""
    services = []
    for line in (output or "").splitlines()[1:]:
        name = line.strip().lstrip("*").strip()
        if name and "vpn" in name.lower():
            services.append(name)
    return services


def parse_scutil_connections(output: str) -> List[VPNConnection]:
    """Parse `scutil --nc list` into VPN connections."""
    return [
        VPNConnection(name=name, id=conn_id, status=status)
        for status, conn_id, name in find_all(SCUTIL_VPN_PATTERN, output)
    ]


def tunnel_interfaces(interfaces: Dict[str, Dict[str, Any]]) -> List[str]:
    """utun/ppp/ipsec interfaces carrying an IPv4 address."""
    return sorted(
        name
        for name, details in interfaces.items()
        if re.match(r"^(utun|ppp|ipsec)\d+$", name) and details["ipv4"]
    )


def find_vpn_process(process_names: Sequence[str]) -> Optional[Dict[str, str]]:
    """
    Look for a running VPN client process.

    Returns:
        Dict with "name" and "config" of the first match, or None
    """
    for proc in psutil.process_iter(["name", "cmdline"]):
        name = proc.info.get("name") or ""
        if name not in process_names:
            continue
        cmdline = proc.info.get("cmdline") or []
        config = ""
        if "--config" in cmdline:
            index = cmdline.index("--config")
            if index + 1 < len(cmdline):
                config = cmdline[index + 1]
        return {"name": name, "config": config}
    return None


def read_openvpn_remote(config_file: str) -> str:
    """Return the first `remote` host of an OpenVPN configuration file."""
    try:
        with open(config_file, "r", encoding="utf-8", errors="replace") as f:
            match = re.search(r"^\s*remote\s+(\S+)", f.read(), re.MULTILINE)
    except OSError as e:
        logger.info(f"Cannot read OpenVPN config {config_file}: {e}")
        return ""
    return match.group(1) if match else ""


def collect_vpn(
    interfaces: Dict[str, Dict[str, Any]],
    process_names: Sequence[str] = (),
    anyconnect_path: str = "",
) -> VPNInfo:
    """
    Detect VPN connections with every available heuristic.

    Args:
        interfaces: Parsed ifconfig data
        process_names: VPN daemon process names
        anyconnect_path: Path of the Cisco AnyConnect CLI

    Returns:
        VPNInfo; connected when any heuristic reports a connection
    """
    vpn = VPNInfo()
    vpn.interfaces = tunnel_interfaces(interfaces)
    vpn.services = parse_vpn_services(command_output(["networksetup", "-listallnetworkservices"]) or "")
    vpn.connections = parse_scutil_connections(command_output(["scutil", "--nc", "list"]) or "")

    providers = []
    active = [c for c in vpn.connections if c.status == "Connected"]
    if active:
        providers.append("Network Extension")
        vpn.node_name = active[0].name

    if anyconnect_path and os.path.exists(anyconnect_path):
        state = extract_fields(command_output([anyconnect_path, "state"]) or "", ANYCONNECT_RULES)
        if state.get("state") == "Connected":
            providers.append("Cisco AnyConnect")
            vpn.server = vpn.server or state.get("server", "")

    process = find_vpn_process(process_names) if process_names else None
    if process:
        providers.append(process["name"])
        vpn.config_file = process["config"]
        if vpn.config_file:
            vpn.server = vpn.server or read_openvpn_remote(vpn.config_file)

    if vpn.interfaces and not providers:
        providers.append("Tunnel interface")

    vpn.is_connected = bool(providers)
    vpn.provider = ", ".join(providers)
    vpn.status = "Connected" if vpn.is_connected else "Disconnected"
    return vpn


def collect_proxy(service: str) -> ProxyInfo:
    proxy = ProxyInfo()
    values = extract_fields(command_output(["networksetup", "-getwebproxy", service]) or "", PROXY_RULES)
    for key, value in values.items():
        setattr(proxy, key, value)
    if proxy.port == "0":
        proxy.port = ""
    return proxy


def parse_netstat_routes(output: str) -> List[RouteEntry]:
    """
    Parse the IPv4 section of `netstat -nr`.

    Args:
        output: netstat stdout

    Returns:
        List of RouteEntry
    """
    routes = []
    header: List[str] = []
    for line in (output or "").splitlines():
        if line.startswith("Internet6"):
            break
        fields = line.split()
        if not fields:
            if header:
                break
            continue
        if fields[0] == "Destination":
            header = fields
            continue
        if not header or len(fields) < 4:
            continue
        netif_index = header.index("Netif") if "Netif" in header else 3
        routes.append(
            RouteEntry(
                destination=fields[0],
                gateway=fields[1],
                flags=fields[2],
                interface=fields[netif_index] if netif_index < len(fields) else "",
            )
        )
    return routes


def parse_netstat_traffic(output: str) -> Optional[TrafficSample]:
    """
    Read cumulative byte counters from `netstat -I <if> -b` output.

    The link-level row is used since it counts every protocol.

    Returns:
        TrafficSample or None when the counters are not found
    """
    lines = (output or "").splitlines()
    if not lines:
        return None
    header = lines[0].split()
    if "Ibytes" not in header or "Obytes" not in header:
        return None
    in_index, out_index = header.index("Ibytes"), header.index("Obytes")
    for line in lines[1:]:
        fields = line.split()
        if len(fields) == len(header) and fields[2].startswith("<Link#"):
            try:
                return TrafficSample(
                    bytes_recv=int(fields[in_index]), bytes_sent=int(fields[out_index]), timestamp=time.time()
                )
            except ValueError:
                return None
    return None


def netstat_traffic_sample(interface: str) -> Optional[TrafficSample]:
    return parse_netstat_traffic(command_output(["netstat", "-I", interface, "-b"]) or "")


def parse_nettop(output: str, interval: float) -> Dict[int, float]:
    """
    Parse the last sample of `nettop -P -d -x` CSV output.

    Args:
        output: nettop stdout
        interval: Seconds covered by the delta sample

    Returns:
        Dict mapping pid to bytes per second
    """
    blocks = re.split(r"^,?(?:time,)?,?bytes_in,bytes_out,?\s*$", output or "", flags=re.MULTILINE)
    last = blocks[-1] if len(blocks) > 1 else ""
    usage: Dict[int, float] = {}
    for _, pid, bytes_in, bytes_out in find_all(r"^(?:[^,]*,)?(.+)\.(\d+),(\d+),(\d+),?\s*$", last):
        usage[int(pid)] = (int(bytes_in) + int(bytes_out)) / max(interval, 0.001)
    return usage


def collect_process_network_usage(interval: float = 1.0) -> Dict[int, float]:
    """Measure per-process network throughput with nettop in delta mode."""
    samples = max(int(round(interval)), 1)
    result = run_command(
        ["nettop", "-P", "-d", "-x", "-L", "2", "-s", str(samples), "-J", "bytes_in,bytes_out"],
        timeout=samples * 2 + 10,
    )
    if result.failed:
        return {}
    return parse_nettop(result.stdout, float(samples))
