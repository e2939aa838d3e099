# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Windows network collection.

WiFi details come from netsh, routes from `route print`, proxy settings
from the Internet Settings registry key and DNS and VPN state from
PowerShell networking cmdlets.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional, Sequence

from ...core.extract import FieldRule, extract_fields, find_all, to_int
from ...core.process import command_output
from ..models import DNSConfig, NetworkInterface, ProxyInfo, RouteEntry, VPNConnection, VPNInfo, WiFiInfo
from ..network import band_for_channel
from .wmi_client import powershell_json

logger = logging.getLogger(__name__)

NETSH_INTERFACE_RULES = (
    FieldRule("ssid", r"^\s*SSID\s*:\s*(.+)$"),
    FieldRule("bssid", r"^\s*(?:AP )?BSSID\s*:\s*(\S+)"),
    FieldRule("state", r"^\s*State\s*:\s*(.+)$"),
    FieldRule("signal_strength", r"^\s*Signal\s*:\s*(\d+)%", to_int),
    FieldRule("channel", r"^\s*Channel\s*:\s*(\d+)", to_int),
    FieldRule("phy_mode", r"^\s*Radio type\s*:\s*(.+)$"),
    FieldRule("tx_rate", r"^\s*Transmit rate \(Mbps\)\s*:\s*([\d.]+)"),
    FieldRule("security", r"^\s*Authentication\s*:\s*(.+)$"),
)

NETSH_DRIVER_RULES = (
    FieldRule("supported_phy", r"^\s*Radio types supported\s*:\s*(.+)$"),
    FieldRule("supported_phy", r"^\s*Supported 802\.11 protocols\s*:\s*(.+)$"),
)

NETSH_SETTINGS_RULES = (FieldRule("country", r"^\s*Country or region\s*:\s*(.+)$"),)

PROXY_REGISTRY_RULES = (
    FieldRule("enabled", r"ProxyEnable\s+REG_DWORD\s+0x([0-9a-fA-F]+)", lambda v: int(v, 16) != 0),
    FieldRule("server", r"ProxyServer\s+REG_SZ\s+(\S+)"),
)

INTERNET_SETTINGS_KEY = "HKCU\\Software\\Microsoft\\Windows\\CurrentVersion\\Internet Settings"

# Order in which PHY generations are listed
PHY_GENERATIONS = ("a", "b", "g", "n", "ac", "ax", "be")

VPN_INTERFACE_KEYWORDS = ("vpn", "ppp")


def signal_to_rssi(signal: int) -> int:
    """Convert a netsh signal quality percentage to an approximate RSSI in dBm."""
    return int(-30 - (100 - signal) * 70 / 100)


def format_supported_phy(raw: str) -> str:
    """
    Normalize a list of supported 802.11 radio types.

    Args:
        raw: netsh value such as "802.11b 802.11g 802.11n 802.11a 802.11ac"

    Returns:
        String such as "802.11 a/b/g/n/ac", or the raw value when it holds no radio types
    """
    found = {m.lower() for m in re.findall(r"802\.11(\w+)", raw or "")}
    generations = [g for g in PHY_GENERATIONS if g in found]
    return "802.11 " + "/".join(generations) if generations else (raw or "").strip()


def parse_country_code(settings_output: str) -> str:
    """Extract the country code from `netsh wlan show settings`."""
    country = extract_fields(settings_output or "", NETSH_SETTINGS_RULES).get("country", "")
    code = re.search(r"\((\w+)\)", country)
    return code.group(1) if code else country


def parse_netsh_interfaces(output: str) -> Optional[WiFiInfo]:
    """
    Parse `netsh wlan show interfaces` output.

    Args:
        output: netsh stdout

    Returns:
        WiFiInfo, or None when no wireless interface was listed
    """
    values = extract_fields(output or "", NETSH_INTERFACE_RULES)
    state = values.pop("state", "")
    if not state and not values.get("ssid"):
        return None

    wifi = WiFiInfo(**values)
    wifi.is_connected = state.lower() == "connected"
    if "signal_strength" in values:
        wifi.rssi = signal_to_rssi(wifi.signal_strength)
    wifi.frequency = band_for_channel(wifi.channel)
    return wifi


def collect_wifi(timeout: Optional[float] = None) -> WiFiInfo:
    """
    Collect WiFi association details with netsh.

    Args:
        timeout: Command timeout

    Returns:
        WiFiInfo, empty when no wireless interface exists
    """
    wifi = parse_netsh_interfaces(command_output(["netsh", "wlan", "show", "interfaces"], timeout) or "")
    if wifi is None:
        return WiFiInfo()

    drivers = extract_fields(
        command_output(["netsh", "wlan", "show", "drivers"], timeout) or "", NETSH_DRIVER_RULES
    )
    if drivers.get("supported_phy"):
        wifi.supported_phy = format_supported_phy(drivers["supported_phy"])
    wifi.country_code = parse_country_code(command_output(["netsh", "wlan", "show", "settings"], timeout) or "")
    return wifi


def _is_usable_ipv4(address: str) -> bool:
    return bool(re.match(r"^\d+\.\d+\.\d+\.\d+$", address)) and not address.startswith(("127.", "169.254."))


def primary_adapter(interfaces: Sequence[NetworkInterface]) -> Optional[NetworkInterface]:
    """
    Pick the first connected adapter with a routable IPv4 address.

    Args:
        interfaces: Interfaces collected through psutil

    Returns:
        The adapter, or None when nothing is connected
    """
    for interface in interfaces:
        if interface.is_up and any(_is_usable_ipv4(a) for a in interface.addresses):
            return interface
    return None


def primary_address(interfaces: Sequence[NetworkInterface]) -> Dict[str, str]:
    """
    Return the name, IPv4 address and MAC of the primary adapter.

    Args:
        interfaces: Interfaces collected through psutil

    Returns:
        Dict with "name", "ip" and "mac", empty strings when nothing is connected
    """
    adapter = primary_adapter(interfaces)
    if adapter is None:
        return {"name": "", "ip": "", "mac": ""}
    ip = next(a for a in adapter.addresses if _is_usable_ipv4(a))
    return {"name": adapter.name, "ip": ip, "mac": adapter.mac_address}


def parse_route_print(output: str) -> List[RouteEntry]:
    """
    Parse the IPv4 active routes of `route print`.

    The metric is stored in the flags column.

    Args:
        output: route print stdout

    Returns:
        List of RouteEntry
    """
    routes = []
    in_ipv4 = False
    in_active = False
    for line in (output or "").splitlines():
        stripped = line.strip()
        if "IPv4 Route Table" in stripped:
            in_ipv4 = True
            continue
        if not in_ipv4:
            continue
        if "IPv6 Route Table" in stripped or stripped.startswith("Persistent Routes"):
            break
        if stripped.startswith("Active Routes"):
            in_active = True
            continue
        if not in_active or not stripped or stripped.startswith("Network Destination") or stripped.startswith("="):
            continue
        fields = stripped.split()
        if len(fields) < 5:
            continue
        routes.append(
            RouteEntry(
                destination=fields[0],
                netmask=fields[1],
                gateway=fields[2],
                interface=fields[3],
                flags=fields[4],
            )
        )
    return routes


def parse_proxy_registry(output: str) -> ProxyInfo:
    """
    Parse `reg query` output of the Internet Settings key.

    Args:
        output: reg stdout

    Returns:
        ProxyInfo; for per-protocol server lists the first entry is used
    """
    proxy = ProxyInfo()
    values = extract_fields(output or "", PROXY_REGISTRY_RULES)
    proxy.enabled = values.get("enabled", False)
    server = values.get("server", "")
    if server:
        first = server.split(";")[0]
        first = first.split("=", 1)[-1]
        host, _, port = first.rpartition(":")
        if host and port.isdigit():
            proxy.server, proxy.port = host, port
        else:
            proxy.server = first
    return proxy


def collect_proxy(timeout: Optional[float] = None) -> ProxyInfo:
    return parse_proxy_registry(command_output(["reg", "query", INTERNET_SETTINGS_KEY], timeout) or "")


def parse_dns_client(rows: List[Dict[str, Any]], search_rows: Optional[List[Dict[str, Any]]] = None) -> DNSConfig:
    """
    Build DNS configuration from Get-DnsClientServerAddress rows.

    Args:
        rows: Rows with InterfaceAlias and ServerAddresses
        search_rows: Get-DnsClientGlobalSetting rows with SuffixSearchList

    Returns:
        DNSConfig with de-duplicated servers; resolution_order lists the
        interfaces that have servers configured
    """
    dns = DNSConfig()
    for row in rows:
        servers = row.get("ServerAddresses") or []
        if isinstance(servers, str):
            servers = [servers]
        if servers:
            dns.resolution_order.append(str(row.get("InterfaceAlias", "")))
        for server in servers:
            if server not in dns.servers:
                dns.servers.append(server)
    for row in search_rows or []:
        suffixes = row.get("SuffixSearchList") or []
        if isinstance(suffixes, str):
            suffixes = [suffixes]
        for suffix in suffixes:
            if suffix not in dns.search_domains:
                dns.search_domains.append(suffix)
    return dns


def collect_dns(timeout: Optional[float] = None) -> DNSConfig:
    rows = powershell_json(
        "Get-DnsClientServerAddress -AddressFamily IPv4 | Select-Object InterfaceAlias, ServerAddresses", timeout
    )
    search_rows = powershell_json("Get-DnsClientGlobalSetting | Select-Object SuffixSearchList", timeout)
    return parse_dns_client(rows, search_rows)


def hosts_file_path() -> str:
    system_root = os.environ.get("SystemRoot", "C:\\Windows")
    return os.path.join(system_root, "System32", "drivers", "etc", "hosts")


def parse_netsh_interface_table(output: str) -> List[Dict[str, str]]:
    """
    Parse `netsh interface show interface` rows.

    Args:
        output: netsh stdout

    Returns:
        List of dicts with admin_state, state, type and name
    """
    rows = []
    for admin_state, state, if_type, name in find_all(
        r"^(Enabled|Disabled)\s+(\S+)\s+(\S+)\s+(.+?)\s*$", output or ""
    ):
        rows.append({"admin_state": admin_state, "state": state, "type": if_type, "name": name})
    return rows


def parse_vpn_connections(rows: List[Dict[str, Any]]) -> List[VPNConnection]:
    """Build VPNConnection entries from Get-VpnConnection rows."""
    return [
        VPNConnection(
            name=str(row.get("Name", "")),
            id=str(row.get("Guid", "") or ""),
            status=str(row.get("ConnectionStatus", "") or ""),
        )
        for row in rows
        if row.get("Name")
    ]


def build_vpn_info(interface_rows: List[Dict[str, str]], vpn_rows: List[Dict[str, Any]]) -> VPNInfo:
    """
    Combine netsh interface rows and Get-VpnConnection rows.

    Args:
        interface_rows: Parsed `netsh interface show interface` rows
        vpn_rows: Get-VpnConnection rows

    Returns:
        VPNInfo; connected when either source reports a connection
    """
    vpn = VPNInfo()
    tunnels = [
        row
        for row in interface_rows
        if any(keyword in f"{row['name']} {row['type']}".lower() for keyword in VPN_INTERFACE_KEYWORDS)
    ]
    vpn.interfaces = [row["name"] for row in tunnels]
    vpn.connections = parse_vpn_connections(vpn_rows)
    vpn.services = [c.name for c in vpn.connections]

    providers = []
    active = [c for c in vpn.connections if c.status == "Connected"]
    if active:
        providers.append("Windows VPN")
        vpn.node_name = active[0].name
        for row in vpn_rows:
            if row.get("Name") == active[0].name:
                vpn.server = str(row.get("ServerAddress", "") or "")
    if any(row["state"] == "Connected" for row in tunnels):
        providers.append("Tunnel interface")

    vpn.is_connected = bool(providers)
    vpn.provider = ", ".join(providers)
    vpn.status = "Connected" if vpn.is_connected else "Disconnected"
    return vpn


def collect_vpn(timeout: Optional[float] = None) -> VPNInfo:
    interface_rows = parse_netsh_interface_table(
        command_output(["netsh", "interface", "show", "interface"], timeout) or ""
    )
    vpn_rows = powershell_json("Get-VpnConnection | Select-Object Name, Guid, ServerAddress, ConnectionStatus", timeout)
    return build_vpn_info(interface_rows, vpn_rows)
