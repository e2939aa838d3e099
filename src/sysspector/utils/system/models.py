# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Report data model.

A SystemReport is created empty, filled in place by the platform
collector and then handed to the formatter. Every field is best-effort:
a zero value or an empty string means the data was not available, which
is an expected state rather than an error.
"""

import json
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Type, TypeVar, get_args, get_origin, get_type_hints

T = TypeVar("T")


def _coerce(hint: Any, value: Any) -> Any:
    """Rebuild a value read from JSON according to its declared type."""
    if value is None:
        return None
    if get_origin(hint) is list:
        (item_hint,) = get_args(hint)
        return [_coerce(item_hint, item) for item in value]
    if isinstance(hint, type) and is_dataclass(hint):
        return build_dataclass(hint, value)
    return value


def build_dataclass(cls: Type[T], data: Dict[str, Any]) -> T:
    """
    Build a (possibly nested) dataclass from a plain dictionary.

    Unknown keys are ignored and missing keys keep their defaults.

    Args:
        cls: Dataclass type to build
        data: Dictionary produced by dataclasses.asdict or json.loads

    Returns:
        Dataclass instance
    """
    if not isinstance(data, dict):
        return cls()
    hints = get_type_hints(cls)
    kwargs = {}
    for f in fields(cls):
        if f.name in data:
            kwargs[f.name] = _coerce(hints[f.name], data[f.name])
    return cls(**kwargs)


# Static hardware


@dataclass
class IdentityInfo:
    hostname: str = ""
    computer_name: str = ""
    os: str = ""
    system_version: str = ""
    model: str = ""
    model_id: str = ""
    serial_number: str = ""
    uuid: str = ""
    uptime: str = ""
    uptime_seconds: int = 0


@dataclass
class CPUInfo:
    model: str = ""
    physical_cores: int = 0
    logical_cores: int = 0
    architecture: str = ""
    apple_silicon: bool = False


@dataclass
class MemoryUsage:
    total: int = 0
    used: int = 0
    free: int = 0
    used_percent: float = 0.0
    active: int = 0
    inactive: int = 0
    cached: int = 0


@dataclass
class MemoryInfo:
    total: int = 0
    type: str = ""
    usage: MemoryUsage = field(default_factory=MemoryUsage)


@dataclass
class DiskInfo:
    name: str = ""
    model: str = ""
    size: int = 0
    serial: str = ""


@dataclass
class DiskUsage:
    mount_point: str = ""
    filesystem: str = ""
    total: int = 0
    used: int = 0
    free: int = 0
    used_percent: float = 0.0


# Dynamic hardware


@dataclass
class BatteryInfo:
    """
    Battery state.

    Attributes:
        time_remaining: Estimated minutes until empty (or full when charging)
        max_capacity: Maximum capacity relative to design capacity, in percent
    """

    is_present: bool = False
    percentage: int = 0
    is_charging: bool = False
    cycle_count: int = 0
    health: str = ""
    max_capacity: int = 0
    status: str = ""
    time_remaining: int = 0


@dataclass
class ACAdapterInfo:
    connected: bool = False
    serial_number: str = ""
    name: str = ""
    wattage: int = 0
    manufacturer: str = ""


@dataclass
class BluetoothDevice:
    name: str = ""
    address: str = ""
    type: str = ""
    connected: bool = False


@dataclass
class BluetoothInfo:
    is_available: bool = False
    enabled: bool = False
    status: str = ""
    devices: List[BluetoothDevice] = field(default_factory=list)


@dataclass
class TemperatureReading:
    name: str = ""
    temperature: float = 0.0
    location: str = ""


# Network


@dataclass
class WiFiInfo:
    ssid: str = ""
    bssid: str = ""
    is_connected: bool = False
    signal_strength: int = 0
    rssi: int = 0
    noise: int = 0
    channel: int = 0
    frequency: str = ""
    phy_mode: str = ""
    tx_rate: str = ""
    mcs: int = 0
    nss: int = 0
    country_code: str = ""
    supported_phy: str = ""
    security: str = ""


@dataclass
class WiFiNetwork:
    ssid: str = ""
    auto_join: bool = False


@dataclass
class WiFiAutoJoin:
    is_configured: bool = False
    status: str = ""
    networks: List[WiFiNetwork] = field(default_factory=list)


@dataclass
class NetworkInterface:
    name: str = ""
    mac_address: str = ""
    addresses: List[str] = field(default_factory=list)
    is_up: bool = False
    speed: int = 0
    bytes_sent: int = 0
    bytes_recv: int = 0


@dataclass
class HostEntry:
    ip: str = ""
    hostname: str = ""


@dataclass
class DNSConfig:
    servers: List[str] = field(default_factory=list)
    search_domains: List[str] = field(default_factory=list)
    resolution_order: List[str] = field(default_factory=list)
    host_entries: List[HostEntry] = field(default_factory=list)


@dataclass
class VPNConnection:
    name: str = ""
    id: str = ""
    status: str = ""


@dataclass
class VPNInfo:
    is_connected: bool = False
    provider: str = ""
    node_name: str = ""
    server: str = ""
    status: str = ""
    services: List[str] = field(default_factory=list)
    interfaces: List[str] = field(default_factory=list)
    connections: List[VPNConnection] = field(default_factory=list)
    config_file: str = ""


@dataclass
class LatencyTarget:
    """Round-trip statistics for one probe target, in milliseconds."""

    name: str = ""
    host: str = ""
    min: float = 0.0
    avg: float = 0.0
    max: float = 0.0
    stddev: float = 0.0
    jitter: float = 0.0
    packet_loss: float = 0.0


@dataclass
class NetworkHop:
    hop: int = 0
    host: str = ""
    loss: float = 0.0
    sent: int = 0
    last: float = 0.0
    avg: float = 0.0
    best: float = 0.0
    worst: float = 0.0
    stddev: float = 0.0


@dataclass
class LatencyInfo:
    avg_latency: float = 0.0
    jitter: float = 0.0
    packet_loss: float = 0.0
    targets: List[LatencyTarget] = field(default_factory=list)
    hops: List[NetworkHop] = field(default_factory=list)


@dataclass
class ProxyInfo:
    enabled: bool = False
    server: str = ""
    port: str = ""


@dataclass
class RouteEntry:
    destination: str = ""
    gateway: str = ""
    flags: str = ""
    interface: str = ""
    netmask: str = ""


@dataclass
class NetworkInfo:
    wifi: WiFiInfo = field(default_factory=WiFiInfo)
    auto_join: WiFiAutoJoin = field(default_factory=WiFiAutoJoin)
    ip_address: str = ""
    mac_address: str = ""
    interfaces: List[NetworkInterface] = field(default_factory=list)
    country_code: str = ""
    awdl_enabled: bool = False
    awdl_status: str = ""
    public_ip: str = ""
    dns: DNSConfig = field(default_factory=DNSConfig)
    vpn: VPNInfo = field(default_factory=VPNInfo)
    latency: LatencyInfo = field(default_factory=LatencyInfo)
    proxy: ProxyInfo = field(default_factory=ProxyInfo)
    routes: List[RouteEntry] = field(default_factory=list)
    traffic_rate: str = ""


# Software


@dataclass
class AppInfo:
    name: str = ""
    version: str = ""
    install_date: str = ""
    path: str = ""


@dataclass
class ProcessInfo:
    """
    A running process.

    Attributes:
        memory: Resident set size in bytes
        network_usage: Network throughput in bytes per second
    """

    pid: int = 0
    name: str = ""
    cpu_percent: float = 0.0
    memory: int = 0
    network_usage: float = 0.0


@dataclass
class SoftwareInfo:
    installed_apps: List[AppInfo] = field(default_factory=list)
    running_apps: List[ProcessInfo] = field(default_factory=list)


@dataclass
class SystemReport:
    """
    Aggregate report produced by a single collection run.

    Attributes:
        identity: Host identity (hostname, OS, model, serial, UUID, uptime)
        cpu: Processor model and core counts
        memory: Installed memory and current usage
        disks: Physical disks
        disk_usage: Usage per mounted filesystem
        battery: Battery state
        ac_adapter: Power adapter details
        bluetooth: Bluetooth controller and connected devices
        temperatures: Sensor readings in degrees Celsius
        network: WiFi, interfaces, DNS, VPN, latency, proxy and routing
        software: Installed applications and running processes
    """

    identity: IdentityInfo = field(default_factory=IdentityInfo)
    cpu: CPUInfo = field(default_factory=CPUInfo)
    memory: MemoryInfo = field(default_factory=MemoryInfo)
    disks: List[DiskInfo] = field(default_factory=list)
    disk_usage: List[DiskUsage] = field(default_factory=list)
    battery: BatteryInfo = field(default_factory=BatteryInfo)
    ac_adapter: ACAdapterInfo = field(default_factory=ACAdapterInfo)
    bluetooth: BluetoothInfo = field(default_factory=BluetoothInfo)
    temperatures: List[TemperatureReading] = field(default_factory=list)
    network: NetworkInfo = field(default_factory=NetworkInfo)
    software: SoftwareInfo = field(default_factory=SoftwareInfo)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SystemReport":
        """
        Create a SystemReport from a dictionary.

        Args:
            data: Dictionary produced by to_dict or parsed from to_json output

        Returns:
            SystemReport instance
        """
        return build_dataclass(cls, data)

    @classmethod
    def from_json(cls, text: str) -> "SystemReport":
        return cls.from_dict(json.loads(text))
