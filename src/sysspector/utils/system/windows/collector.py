# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Windows platform collector.
"""

import logging

from ...core.process import command_output
from .. import hardware as common_hardware
from .. import network as common_network
from .. import software as common_software
from ..collector import PlatformCollector
from ..models import SystemReport
from . import hardware, network, software
from .wmi_client import WMIClient

logger = logging.getLogger(__name__)


class WindowsCollector(PlatformCollector):
    """Collects system information on Windows."""

    name = "windows"
    system_name = "Windows"

    def __init__(self, settings=None):
        super().__init__(settings)
        self.wmi = WMIClient(timeout=self.query_timeout)

    def collect_static(self, report: SystemReport) -> None:
        system = self.run_step("identity", hardware.collect_identity, self.wmi, report.identity) or {}
        self.run_step("CPU", hardware.collect_cpu, self.wmi, report.cpu)
        total = 0
        try:
            total = int(system.get("TotalPhysicalMemory") or 0)
        except (TypeError, ValueError):
            logger.debug(f"Unexpected TotalPhysicalMemory value: {system.get('TotalPhysicalMemory')}")
        self.run_step("memory", hardware.collect_memory, self.wmi, report.memory, total)
        disks = self.run_step("disks", hardware.collect_disks, self.wmi)
        if disks:
            report.disks = disks

    def collect_dynamic(self, report: SystemReport) -> None:
        disk_usage = self.run_step("disk usage", common_hardware.collect_disk_usage)
        if disk_usage:
            report.disk_usage = disk_usage
        usage = self.run_step("memory usage", common_hardware.collect_memory_usage)
        if usage:
            report.memory.usage = usage
        self.run_step(
            "battery", hardware.collect_power, self.wmi, report.battery, report.ac_adapter, self.query_timeout
        )
        bluetooth = self.run_step("bluetooth", hardware.collect_bluetooth, self.query_timeout)
        if bluetooth:
            report.bluetooth = bluetooth
        temperatures = self.run_step("temperature", hardware.collect_temperatures, self.wmi)
        if temperatures:
            report.temperatures = temperatures
        seconds = self.run_step("uptime", common_hardware.psutil_uptime)
        if seconds is not None:
            report.identity.uptime_seconds = seconds
            report.identity.uptime = common_hardware.format_uptime(seconds)

    def collect_network(self, report: SystemReport) -> None:
        net = report.network
        timeout = self.query_timeout

        wifi = self.run_step("WiFi", network.collect_wifi, timeout)
        if wifi:
            net.wifi = wifi

        interfaces = self.run_step("interfaces", common_network.collect_interfaces) or []
        net.interfaces = interfaces
        primary = network.primary_address(interfaces)
        net.ip_address, net.mac_address = primary["ip"], primary["mac"]

        dns = self.run_step("DNS", network.collect_dns, timeout)
        if dns:
            net.dns = dns
        net.dns.host_entries = (
            self.run_step("hosts file", common_network.read_hosts_file, network.hosts_file_path()) or []
        )

        vpn = self.run_step("VPN", network.collect_vpn, timeout)
        if vpn:
            net.vpn = vpn

        self.collect_public_address(report)

        proxy = self.run_step("proxy", network.collect_proxy, timeout)
        if proxy:
            net.proxy = proxy
        routes = self.run_step("routes", self._collect_routes)
        if routes:
            net.routes = routes

        interface = primary["name"] or None
        net.traffic_rate = (
            self.run_step(
                "traffic",
                common_network.measure_traffic_rate,
                lambda: common_network.psutil_traffic_sample(interface),
                self.setting("network.traffic_sample_interval", 1.0),
            )
            or ""
        )

        self.run_step("latency", self.collect_latency, report)

    def _collect_routes(self):
        return network.parse_route_print(command_output(["route", "print", "-4"], self.query_timeout) or "")

    def collect_software(self, report: SystemReport) -> None:
        report.identity.system_version = self.run_step("system version", software.collect_system_version) or ""

        apps = self.run_step("installed applications", software.collect_installed_apps, self.query_timeout)
        if apps:
            report.software.installed_apps = apps

        processes = self.run_step(
            "running processes",
            common_software.collect_running_processes,
            (),
            self.setting("software.process_limit", 50),
            {},
        )
        if processes:
            report.software.running_apps = processes
