# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS platform collector.
"""

import logging

from ...core.process import command_output
from .. import hardware as common_hardware
from .. import network as common_network
from .. import software as common_software
from ..collector import PlatformCollector
from ..models import SystemReport
from . import hardware, network, power, sensors, software

logger = logging.getLogger(__name__)

# Mount points that mirror the system volume or hold OS internals
IGNORED_MOUNT_PREFIXES = ("/System/Volumes/", "/private/var/vm", "/Volumes/Recovery")


class DarwinCollector(PlatformCollector):
    """Collects system information on macOS."""

    name = "darwin"
    system_name = "Darwin"

    def collect_static(self, report: SystemReport) -> None:
        overview = self.run_step("identity", hardware.collect_identity, report.identity, self.profiler_timeout) or {}
        cpu_values = (
            self.run_step(
                "CPU", hardware.collect_cpu, report.cpu, report.identity.model_id, overview.get("chip", "")
            )
            or {}
        )
        self.run_step(
            "memory", hardware.collect_memory, report.memory, cpu_values.get("memory_total", 0), self.profiler_timeout
        )
        disks = self.run_step("disks", hardware.collect_disks, self.profiler_timeout)
        if disks:
            report.disks = disks

    def collect_dynamic(self, report: SystemReport) -> None:
        disk_usage = self.run_step("disk usage", common_hardware.collect_disk_usage, IGNORED_MOUNT_PREFIXES)
        if disk_usage:
            report.disk_usage = disk_usage
        usage = self.run_step("memory usage", common_hardware.collect_memory_usage)
        if usage:
            report.memory.usage = usage
        self.run_step("battery", power.collect_power, report.battery, report.ac_adapter, self.profiler_timeout)
        bluetooth = self.run_step("bluetooth", sensors.collect_bluetooth, self.profiler_timeout)
        if bluetooth:
            report.bluetooth = bluetooth
        temperatures = self.run_step("temperature", sensors.collect_temperatures)
        if temperatures:
            report.temperatures = temperatures
        self.run_step("uptime", self._collect_uptime, report)

    def _collect_uptime(self, report: SystemReport) -> None:
        boot_time = software.collect_boot_time()
        seconds = (
            common_hardware.uptime_since(boot_time) if boot_time else common_hardware.psutil_uptime()
        )
        report.identity.uptime_seconds = seconds
        report.identity.uptime = common_hardware.format_uptime(seconds)

    def collect_network(self, report: SystemReport) -> None:
        net = report.network
        timeout = self.query_timeout

        wifi = self.run_step("WiFi", network.collect_wifi, self.profiler_timeout)
        if wifi:
            net.wifi = wifi
        device = network.parse_wifi_device(
            self.run_step("WiFi device", self._command_text, ["networksetup", "-listallhardwareports"]) or ""
        )
        auto_join = self.run_step("WiFi auto-join", network.collect_auto_join, device)
        if auto_join:
            net.auto_join = auto_join

        ifconfig = network.parse_ifconfig(self.run_step("interfaces", self._command_text, ["ifconfig", "-a"]) or "")
        primary = network.primary_address(ifconfig, device)
        net.ip_address, net.mac_address = primary["ip"], primary["mac"]
        awdl = network.awdl_state(ifconfig)
        net.awdl_enabled, net.awdl_status = awdl["enabled"], awdl["status"]
        interfaces = self.run_step("interface counters", common_network.collect_interfaces)
        if interfaces:
            net.interfaces = interfaces

        dns = self.run_step("DNS", network.collect_dns, timeout)
        if dns:
            net.dns = dns
        net.dns.host_entries = self.run_step("hosts file", common_network.read_hosts_file, "/etc/hosts") or []

        vpn = self.run_step(
            "VPN",
            network.collect_vpn,
            ifconfig,
            self.setting("network.vpn_processes", []),
            self.setting("network.anyconnect_path", ""),
        )
        if vpn:
            net.vpn = vpn

        self.collect_public_address(report)

        proxy = self.run_step("proxy", network.collect_proxy, self.setting("network.proxy_service", "Wi-Fi"))
        if proxy:
            net.proxy = proxy
        routes = self.run_step("routes", self._collect_routes)
        if routes:
            net.routes = routes

        interface = self.setting("network.traffic_interface", device) or device
        net.traffic_rate = (
            self.run_step(
                "traffic",
                common_network.measure_traffic_rate,
                lambda: network.netstat_traffic_sample(interface),
                self.setting("network.traffic_sample_interval", 1.0),
            )
            or ""
        )

        self.run_step("latency", self.collect_latency, report)

    def _command_text(self, command) -> str:
        return command_output(command, timeout=self.query_timeout) or ""

    def _collect_routes(self):
        return network.parse_netstat_routes(self._command_text(["netstat", "-nr", "-f", "inet"]))

    def collect_software(self, report: SystemReport) -> None:
        report.identity.system_version = self.run_step("system version", software.collect_system_version) or ""
        report.identity.computer_name = self.run_step("computer name", software.collect_computer_name) or ""

        apps = self.run_step(
            "installed applications",
            software.collect_installed_apps,
            self.setting("software.application_dirs", ["/Applications"]),
        )
        if apps:
            report.software.installed_apps = apps

        network_usage = {}
        if self.setting("software.process_network_usage", True):
            network_usage = (
                self.run_step("process network usage", network.collect_process_network_usage, 1.0) or {}
            )
        processes = self.run_step(
            "running processes",
            common_software.collect_running_processes,
            self.setting("software.skip_process_prefixes", []),
            self.setting("software.process_limit", 50),
            network_usage,
        )
        if processes:
            report.software.running_apps = processes
