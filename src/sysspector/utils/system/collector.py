# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Platform collector interface and registry.

Each supported operating system provides a PlatformCollector subclass with
four collection stages. The collector matching platform.system() is
selected at startup; an unknown system is the only fatal collection error.
"""

import importlib
import logging
import platform
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from ..config import get_config_value
from .models import SystemReport
from .network import fetch_country_code, fetch_public_ip, probe_targets, summarize_latency, trace_route

logger = logging.getLogger(__name__)

# platform.system() name -> "module:ClassName"
_COLLECTORS: Dict[str, str] = {
    "Darwin": "sysspector.utils.system.darwin:DarwinCollector",
    "Windows": "sysspector.utils.system.windows:WindowsCollector",
}


class UnsupportedPlatformError(Exception):
    """Exception raised when no collector exists for the running OS."""

    pass


class PlatformCollector(ABC):
    """
    Base class for per-OS collectors.

    Subclasses implement the four stages. Each stage mutates the report in
    place and should wrap independent sub-collections with run_step so one
    failure never prevents the others from running.
    """

    name = ""
    system_name = ""

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        """
        Initialize the collector.

        Args:
            settings: Collection settings loaded from YAML
        """
        self.settings = settings or {}
        self.errors: List[str] = []

    def setting(self, key_path: str, default: Any = None) -> Any:
        """Read a collection setting using dot notation."""
        return get_config_value(self.settings, key_path, default)

    @property
    def query_timeout(self) -> float:
        return self.setting("commands.query_timeout", 30)

    @property
    def profiler_timeout(self) -> float:
        return self.setting("commands.profiler_timeout", 120)

    def run_step(self, section: str, func: Callable[..., Any], *args: Any) -> Any:
        """
        Run one sub-collection, logging and recording any failure.

        Args:
            section: Human-readable name of what is collected
            func: Callable performing the collection
            *args: Arguments passed to func

        Returns:
            The callable's return value, or None if it raised
        """
        try:
            return func(*args)
        except Exception as e:
            message = f"Failed to collect {section}: {e}"
            logger.warning(message)
            logger.debug(f"{section} collection error", exc_info=True)
            self.errors.append(message)
            return None

    def collect_latency(self, report: SystemReport) -> None:
        """Probe the configured latency targets and trace the route to the trace target."""
        latency = report.network.latency
        if self.setting("network.latency.enabled", True):
            targets = probe_targets(
                self.setting("network.latency.targets", []),
                self.setting("network.latency.ping_count", 5),
                system=self.system_name,
            )
            latency = summarize_latency(targets)
        if self.setting("network.trace.enabled", True):
            latency.hops = trace_route(
                self.setting("network.trace.target", "8.8.8.8"), self.setting("network.trace.count", 5)
            )
        report.network.latency = latency

    def collect_public_address(self, report: SystemReport) -> None:
        """Look up the public IP and its country; the WiFi country code is the fallback."""
        net = report.network
        http_timeout = self.setting("network.http_timeout", 5)
        net.public_ip = (
            self.run_step(
                "public IP", fetch_public_ip, self.setting("network.public_ip_services", []), http_timeout
            )
            or ""
        )
        net.country_code = (
            self.run_step(
                "country code", fetch_country_code, self.setting("network.country_code_service", ""), http_timeout
            )
            or net.wifi.country_code
        )

    @abstractmethod
    def collect_static(self, report: SystemReport) -> None:
        """Populate identity, CPU, memory size/type, disks and UUID."""

    @abstractmethod
    def collect_dynamic(self, report: SystemReport) -> None:
        """Populate usage, battery, power adapter, bluetooth, temperature and uptime."""

    @abstractmethod
    def collect_network(self, report: SystemReport) -> None:
        """Populate WiFi, interfaces, DNS, VPN, proxy, routes, traffic and latency."""

    @abstractmethod
    def collect_software(self, report: SystemReport) -> None:
        """Populate system version, installed applications and running processes."""

    def collect(self, report: Optional[SystemReport] = None) -> SystemReport:
        """
        Run every stage in sequence.

        Args:
            report: Report to fill, a new one is created when omitted

        Returns:
            SystemReport: The populated report
        """
        report = report if report is not None else SystemReport()
        stages = [
            ("static hardware", self.collect_static),
            ("dynamic hardware", self.collect_dynamic),
            ("network", self.collect_network),
            ("software", self.collect_software),
        ]
        for stage_name, stage in stages:
            logger.info(f"Collecting {stage_name} information")
            self.run_step(f"{stage_name} information", stage, report)
        return report


def register_collector(system_name: str, target: str) -> None:
    """
    Register a collector class for an operating system.

    Args:
        system_name: Value returned by platform.system()
        target: Import path in "module:ClassName" form
    """
    _COLLECTORS[system_name] = target


def get_supported_systems() -> List[str]:
    """Return the operating systems with a registered collector."""
    return sorted(_COLLECTORS)


def get_collector(system_name: Optional[str] = None, settings: Optional[Dict[str, Any]] = None) -> PlatformCollector:
    """
    Instantiate the collector for an operating system.

    Args:
        system_name: Operating system name, defaults to platform.system()
        settings: Collection settings

    Returns:
        PlatformCollector: Collector instance

    Raises:
        UnsupportedPlatformError: If no collector is registered for the system
    """
    system_name = system_name or platform.system()
    target = _COLLECTORS.get(system_name)
    if target is None:
        raise UnsupportedPlatformError(f"Unsupported operating system: {system_name}")

    module_name, class_name = target.split(":", 1)
    module = importlib.import_module(module_name)
    collector_class = getattr(module, class_name)
    logger.debug(f"Using {collector_class.__name__} for {system_name}")
    return collector_class(settings)
