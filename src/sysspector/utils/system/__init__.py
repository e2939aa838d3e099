# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
System information utilities package.

This package provides the report data model, the per-OS collectors and the
formatting of collected reports. Platform collectors are imported lazily
by the collector registry, so importing this package never loads
OS-specific dependencies.
"""

from . import formatter, hardware, models, network, software
from .collector import (
    PlatformCollector,
    UnsupportedPlatformError,
    get_collector,
    get_supported_systems,
    register_collector,
)
from .formatter import (
    ReportWriteError,
    format_json_report,
    format_summary,
    format_text_report,
    is_json_path,
    write_report,
)
from .info import collect_system_report
from .models import SystemReport

__all__ = [
    # Main classes
    "PlatformCollector",
    "SystemReport",
    # Main functions
    "collect_system_report",
    "get_collector",
    "get_supported_systems",
    "register_collector",
    # Formatting functions
    "format_text_report",
    "format_summary",
    "format_json_report",
    "is_json_path",
    "write_report",
    # Exceptions
    "UnsupportedPlatformError",
    "ReportWriteError",
    # Submodules
    "formatter",
    "hardware",
    "models",
    "network",
    "software",
]
