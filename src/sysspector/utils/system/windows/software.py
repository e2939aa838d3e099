# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Windows software collection.
"""

import logging
import platform
import re
from typing import Any, Dict, List, Optional, Tuple

from ..models import AppInfo
from .wmi_client import powershell_json

logger = logging.getLogger(__name__)

UNINSTALL_KEYS = (
    "HKLM:\\Software\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\*",
    "HKLM:\\Software\\WOW6432Node\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\*",
    "HKCU:\\Software\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\*",
)


def format_install_date(value: Any) -> str:
    """Convert a registry InstallDate ("20240115") to ISO form."""
    text = str(value or "").strip()
    match = re.match(r"^(\d{4})(\d{2})(\d{2})$", text)
    if match:
        return "-".join(match.groups())
    return text


def parse_uninstall_entries(rows: List[Dict[str, Any]]) -> List[AppInfo]:
    """
    Build the installed application list from uninstall registry rows.

    Entries present in several hives are listed once.

    Args:
        rows: Rows with DisplayName, DisplayVersion, InstallDate and InstallLocation

    Returns:
        List of AppInfo sorted by name
    """
    apps: Dict[Tuple[str, str], AppInfo] = {}
    for row in rows:
        name = str(row.get("DisplayName") or "").strip()
        if not name:
            continue
        version = str(row.get("DisplayVersion") or "").strip()
        key = (name.lower(), version)
        if key in apps:
            continue
        apps[key] = AppInfo(
            name=name,
            version=version,
            install_date=format_install_date(row.get("InstallDate")),
            path=str(row.get("InstallLocation") or "").strip(),
        )
    return sorted(apps.values(), key=lambda app: app.name.lower())


def collect_installed_apps(timeout: Optional[float] = None) -> List[AppInfo]:
    keys = ", ".join(f"'{key}'" for key in UNINSTALL_KEYS)
    script = (
        f"Get-ItemProperty -Path {keys} -ErrorAction SilentlyContinue "
        "| Where-Object { $_.DisplayName } "
        "| Select-Object DisplayName, DisplayVersion, InstallDate, InstallLocation"
    )
    return parse_uninstall_entries(powershell_json(script, timeout))


def format_system_version(release: str, version: str, edition: str = "", service_pack: str = "") -> str:
    """
    Build the OS version string.

    Args:
        release: Windows release, e.g. "10" or "11"
        version: Build version, e.g. "10.0.22631"
        edition: Edition name, e.g. "Professional"
        service_pack: Service pack label, if any

    Returns:
        String such as "Windows 11 Professional (10.0.22631)"
    """
    if not release and not version:
        return ""
    parts = ["Windows", release]
    if edition:
        parts.append(edition)
    if service_pack:
        parts.append(service_pack)
    text = " ".join(p for p in parts if p)
    if version:
        text += f" ({version})"
    return text


def collect_system_version() -> str:
    release, version, service_pack, _ = platform.win32_ver()
    return format_system_version(release, version, platform.win32_edition() or "", service_pack)
