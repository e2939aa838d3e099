# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS software collection.
"""

import logging
import os
from typing import List, Optional, Sequence

from ...core.extract import CommandSpec, FieldRule, run_extraction, to_int
from ...core.process import command_output
from ..models import AppInfo
from ..software import format_timestamp
from .profiler import read_plist_file

logger = logging.getLogger(__name__)

SW_VERS = CommandSpec(
    ("sw_vers",),
    (
        FieldRule("product_name", r"^ProductName:\s*(.+)$"),
        FieldRule("product_version", r"^ProductVersion:\s*(.+)$"),
        FieldRule("build_version", r"^BuildVersion:\s*(.+)$"),
    ),
)

BOOT_TIME = CommandSpec(("sysctl", "-n", "kern.boottime"), (FieldRule("boot_time", r"sec = (\d+)", to_int),))


def collect_system_version() -> str:
    """
    Build the OS version string from sw_vers.

    Returns:
        String such as "macOS 14.2.1 (23C71)", empty when sw_vers failed
    """
    values = run_extraction(SW_VERS)
    version = values.get("product_version")
    if not version:
        return ""
    text = f"macOS {version}"
    if values.get("build_version"):
        text += f" ({values['build_version']})"
    return text


def collect_computer_name() -> str:
    return (command_output(["scutil", "--get", "ComputerName"]) or "").strip()


def collect_boot_time() -> Optional[int]:
    """Boot time as a POSIX timestamp from kern.boottime."""
    return run_extraction(BOOT_TIME).get("boot_time")


def read_app_bundle(path: str) -> AppInfo:
    """
    Describe an application bundle.

    Args:
        path: Path of the .app directory

    Returns:
        AppInfo with the bundle version and modification date
    """
    name = os.path.splitext(os.path.basename(path))[0]
    info = read_plist_file(os.path.join(path, "Contents", "Info.plist"))
    version = info.get("CFBundleShortVersionString") or info.get("CFBundleVersion") or ""
    try:
        install_date = format_timestamp(os.path.getmtime(path))
    except OSError:
        install_date = ""
    return AppInfo(name=name, version=str(version), install_date=install_date, path=path)


def collect_installed_apps(app_dirs: Sequence[str]) -> List[AppInfo]:
    """
    Walk application directories for .app bundles.

    Bundles nested inside other bundles are not listed.

    Args:
        app_dirs: Directories to walk

    Returns:
        List of AppInfo sorted by name
    """
    apps = []
    for app_dir in app_dirs:
        if not os.path.isdir(app_dir):
            logger.debug(f"Application directory not found: {app_dir}")
            continue
        for root, dirs, _ in os.walk(app_dir):
            bundles = [d for d in dirs if d.endswith(".app")]
            for bundle in bundles:
                apps.append(read_app_bundle(os.path.join(root, bundle)))
            dirs[:] = [d for d in dirs if not d.endswith(".app")]
    apps.sort(key=lambda app: app.name.lower())
    return apps
