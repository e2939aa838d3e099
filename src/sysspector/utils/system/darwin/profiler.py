# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Helpers for macOS system_profiler and property list data.
"""

import logging
import plistlib
from typing import Any, Dict, List, Optional
from xml.parsers.expat import ExpatError

from ...core.process import command_output

logger = logging.getLogger(__name__)


def system_profiler_text(data_type: str, timeout: Optional[float] = None) -> Optional[str]:
    """
    Run system_profiler with text output.

    Args:
        data_type: Data type such as SPHardwareDataType
        timeout: Execution timeout

    Returns:
        Text output or None on failure
    """
    return command_output(["system_profiler", data_type], timeout=timeout)


def parse_profiler_plist(output: str) -> List[Dict[str, Any]]:
    """
    Parse `system_profiler -xml` output into its list of items.

    Args:
        output: XML plist text

    Returns:
        The "_items" list of the first data type, empty when unparsable
    """
    if not output:
        return []
    try:
        data = plistlib.loads(output.encode("utf-8"))
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        logger.debug(f"Invalid system_profiler plist: {e}")
        return []
    if data and isinstance(data, list) and isinstance(data[0], dict):
        return data[0].get("_items", [])
    return []


def system_profiler_items(data_type: str, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    Run system_profiler with XML output and return its items.

    Args:
        data_type: Data type such as SPStorageDataType
        timeout: Execution timeout

    Returns:
        List of item dictionaries
    """
    output = command_output(["system_profiler", "-xml", data_type], timeout=timeout)
    return parse_profiler_plist(output or "")


def read_plist_file(path: str) -> Dict[str, Any]:
    """
    Read a property list file (XML or binary).

    Args:
        path: Path of the .plist file

    Returns:
        Parsed dictionary, empty when the file is missing or invalid
    """
    try:
        with open(path, "rb") as f:
            data = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ExpatError, ValueError) as e:
        logger.debug(f"Cannot read property list {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def profiler_section(text: str, title: str) -> str:
    """
    Return the indented block that follows a "Title:" line.

    Args:
        text: system_profiler text output
        title: Section title without the trailing colon

    Returns:
        Lines nested under the title, or an empty string when absent
    """
    lines = (text or "").splitlines()
    for index, line in enumerate(lines):
        if line.strip() != f"{title}:":
            continue
        indent = len(line) - len(line.lstrip())
        block = []
        for nested in lines[index + 1 :]:
            if nested.strip() and len(nested) - len(nested.lstrip()) <= indent:
                break
            block.append(nested)
        return "\n".join(block)
    return ""
