# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
WMI query helper for Windows collection.

Queries go through the `wmi` package first. When the COM connection or
the query fails, the same class is read through PowerShell
`Get-CimInstance` with the result converted to JSON.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ...core.process import run_powershell

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "root\\cimv2"


def parse_cim_json(output: Optional[str]) -> List[Dict[str, Any]]:
    """
    Parse ConvertTo-Json output of one or more CIM instances.

    Args:
        output: PowerShell stdout

    Returns:
        List of property dictionaries; a single instance is wrapped in a list
    """
    if not output or not output.strip():
        return []
    try:
        data = json.loads(output)
    except ValueError as e:
        logger.debug(f"Invalid JSON from PowerShell: {e}")
        return []
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    return []


def powershell_json(script: str, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
    """Run a PowerShell pipeline ending in ConvertTo-Json and parse the rows."""
    return parse_cim_json(run_powershell(f"{script} | ConvertTo-Json -Compress -Depth 3", timeout=timeout))


class WMIClient:
    """
    Read WMI classes with a PowerShell fallback.

    The COM connection is created on first use and reused for every query
    against the same namespace.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the client.

        Args:
            timeout: Timeout applied to the PowerShell fallback
        """
        self.timeout = timeout
        self._connections: Dict[str, Any] = {}
        self._unavailable: set = set()

    def _connect(self, namespace: str) -> Optional[Any]:
        if namespace in self._unavailable:
            return None
        if namespace not in self._connections:
            try:
                import wmi
            except ImportError as e:
                logger.info(f"WMI module not available: {e}")
                self._unavailable.add(namespace)
                return None

            try:
                self._connections[namespace] = wmi.WMI(namespace=namespace)
            except Exception as e:
                logger.info(f"WMI connection to {namespace} failed: {e}")
                self._unavailable.add(namespace)
                return None
        return self._connections[namespace]

    def _query_wmi(
        self, class_name: str, properties: Sequence[str], namespace: str
    ) -> Optional[List[Dict[str, Any]]]:
        connection = self._connect(namespace)
        if connection is None:
            return None
        query = f"SELECT {', '.join(properties)} FROM {class_name}"
        try:
            instances = connection.query(query)
        except Exception as e:
            logger.info(f"WMI query failed: {e}. Query: {query}")
            return None
        return [{prop: getattr(instance, prop, None) for prop in properties} for instance in instances]

    def _query_powershell(
        self, class_name: str, properties: Sequence[str], namespace: str
    ) -> List[Dict[str, Any]]:
        script = (
            f"Get-CimInstance -Namespace '{namespace}' -ClassName {class_name} "
            f"| Select-Object {','.join(properties)}"
        )
        return powershell_json(script, timeout=self.timeout)

    def query(
        self, class_name: str, properties: Sequence[str], namespace: str = DEFAULT_NAMESPACE
    ) -> List[Dict[str, Any]]:
        """
        Read selected properties of every instance of a WMI class.

        Args:
            class_name: WMI class, e.g. "Win32_BIOS"
            properties: Property names to select
            namespace: WMI namespace

        Returns:
            List of property dictionaries, empty when both sources failed
        """
        rows = self._query_wmi(class_name, properties, namespace)
        if rows is None:
            logger.debug(f"Falling back to PowerShell for {class_name}")
            rows = self._query_powershell(class_name, properties, namespace)
        return rows

    def first(
        self, class_name: str, properties: Sequence[str], namespace: str = DEFAULT_NAMESPACE
    ) -> Dict[str, Any]:
        """Return the first instance of a WMI class, or an empty dict."""
        rows = self.query(class_name, properties, namespace)
        return rows[0] if rows else {}
