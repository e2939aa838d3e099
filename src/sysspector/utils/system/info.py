# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Main system information collection module.

Provides the primary interface for collecting a complete system report by
selecting the collector for the running operating system and running its
stages in sequence.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .collector import get_collector
from .models import SystemReport

logger = logging.getLogger(__name__)


def collect_system_report(
    settings: Optional[Dict[str, Any]] = None, system_name: Optional[str] = None
) -> Tuple[SystemReport, List[str]]:
    """
    Collect all system information for the running operating system.

    Args:
        settings: Collection settings
        system_name: Operating system name, defaults to platform.system()

    Returns:
        Tuple of the populated report and the non-fatal error messages

    Raises:
        UnsupportedPlatformError: If the operating system is not supported
    """
    collector = get_collector(system_name, settings)
    logger.debug(f"Collecting system information with the {collector.name} collector")

    report = collector.collect()

    if collector.errors:
        logger.info(f"System information collected with {len(collector.errors)} error(s)")
    else:
        logger.debug("System information collected without errors")
    return report, list(collector.errors)
