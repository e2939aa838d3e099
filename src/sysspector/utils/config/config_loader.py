# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Package metadata utilities.
"""

import importlib.metadata
import logging
from typing import Optional

logger = logging.getLogger(__name__)

PROJECT_NAME = "sysspector"


def get_project_name() -> str:
    """Get the project name used for the CLI and default file names."""
    return PROJECT_NAME


def get_dist_name() -> Optional[str]:
    """Get the distribution name for the current package."""
    pkg = __name__.split(".", 1)[0]
    mapping = importlib.metadata.packages_distributions()
    return mapping.get(pkg, [None])[0]


def get_dist_version(dist: Optional[str] = None) -> str:
    """Get the version of a distribution."""
    if not dist:
        dist = get_dist_name() or PROJECT_NAME
    try:
        return importlib.metadata.version(dist)
    except importlib.metadata.PackageNotFoundError:
        return "unknown"
