# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Utility modules for sysspector.

- core: Subprocess execution, field extraction and provider chains
- system: Report model, platform collectors and formatting
- cli: Argument parsing and command implementations
- config: Collection settings and package metadata
- logging: Logging configuration and utilities
"""

from . import config, core, logging, system

__all__ = [
    # Sub-packages
    "core",
    "system",
    "config",
    "logging",
]
