# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Windows system information collection.
"""

from .collector import WindowsCollector

__all__ = ["WindowsCollector"]
