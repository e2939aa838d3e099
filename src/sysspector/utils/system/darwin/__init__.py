# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
macOS system information collection.
"""

from .collector import DarwinCollector

__all__ = ["DarwinCollector"]
