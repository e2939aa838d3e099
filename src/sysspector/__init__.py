# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

from .utils.config.config_loader import get_dist_version

__version__ = get_dist_version()
