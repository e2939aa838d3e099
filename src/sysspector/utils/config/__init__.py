# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Configuration utilities package.

Provides utilities for loading collection settings from YAML files and
environment variables, and for reading package metadata.
"""

from .config import *
from .config_loader import *

__all__ = [
    # From config
    "ConfigurationError",
    "get_default_config_path",
    "load_yaml_config",
    "merge_configs",
    "get_config_value",
    "set_config_value",
    "get_environment_config",
    "apply_environment_overrides",
    "load_settings",
    # From config_loader
    "get_project_name",
    "get_dist_name",
    "get_dist_version",
]
