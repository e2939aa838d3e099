# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Logging utilities package.

Provides utilities for logging configuration and console/file handlers.
"""

from .logging_config import *

__all__ = [
    # Logging configuration
    'configure_logging',
    'setup_command_logging',

    # Handler management
    'add_file_log_handler',
    'remove_log_handlers',
    'cleanup_logging',

    # Logger utilities
    'suppress_third_party_loggers',

    # Constants
    'DEFAULT_LOG_FORMAT',
    'MESSAGE_ONLY_FORMAT',
    'DEBUG_MESSAGE_ONLY_FORMAT',
]
