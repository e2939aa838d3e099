# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
CLI utilities package.

Contains the argument parser and the command implementations, keeping the
main CLI file lightweight.
"""

from .parsers import create_argument_parser

# Commands are imported dynamically as needed

__all__ = ["create_argument_parser"]
