# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Core utilities package.

This package contains core functionality shared by every collector:
- Subprocess execution
- Declarative field extraction from command output
- Priority-ordered provider chains
"""

from .extract import (
    CommandSpec,
    FieldRule,
    assign_fields,
    extract_fields,
    find_all,
    run_extraction,
    run_extractions,
    to_float,
    to_int,
    to_str,
)
from .fallback import first_available, first_available_with_source
from .process import (
    ProcessExecutor,
    ProcessResult,
    check_command_available,
    command_output,
    configure_executor,
    get_executor,
    run_command,
    run_powershell,
)
