# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
CLI command implementations package.
"""

# Commands are imported dynamically to avoid loading collectors at parse time
# Use get_command_function() to import and get command functions


def get_command_function(command_name: str):
    """
    Dynamically import and return a command function.

    Args:
        command_name: Name of the command to import

    Returns:
        The command function
    """
    if command_name == "run_system_info":
        from .info import run_system_info

        return run_system_info
    else:
        raise ValueError(f"Unknown command: {command_name}")


__all__ = ["get_command_function"]
