# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Argument parser setup for the CLI.

Keeps every argument definition in one place.
"""

import argparse

from sysspector.utils.config import get_dist_version, get_project_name


def get_cli_name() -> str:
    """Get the CLI command name based on the project name."""
    return get_project_name().lower()


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        argparse.ArgumentParser: Configured parser ready for argument parsing
    """
    cli_name = get_cli_name()

    parser = argparse.ArgumentParser(
        prog=cli_name,
        description="Collect hardware, network and software information about this machine",
        epilog=f"""
EXAMPLES:
  {cli_name}                          # Print the report
  {cli_name} --json                   # Print the report followed by a JSON dump
  {cli_name} --save                   # Also save a summary to sysinfo.txt
  {cli_name} --save report.json       # Also save the full report as JSON
  {cli_name} --apps --processes       # List installed applications and processes
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"{get_dist_version()}")

    output_group = parser.add_argument_group("OUTPUT OPTIONS")
    output_group.add_argument(
        "--save",
        nargs="?",
        const="",
        default=None,
        metavar="FILE",
        help=(
            "Also write the report to FILE. A .json extension writes the full report as JSON, "
            "any other extension writes a short text summary (default: sysinfo.txt, or sysinfo.json with --json)"
        ),
    )
    output_group.add_argument("--json", action="store_true", help="Print a JSON dump after the formatted report")
    output_group.add_argument("--apps", action="store_true", help="List every installed application")
    output_group.add_argument("--processes", action="store_true", help="List every collected running process")
    output_group.add_argument(
        "--no-pause", action="store_true", help="Do not wait for Enter before exiting on Windows"
    )

    settings_group = parser.add_argument_group("SETTINGS")
    settings_group.add_argument(
        "--config",
        metavar="FILE",
        help="YAML file overriding the collection settings (also read from SYSSPECTOR_CONFIG)",
    )
    settings_group.add_argument("--log-file", metavar="FILE", help="Also write a DEBUG level log to FILE")
    settings_group.add_argument(
        "--verbose", "-v", action="store_true", help="Display informational messages on stderr"
    )
    settings_group.add_argument("--debug", "-d", action="store_true", help="Display debug output with full traceback")

    return parser
