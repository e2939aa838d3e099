# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
System information command implementation.

Collects the report for the running operating system, prints it and
optionally saves it to a file.
"""

import logging
import platform
import sys
from typing import Any, Dict, Optional

from sysspector.utils.config import ConfigurationError, get_config_value, load_settings
from sysspector.utils.core import configure_executor
from sysspector.utils.logging import setup_command_logging
from sysspector.utils.system import (
    ReportWriteError,
    UnsupportedPlatformError,
    collect_system_report,
    format_json_report,
    format_summary,
    format_text_report,
    is_json_path,
    write_report,
)

logger = logging.getLogger(__name__)


def resolve_output_path(save: str, json_output: bool, settings: Dict[str, Any]) -> str:
    """
    Resolve the file written by --save.

    Args:
        save: Value given to --save, empty when the flag had no argument
        json_output: Whether --json was given
        settings: Collection settings

    Returns:
        Path of the output file
    """
    if save:
        return save
    if json_output:
        return get_config_value(settings, "output.json_file", "sysinfo.json")
    return get_config_value(settings, "output.text_file", "sysinfo.txt")


def should_pause(no_pause: bool, settings: Optional[Dict[str, Any]] = None) -> bool:
    """Return True when the console should wait for Enter before exiting."""
    if no_pause or platform.system() != "Windows":
        return False
    if settings is not None and not get_config_value(settings, "output.pause_on_windows", True):
        return False
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def pause_before_exit() -> None:
    try:
        input("Press Enter to exit...")
    except EOFError:
        pass


def run_system_info(
    save: Optional[str] = None,
    json_output: bool = False,
    show_apps: bool = False,
    show_processes: bool = False,
    config_path: Optional[str] = None,
    log_file: Optional[str] = None,
    no_pause: bool = False,
    verbose: bool = False,
    debug: bool = False,
) -> int:
    """
    Collect system information, display it and optionally save it.

    Args:
        save: Output file for --save, "" for the default name, None to skip saving
        json_output: Whether to print a JSON dump after the formatted report
        show_apps: Whether to list every installed application
        show_processes: Whether to list every running process
        config_path: Optional YAML file overriding the collection settings
        log_file: Optional DEBUG level log file
        no_pause: Whether to skip the Windows exit prompt
        verbose: Whether to show informational messages
        debug: Whether to show debug level logs

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    settings: Optional[Dict[str, Any]] = None
    try:
        setup_command_logging(verbose=verbose, debug=debug, log_file=log_file)

        settings = load_settings(config_path)
        configure_executor(get_config_value(settings, "commands.max_execution_time", 300))

        logger.info("Collecting system information...")
        report, errors = collect_system_report(settings)
        if errors:
            logger.info(f"{len(errors)} section(s) could not be collected")
            for error in errors:
                logger.debug(f"  {error}")

        print(format_text_report(report, show_apps=show_apps, show_processes=show_processes))
        if json_output:
            print()
            print(format_json_report(report))

        if save is not None:
            output_path = resolve_output_path(save, json_output, settings)
            content = format_json_report(report) if is_json_path(output_path) else format_summary(report)
            write_report(output_path, content)
            logger.info(f"Report saved to {output_path}")

        return 0

    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except UnsupportedPlatformError as e:
        logger.error(f"{e}")
        return 1
    except ReportWriteError as e:
        logger.error(f"Error saving report: {e}")
        return 1
    except Exception as e:
        logger.error(f"Error collecting system information: {e}", exc_info=debug)
        return 1
    finally:
        if should_pause(no_pause, settings):
            pause_before_exit()
