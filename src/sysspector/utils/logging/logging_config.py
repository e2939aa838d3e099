# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Logging configuration utilities.

The report itself is written to stdout, so every diagnostic goes to
stderr. By default only warnings are shown; verbose mode adds INFO and
debug mode adds DEBUG. An optional file handler keeps a full DEBUG log.
"""

import logging
import os
import sys
from typing import Optional

# Default logging format
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
# Simple message-only format for regular console output
MESSAGE_ONLY_FORMAT = "%(message)s"
DEBUG_MESSAGE_ONLY_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """
    Configure logging level based on verbose and debug flags.

    Args:
        verbose: Whether to display INFO level messages
        debug: Whether to display DEBUG level logs

    Note:
        By default only WARNING and above reach the console, so the
        report on stdout stays readable.
    """
    remove_log_handlers()

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    console_handler = None
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) is sys.stderr:
            console_handler = handler
            break

    if console_handler is None:
        console_handler = logging.StreamHandler(sys.stderr)
        root_logger.addHandler(console_handler)

    if debug:
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(DEBUG_MESSAGE_ONLY_FORMAT))
    else:
        console_handler.setFormatter(logging.Formatter(MESSAGE_ONLY_FORMAT))
        if verbose:
            console_handler.setLevel(logging.INFO)
        else:
            console_handler.setLevel(logging.WARNING)

    suppress_third_party_loggers()


def remove_log_handlers() -> None:
    """
    Remove all file handlers from the root logger to avoid duplicates when reconfiguring.
    """
    root_logger = logging.getLogger()
    handlers_to_remove = [h for h in root_logger.handlers if isinstance(h, logging.FileHandler)]

    for handler in handlers_to_remove:
        root_logger.removeHandler(handler)
        handler.close()


def add_file_log_handler(log_file: str) -> Optional[logging.FileHandler]:
    """
    Add a file handler writing DEBUG level logs.

    Args:
        log_file: Path of the log file, overwritten on each run

    Returns:
        The created handler, or None when the file could not be opened
    """
    log_dir = os.path.dirname(os.path.abspath(log_file))
    try:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning(f"Cannot open log file {log_file}: {e}")
        return None

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))

    logging.getLogger().addHandler(file_handler)
    return file_handler


def suppress_third_party_loggers() -> None:
    """
    Suppress noisy third-party library loggers.
    """
    third_party_loggers = [
        "urllib3",
        "requests",
        "charset_normalizer",
    ]

    for logger_name in third_party_loggers:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def setup_command_logging(
    verbose: bool = False, debug: bool = False, log_file: Optional[str] = None
) -> None:
    """
    Configure console logging for a command and optionally add a log file.

    Args:
        verbose: Whether to show INFO level messages
        debug: Whether to show DEBUG level messages
        log_file: Optional path of a DEBUG level log file
    """
    configure_logging(verbose=verbose, debug=debug)
    if log_file:
        add_file_log_handler(log_file)


def cleanup_logging() -> None:
    """
    Flush and close every handler attached to the root logger.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        try:
            handler.flush()
            if isinstance(handler, logging.FileHandler):
                root_logger.removeHandler(handler)
                handler.close()
        except (OSError, ValueError):
            continue
