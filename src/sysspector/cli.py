# Copyright (C) 2025 Intel Corporation
# SPDX-License-Identifier: Apache-2.0

"""
Command Line Interface for the system information collector.

Parses the arguments, configures console logging and routes to the
command implementation in utils.cli.commands.
"""

import atexit
import logging
import sys
from typing import List, Optional

from sysspector.utils.cli.commands import get_command_function
from sysspector.utils.cli.parsers import create_argument_parser
from sysspector.utils.logging import cleanup_logging, configure_logging

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, debug=args.debug)

    # Set up a handler to clean up log handlers on exit
    atexit.register(cleanup_logging)

    try:
        run_system_info = get_command_function("run_system_info")
        return run_system_info(
            save=args.save,
            json_output=args.json,
            show_apps=args.apps,
            show_processes=args.processes,
            config_path=args.config,
            log_file=args.log_file,
            no_pause=args.no_pause,
            verbose=args.verbose,
            debug=args.debug,
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.error(f"Command execution failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
