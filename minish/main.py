#!/usr/bin/env python3
"""
minish - A small UNIX command shell

This is the main entry point for minish.

Author: YSNRFD
Version: 1.0.0
"""

import argparse
import sys
from typing import List, Optional

from minish import __version__
from minish.core.config_loader import ConfigLoader
from minish.exceptions import ConfigException
from minish.logger import Logger, LogLevel
from minish.shell.shell import Shell


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='minish',
        description='A small UNIX command shell.',
    )
    parser.add_argument(
        '-c', '--config',
        metavar='PATH',
        help='JSON configuration file',
    )
    parser.add_argument(
        '-l', '--log-level',
        choices=[level.name for level in LogLevel],
        type=str.upper,
        help='override the configured log level',
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}',
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for minish.

    Startup sequence:
    1. Load configuration
    2. Initialize logging
    3. Run the shell until 'exit' or end of input
    """
    args = build_parser().parse_args(argv)

    loader = ConfigLoader()
    if args.config:
        try:
            loader.load(args.config)
        except ConfigException as e:
            print(f"minish: {e}", file=sys.stderr)
            sys.exit(1)
    config = loader.config

    level_name = args.log_level or config.logging.level
    Logger.initialize(
        level=LogLevel.from_name(level_name),
        log_file=config.logging.log_file,
        console_output=config.logging.console_output,
    )

    shell = Shell(config)
    sys.exit(shell.run())


if __name__ == '__main__':
    main()
