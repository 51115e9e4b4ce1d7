#!/usr/bin/env python3
"""
Command line interface for vcrbpkg.
"""

import argparse
import os
import re
import sys
from typing import List, Optional
from urllib.parse import urlparse

from . import get_full_name_with_version
from .config import get_default_config_path, load_config
from .exceptions import PrerequisiteMissingError, VcrbpkgError
from .logging_config import LOG_LEVELS, get_logger, normalize_level, setup_logging
from .packager import Packager

# scp-like git references, e.g. git@github.com:user/repo.git
SCP_LIKE_PATTERN = r'^[\w.-]+@[\w.-]+:.+'


def url_or_path(value: str) -> str:
    """argparse type accepting an existing path or a repository URL."""
    if os.path.exists(value):
        return value

    parsed = urlparse(value)
    if parsed.scheme and parsed.netloc:
        return value

    if re.match(SCP_LIKE_PATTERN, value):
        return value

    raise argparse.ArgumentTypeError(f"invalid input: {value} must be either a URL or a file path")


def log_level(value: str) -> str:
    """argparse type accepting level names and the aliases warn and fatal."""
    try:
        return normalize_level(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='vcrbpkg',
        description='Package Ruby on Rails applications for Veracode Static Analysis',
        epilog='Example: vcrbpkg /folder/to/app OR vcrbpkg https://github.com/user/repo'
    )
    parser.add_argument('target', type=url_or_path, help='Path to a Rails application or a git repository URL')
    parser.add_argument('-o', '--out-file', help='Copy the produced archive to this path')
    parser.add_argument('-c', '--config', help='Path to a YAML configuration file')
    parser.add_argument('--log-level', type=log_level,
                        help=f"Set the log level, one of {', '.join(LOG_LEVELS)} (default: INFO)")
    parser.add_argument('--log-file', help='Also write a detailed log to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose log format')
    parser.add_argument('--version', action='version', version=get_full_name_with_version())
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the packager and return the process exit code."""
    args = create_parser().parse_args(argv)
    logger = get_logger('cli')

    try:
        config = load_config(args.config or get_default_config_path())
    except VcrbpkgError as e:
        setup_logging(args.log_level or 'INFO', args.log_file, args.verbose)
        logger.error(str(e))
        return 1

    if args.log_level:
        config.logging.level = args.log_level
    if args.log_file:
        config.logging.log_file = args.log_file
    if args.verbose:
        config.logging.verbose = True

    setup_logging(config.logging.level, config.logging.log_file, config.logging.verbose)
    logger.info(f"Starting {get_full_name_with_version()}")

    packager = Packager(config)
    try:
        result = packager.package(args.target, args.out_file)
    except PrerequisiteMissingError as e:
        logger.error(str(e))
        logger.info(packager.prerequisites.get_installation_instructions([e.tool]).rstrip())
        return 1
    except VcrbpkgError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130

    logger.info(f"Packaged {result.source_dir} with Ruby {result.ruby_version} in {result.rails_env}")
    if result.artifact:
        logger.info(f"Archive: {result.output_file or result.artifact}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
