"""
cppxgen command line

Usage:
    cppxgen [base_dir] [-j N] [--force] [--extension EXT]
            [--header-extension EXT] [--source-extension EXT] [-v | -q]
"""

import argparse
import sys

from . import __version__
from .config import GeneratorConfig
from .generator import generate_code
from .logger import LogLevel, set_log_level

VERSION_STRING = f"cppxgen version {__version__}"
DESCRIPTION = "Converts extended C++ files (.cppx) to standard C++ files (.h and .cpp)"
USAGE_LINE = "Usage: cppxgen [base directory (default current)]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='cppxgen', description=DESCRIPTION)
    parser.add_argument('base_dir', nargs='?', default='./',
                        help='Directory scanned recursively for sources (default: current)')
    parser.add_argument('-j', '--jobs', type=int, default=None,
                        help='Number of files processed in parallel (env: CPPX_JOBS)')
    parser.add_argument('--force', action='store_true',
                        help='Regenerate even when the artifacts are up to date')
    parser.add_argument('--extension', default=None,
                        help='Source extension (default: .cppx, env: CPPX_EXTENSION)')
    parser.add_argument('--header-extension', default=None,
                        help='Declaration artifact extension (default: .h, env: CPPX_HEADER_EXT)')
    parser.add_argument('--source-extension', default=None,
                        help='Definition artifact extension (default: .cpp, env: CPPX_SOURCE_EXT)')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    parser.add_argument('--version', action='version', version=VERSION_STRING)
    return parser


def config_from_args(args) -> GeneratorConfig:
    """Environment configuration with command line flags applied on top"""
    return GeneratorConfig.from_env().override(
        jobs=args.jobs,
        force=args.force or None,
        extension=args.extension,
        header_extension=args.header_extension,
        source_extension=args.source_extension,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        set_log_level(LogLevel.DEBUG)
    elif args.quiet:
        set_log_level(LogLevel.WARNING)
    else:
        set_log_level(LogLevel.INFO)

    print(VERSION_STRING)
    print(DESCRIPTION)
    print(USAGE_LINE)
    print()

    error_code = generate_code(args.base_dir, config_from_args(args))

    print()
    print("Thank you for trying cppxgen.")
    return error_code


if __name__ == '__main__':
    sys.exit(main())
