"""
Command-line entry point.

Usage:
    binshim              # Install (default)
    binshim install      # Download, verify, and place the binary
    binshim uninstall    # Remove the binary

Intended to be wired into package.json lifecycle scripts:

    "scripts": {
      "postinstall": "binshim install",
      "preuninstall": "binshim uninstall"
    }
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Sequence

from . import __version__
from .environment import SKIP_VERIFY_ENV, detect_context
from .installer import install, uninstall
from .logging_config import setup_logging
from .package_managers import DEFAULT_PACKAGE_MANAGER, PACKAGE_MANAGERS

ACTIONS = {
    "install": install,
    "uninstall": uninstall,
}

INVALID_COMMAND_MESSAGE = (
    "Invalid command. `install` and `uninstall` are the only supported commands"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="binshim",
        description="Download, verify, and install a prebuilt binary described in package.json.",
        epilog=f"Set {SKIP_VERIFY_ENV} to install even when the checksum does not match.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="install",
        help="install (default) or uninstall",
    )
    parser.add_argument("--manifest", help="Manifest path (default: package.json in the current directory)")
    parser.add_argument("--bin-dir", help="Install directory (skips package manager lookup)")
    parser.add_argument(
        "--package-manager",
        default=DEFAULT_PACKAGE_MANAGER,
        choices=[pm.name for pm in PACKAGE_MANAGERS],
        help="Host package manager used to locate the bin directory",
    )
    parser.add_argument(
        "--global",
        dest="global_install",
        action="store_true",
        default=None,
        help="Use the global install location (default: npm_config_global)",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON on stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print warnings and errors")
    parser.add_argument("--log-file", help="Also write a debug log to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the CLI.

    Returns:
        Process exit code (0 on success, 1 on any failure)
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help and --version exit 0; argparse usage errors exit 2
        return 0 if e.code in (0, None) else 1

    logger = setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    action = ACTIONS.get(args.command)
    if action is None:
        logger.error(INVALID_COMMAND_MESSAGE)
        parser.print_usage(sys.stderr)
        return 1

    context = detect_context(
        manifest_path=args.manifest,
        global_install=args.global_install,
        package_manager=args.package_manager,
        bin_dir=args.bin_dir,
        verbose=args.verbose,
    )

    result = action(context, verbose=args.verbose)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    if not result.success:
        logger.error(result.error_message)
        if result.remediation:
            logger.error(f"Hint: {result.remediation}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
