"""
Command-line interface for stackmount.

This module handles option parsing, informational output and exit codes.
The mount orchestrator itself only ever sees a resolved configuration and
the mount/unmount action.
"""

import argparse
import sys
from typing import Optional

from .config import load_config
from .core import StackMountManager
from .errors import CompositeUnmountError, StackMountError
from .logging import get_logger
from .version import get_version

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INFO = 2

USAGE = "stackmount [-h|-u|-v|-d] [--verbose] [--timeout SECONDS]"

DESCRIPTION = """\
Stack encfs on top of sshfs, in order to mount a remote encrypted
directory. This enables remote storage of sensitive data on hosts
which may not be fully secure, e.g. on a virtual private server.

Caveats:
    Hardlinks do not work. This is a limitation of sshfs."""

EPILOG = """\
Environment variables:
    CONFIG
        optional configuration file (default: ~/.stackmountrc)
    REMOTE_HOST
        target hostname for SSH connections
    HOST_MOUNTPOINT
        directory where REMOTE_HOST will be mounted
    REMOTE_ROOT
        remote directory to mount onto HOST_MOUNTPOINT; this will
        usually be the path to the user's home directory
    DIRNAME
        name (not path) of decrypted directory to mount locally; a
        dot is prepended to identify the encrypted backing directory
        on the remote host.
    DECRYPTED_MOUNTPOINT
        parent directory for DIRNAME, where decrypted data will be
        mounted

The configuration file holds NAME=value lines for the variables above
(except CONFIG) and takes precedence over the environment. Values are
used literally: $HOME, ~ and other expansions are not performed.

Exit status:
    0 = Success
    1 = Failure
    2 = Other"""


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad options with usage and exit status 2."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(EXIT_INFO, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = UsageArgumentParser(
        prog="stackmount",
        usage=USAGE,
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="show help")
    parser.add_argument("-u", "--usage", action="store_true", help="show usage")
    parser.add_argument("-v", "--version", action="store_true", help="show version")
    parser.add_argument(
        "-d", "--dismount", action="store_true", help="unmount the stacked filesystems"
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="give up on a driver command after SECONDS (default: wait forever)",
    )
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def handle_info_options(args: argparse.Namespace) -> None:
    """Print help, usage or version and exit with status 2 if requested."""
    parser = build_parser()
    if args.help:
        parser.print_help()
        sys.exit(EXIT_INFO)
    if args.version:
        print(f"stackmount {get_version()}")
        sys.exit(EXIT_INFO)
    if args.usage:
        parser.print_usage()
        sys.exit(EXIT_INFO)


def handle_mount_operation(manager: StackMountManager, logger) -> None:
    """Handle the mount action."""
    result = manager.mount()
    if result.is_err():
        logger.logger.error(f"Mount failed: {result.error}")
        sys.exit(EXIT_FAILURE)


def handle_unmount_operation(manager: StackMountManager, logger) -> None:
    """Handle the unmount action. Any failed layer makes the run fail."""
    result = manager.unmount()
    if result.is_err():
        error = result.error
        if isinstance(error, CompositeUnmountError):
            for path, failure in error.failures:
                logger.logger.error(f"Could not unmount {path}: {failure}")
        else:
            logger.logger.error(f"Unmount failed: {error}")
        sys.exit(EXIT_FAILURE)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    handle_info_options(args)

    logger = get_logger(args.verbose)
    try:
        config = load_config(
            verbose=args.verbose, command_timeout=args.timeout, logger=logger
        )
        manager = StackMountManager(config, logger=logger)

        if args.dismount:
            handle_unmount_operation(manager, logger)
        else:
            handle_mount_operation(manager, logger)

    except StackMountError as e:
        logger.logger.error(f"{e}")
        sys.exit(EXIT_FAILURE)
    except KeyboardInterrupt:
        logger.logger.info("Operation cancelled by user")
        sys.exit(EXIT_FAILURE)
    except Exception as e:
        logger.logger.error(f"Unexpected error: {e}")
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
