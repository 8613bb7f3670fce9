"""
pyconfigkit CLI argument parser.

This module implements the command-line interface for pyconfigkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from typing import List, Optional

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("pyconfigkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """pyconfigkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="pyconfigkit",
            description="pyconfigkit - Python interpreter build configuration discovery",
            epilog='Use "pyconfigkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"pyconfigkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_show_command(subparsers)
        self._add_list_command(subparsers)

        return parser

    def _add_selection_options(self, parser: argparse.ArgumentParser):
        """Add options shared by commands that select interpreters."""
        filters = parser.add_argument_group("filters")
        filters.add_argument(
            "--min-version",
            metavar="VERSION",
            help="Minimum interpreter version (e.g., 3.8, 3.11.2)",
        )
        filters.add_argument(
            "--major", type=int, metavar="N", help="Required major version"
        )
        filters.add_argument(
            "--implementation",
            metavar="NAME",
            help="Required implementation (e.g., CPython, PyPy)",
        )

        discovery = parser.add_argument_group("discovery")
        discovery.add_argument(
            "--search-path",
            metavar="PATH",
            help="Directories to search, separated like PATH (default: $PATH)",
        )
        discovery.add_argument(
            "--python",
            action="append",
            metavar="EXE",
            help="Interpreter to try before the search path (repeatable; "
            "PYCONFIGKIT_PYTHON is also honoured)",
        )
        discovery.add_argument(
            "--timeout",
            type=float,
            metavar="SECONDS",
            help="Timeout for each interpreter invocation "
            "(default: $PYCONFIGKIT_TIMEOUT or 10)",
        )
        discovery.add_argument(
            "--deadline",
            type=float,
            metavar="SECONDS",
            help="Time limit for the whole search",
        )
        discovery.add_argument(
            "--jobs",
            "-j",
            type=int,
            default=1,
            metavar="N",
            help="Number of interpreters probed concurrently (default: 1)",
        )

        parser.add_argument(
            "--format",
            choices=["text", "json", "yaml"],
            default="text",
            help="Output format (default: text)",
        )

    def _add_show_command(self, subparsers):
        """Add 'show' subcommand."""
        parser = subparsers.add_parser(
            "show",
            help="Show the first matching interpreter",
            description="Show the build configuration of the first interpreter, "
            "in search order, that satisfies the filters",
        )
        parser.add_argument(
            "--report",
            action="store_true",
            help="List every rejected candidate when nothing matches",
        )
        self._add_selection_options(parser)

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List all matching interpreters",
            description="List the build configuration of every interpreter "
            "that satisfies the filters, in search order",
        )
        self._add_selection_options(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.WARNING
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            stream=sys.stderr,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "show": "pyconfigkit.cli.commands.show",
            "list": "pyconfigkit.cli.commands.listing",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
