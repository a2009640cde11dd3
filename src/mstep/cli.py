"""
mstep.cli - Command-line interface.

Main entry point for the mstep CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from mstep import __version__
from mstep.commands import serve, trace, validate
from mstep.config import load_config
from mstep.logging_config import setup_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mstep",
        description="Step through the Reverse-Delete minimum spanning tree algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mstep validate graph.json          # Check a graph document
  mstep trace graph.json             # Print every step of the run
  mstep trace graph.json --step 3    # Print a single step
  mstep trace graph.json -j          # Output the trace as JSON
  mstep serve --file graph.json      # Start the REST API with a graph loaded

Configuration:
  .mstep.toml is searched for from the current directory upwards;
  .mstep.local.toml next to it overrides it, and MSTEP_<SECTION>_<KEY>
  environment variables override both.

For detailed command help: mstep <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"mstep {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a graph document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Checks performed:
  duplicate_edge      The same pair of vertices is joined twice
  self_loop           An edge joins a vertex to itself
  missing_weight      An edge has no numeric weight
  negative_weight     An edge has a weight below zero
  dangling_reference  An edge names a vertex the graph does not have
  disconnected        The graph is empty or not connected
""",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="Graph document (JSON)",
    )
    validate_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output results as JSON",
    )

    # trace command
    trace_parser = subparsers.add_parser(
        "trace",
        help="Run Reverse-Delete and print the trace",
    )
    trace_parser.add_argument(
        "file",
        type=Path,
        help="Graph document (JSON)",
    )
    trace_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output the trace as JSON",
    )
    trace_parser.add_argument(
        "--step",
        type=int,
        help="Print only the step with this (zero-based) number",
        metavar="N",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the REST API server (requires mstep[server])",
    )
    serve_parser.add_argument(
        "--host",
        help="Interface to bind (default: server.host from config)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (default: server.port from config)",
    )
    serve_parser.add_argument(
        "--file",
        type=Path,
        help="Graph document to load at startup",
        metavar="FILE",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version information",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.config is not None and not args.config.exists():
            print(f"Error: Config file not found: {args.config}", file=sys.stderr)
            return 1
        args.settings = load_config(args.config)
        configure_logging(args)

        # Dispatch to command handlers
        if args.command == "validate":
            return validate.run(args)
        elif args.command == "trace":
            return trace.run(args)
        elif args.command == "serve":
            return serve.run(args)
        elif args.command == "version":
            return version_command(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


def configure_logging(args: argparse.Namespace) -> None:
    """Set up logging from ``--verbose``/``--quiet`` and the [logging] config."""
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = args.settings.get("logging.level", "WARNING")
    log_file = args.settings.get("logging.file") or None
    setup_logging(level, log_file)


def version_command(args: argparse.Namespace) -> int:
    """Handle version command."""
    print(f"mstep {__version__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
