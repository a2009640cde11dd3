"""
mstep.commands.serve - Run the REST API server.

Requires flask and flask-cors via the mstep[server] extra.
"""

import argparse
import sys

from mstep.config import ConfigLoader
from mstep.graph.deserializer import GraphFormatError, load_file
from mstep.session import Session


def run(args: argparse.Namespace) -> int:
    """
    Run the serve command.

    Args:
        args: Parsed command line arguments; ``args.settings`` holds the
            loaded ConfigLoader.

    Returns:
        Exit code (0 after a clean shutdown, 1 on startup errors)
    """
    try:
        from mstep.server import create_app
    except ImportError:
        print("Error: API server requires additional dependencies.", file=sys.stderr)
        print("Install with: pip install mstep[server]", file=sys.stderr)
        return 1

    config: ConfigLoader = getattr(args, "settings", None) or ConfigLoader.from_dict({})
    host = args.host or config.get("server.host")
    port = args.port or int(config.get("server.port"))

    session = Session.from_config(config)
    if args.file:
        try:
            session.load_document(load_file(args.file))
        except FileNotFoundError:
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        except GraphFormatError as e:
            print(f"Error: Invalid graph document {args.file}: {e}", file=sys.stderr)
            return 1

    if not args.quiet:
        print(
            f"""
======================================
  mstep API Server
======================================

Graph:      {args.file or "(empty)"}
Server:     http://{host}:{port}/api/state

Press Ctrl+C to stop
"""
        )

    app = create_app(session, config)
    try:
        app.run(host=host, port=port, debug=False)
    except KeyboardInterrupt:
        print("\nServer stopped.")
    finally:
        session.pause()

    return 0
