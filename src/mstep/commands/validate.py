"""
mstep.commands.validate - Validate a graph document.

Loads a JSON graph document and reports every structural problem that
would stop the algorithm from running.
"""

import argparse
import json
import sys

from mstep.graph.deserializer import GraphFormatError, load_file
from mstep.graph.serialize import serialize_errors
from mstep.validation import validate_graph


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for a valid graph, 1 for validation or format errors)
    """
    try:
        document = load_file(args.file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1
    except GraphFormatError as e:
        print(f"Error: Invalid graph document {args.file}: {e}", file=sys.stderr)
        return 1

    errors = validate_graph(document.graph)

    if args.json:
        output = {
            "file": str(args.file),
            "valid": not errors,
            "vertices": len(document.graph.vertices),
            "edges": len(document.graph.edges),
            "errors": serialize_errors(errors),
        }
        print(json.dumps(output, indent=2))
        return 1 if errors else 0

    if errors:
        print(f"❌ {len(errors)} validation error(s) in {args.file}:", file=sys.stderr)
        for error in errors:
            print(f"  [{error.kind.value}] {error.message}", file=sys.stderr)
        return 1

    if not args.quiet:
        graph = document.graph
        print(f"✓ {args.file} is valid ({len(graph.vertices)} vertices, {len(graph.edges)} edges)")
    return 0
