"""
mstep.commands.trace - Print a Reverse-Delete trace.

Validates a graph document, runs the algorithm on it and prints either
the whole trace or a single step, followed by the resulting spanning
tree.
"""

import argparse
import json
import sys

from mstep.algorithm import mst_edges, mst_weight, run_reverse_delete
from mstep.algorithm.reverse_delete import format_weight
from mstep.graph.deserializer import GraphFormatError, load_file
from mstep.graph.serialize import (
    format_step,
    format_trace,
    serialize_errors,
    serialize_step,
    serialize_trace,
)
from mstep.validation import validate_graph


def run(args: argparse.Namespace) -> int:
    """
    Run the trace command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 if the graph cannot be traced)
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
    if errors:
        if args.json:
            print(json.dumps({"valid": False, "errors": serialize_errors(errors)}, indent=2))
        else:
            print(f"❌ Cannot run Reverse-Delete: {len(errors)} validation error(s)", file=sys.stderr)
            for error in errors:
                print(f"  [{error.kind.value}] {error.message}", file=sys.stderr)
        return 1

    steps = run_reverse_delete(document.graph)

    if args.step is not None:
        if not 0 <= args.step < len(steps):
            print(
                f"Error: Step {args.step} out of range (trace has {len(steps)} steps)",
                file=sys.stderr,
            )
            return 1
        step = steps[args.step]
        if args.json:
            print(json.dumps(serialize_step(step), indent=2))
        else:
            print(format_step(step))
        return 0

    tree = mst_edges(steps)
    tree_edges = [edge.to_dict() for edge in tree]
    total = mst_weight(steps)

    if args.json:
        output = {
            "valid": True,
            "steps": serialize_trace(steps),
            "mst": {"edges": tree_edges, "total_weight": total},
        }
        print(json.dumps(output, indent=2))
        return 0

    if not steps:
        print("Graph has no edges; nothing to do.")
        return 0

    print(format_trace(steps))
    if not args.quiet:
        print()
        print(f"MST: {len(tree_edges)} edges, total weight {format_weight(total)}")
        for edge in tree:
            print(f"  {edge} (weight {format_weight(edge.w)})")
    return 0
