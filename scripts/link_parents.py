#!/usr/bin/env python3
"""Link each child boundary to its parent level (e.g. ADM1 -> ADM2)."""
import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from adminlink.core.config import LOG_LEVEL, SIMPLIFY_TOLERANCE, default_input_path, default_output_path
from adminlink.core.errors import InputSourceError
from adminlink.core.models import MatchOutcome
from adminlink.core.pipeline import run_parent_link
from adminlink.utils.logging import log_error, setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description="Link boundaries to their parent level")
    parser.add_argument("--parent-level", default="ADM1", help="Parent admin level (default: ADM1)")
    parser.add_argument("--child-level", default="ADM2", help="Child admin level (default: ADM2)")
    parser.add_argument("--parent", type=Path, default=None, help="Parent GeoJSON file")
    parser.add_argument("--child", type=Path, default=None, help="Child GeoJSON file")
    parser.add_argument("--output", type=Path, default=None, help="Output GeoJSON file")
    parser.add_argument("--limit", type=int, default=None, help="Only process the first N children")
    parser.add_argument("--simplify", type=float, default=SIMPLIFY_TOLERANCE,
                        help="Simplify geometries by this tolerance before matching")
    parser.add_argument("--dry-run", action="store_true", help="Resolve and log, don't write output")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Log level (default: INFO)")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    parent = args.parent or default_input_path(args.parent_level)
    child = args.child or default_input_path(args.child_level)
    output = None if args.dry_run else (args.output or default_output_path(args.child_level))

    try:
        stats = run_parent_link(
            parent,
            child,
            output,
            limit=args.limit,
            simplify_tolerance=args.simplify,
            progress=not args.no_progress,
        )
    except InputSourceError as e:
        log_error(e, {"script": "link_parents", "parent": str(parent), "child": str(child)})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Matched: {stats.count(MatchOutcome.LINKED)} of {stats.processed} features.")
    if output is not None:
        print(f"Done! Output written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
