#!/usr/bin/env python3
"""Resolve each finest-level boundary to its district through its state."""
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
from adminlink.core.pipeline import run_cascade
from adminlink.utils.logging import log_error, setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description="Cascade state -> district parent resolution")
    parser.add_argument("--states", type=Path, default=None,
                        help="State (ADM1) GeoJSON (default: downloaded ADM1 file)")
    parser.add_argument("--districts", type=Path, default=None,
                        help="District (ADM2) GeoJSON already linked to states (default: link_parents output)")
    parser.add_argument("--children", type=Path, default=None,
                        help="Child (ADM3) GeoJSON (default: downloaded ADM3 file)")
    parser.add_argument("--output", type=Path, default=None, help="Output GeoJSON file")
    parser.add_argument("--limit", type=int, default=None, help="Only process the first N children")
    parser.add_argument("--simplify", type=float, default=SIMPLIFY_TOLERANCE,
                        help="Simplify geometries by this tolerance before matching")
    parser.add_argument("--dry-run", action="store_true", help="Resolve and log, don't write output")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Log level (default: INFO)")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    states = args.states or default_input_path("ADM1")
    districts = args.districts or default_output_path("ADM2")
    children = args.children or default_input_path("ADM3")
    output = None if args.dry_run else (args.output or default_output_path("ADM3"))

    try:
        stats = run_cascade(
            states,
            districts,
            children,
            output,
            limit=args.limit,
            simplify_tolerance=args.simplify,
            progress=not args.no_progress,
        )
    except InputSourceError as e:
        log_error(e, {"script": "link_cascade", "states": str(states),
                      "districts": str(districts), "children": str(children)})
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("CASCADE SUMMARY")
    print("=" * 60)
    print(f"{'processed':20s}: {stats.processed:6d}")
    for outcome in (MatchOutcome.FULL_MATCH, MatchOutcome.STATE_ONLY, MatchOutcome.UNMATCHED):
        print(f"{outcome.value:20s}: {stats.count(outcome):6d}")
    print(f"{'skipped (invalid)':20s}: {stats.skipped_structural:6d}")
    print(f"{'geometry errors':20s}: {stats.geometry_errors:6d}")
    if stats.bbox.is_finite():
        print(f"Overall bbox: {stats.bbox.as_list()}")
    if output is not None:
        print(f"Output written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
