#!/usr/bin/env python3
"""Validate a linked GeoJSON output and print a summary."""
import argparse
import json
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from adminlink.core.errors import InputSourceError
from adminlink.core.report import inspect_output


def main(argv=None):
    parser = argparse.ArgumentParser(description="Validate and summarize a linked output file")
    parser.add_argument("file", type=Path, help="Output GeoJSON file")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")

    args = parser.parse_args(argv)

    try:
        summary = inspect_output(args.file)
    except InputSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
        return 0

    print("JSON validation successful - file is valid")
    print(f"Features in output: {summary.features}")
    print(f"BBox included: {'Yes' if summary.has_bbox else 'No'}")
    if summary.bbox_consistent is False:
        print("⚠️  Declared bbox does not match the feature bounds")
    for outcome, count in sorted(summary.outcomes.items()):
        print(f"{outcome:20s}: {count:6d}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
