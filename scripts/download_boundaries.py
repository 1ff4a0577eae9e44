#!/usr/bin/env python3
"""Download geoBoundaries GeoJSON files for one country."""
import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from adminlink.core.config import DATA_DIR, DEFAULT_COUNTRY_ISO, LEVEL_NAMES, LOG_LEVEL
from adminlink.core.download import download_boundaries
from adminlink.core.errors import InputSourceError
from adminlink.utils.logging import log_error, setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(description="Download geoBoundaries files")
    parser.add_argument("--iso", default=DEFAULT_COUNTRY_ISO, help="ISO3 country code (default: IND)")
    parser.add_argument("--levels", nargs="+", default=["ADM0", "ADM1", "ADM2", "ADM3"],
                        choices=list(LEVEL_NAMES.values()), help="Admin levels to download")
    parser.add_argument("--dest", type=Path, default=DATA_DIR, help="Destination directory")
    parser.add_argument("--full", action="store_true", help="Download full-resolution geometry")
    parser.add_argument("--overwrite", action="store_true", help="Replace existing files")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Log level (default: INFO)")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    for level in args.levels:
        try:
            path = download_boundaries(
                args.iso,
                level,
                args.dest,
                simplified=not args.full,
                overwrite=args.overwrite,
            )
        except InputSourceError as e:
            log_error(e, {"script": "download_boundaries", "iso": args.iso, "level": level})
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"✓ {level}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
