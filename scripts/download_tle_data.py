#!/usr/bin/env python3
"""
Download three-line record batches from CelesTrak for offline use.
"""

import sys
from pathlib import Path
from typing import List

import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from debris_tracker.simulation.tle_loader import DataSource, TLELoader, split_records
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("ingestion")


def download_source(loader: TLELoader, source: DataSource, output_path: Path) -> bool:
    """
    Download one source to a file.

    Returns:
        True if successful, False otherwise
    """
    try:
        text = loader.fetch_text(source)
    except requests.RequestException as e:
        logger.error(f"Failed to download {source.value}: {e}")
        return False

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text)

    logger.info(f"Downloaded {len(split_records(text))} records to {output_path}")
    return True


def download_all(sources: List[DataSource] = None, output_dir: Path = None):
    """
    Download record batches for the given sources.

    Args:
        sources: Sources to download (None = all)
        output_dir: Output directory (default: data/raw)
    """
    if output_dir is None:
        output_dir = project_root / "data" / "raw"

    if sources is None:
        sources = list(DataSource)

    loader = TLELoader(timeout=30)
    success_count = 0
    fail_count = 0

    for source in sources:
        if download_source(loader, source, output_dir / f"{source.value}.tle"):
            success_count += 1
        else:
            fail_count += 1

    logger.info(f"Download complete: {success_count} succeeded, {fail_count} failed")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Download TLE records from CelesTrak")
    parser.add_argument(
        "--sources",
        nargs="+",
        choices=[s.value for s in DataSource],
        help="Sources to download (default: all)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Output directory (default: data/raw)"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List available sources"
    )

    args = parser.parse_args()

    if args.list:
        print("Available sources:")
        for source in DataSource:
            print(f"  - {source.value:<9} {source.label} ({source.group})")
        return 0

    sources = [DataSource(s) for s in args.sources] if args.sources else None
    download_all(sources, args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
