#!/usr/bin/env python3
"""
Create the JSON collection files under the data directory.

Usage:
  python scripts/init_storage.py [--data-dir ./data] [--log-level DEBUG]
"""
from __future__ import annotations

import argparse
import logging
import sys

from hub.core.log import configure_logging
from hub.repositories.layout import data_dir_or_default, initialize_storage

logger = logging.getLogger("init_storage")


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Initialize JSON storage files")
    ap.add_argument("--data-dir", help="Directory holding the JSON files (default: HUB_DATA_DIR or ./data)")
    ap.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    args = ap.parse_args(argv)

    configure_logging(args.log_level)
    root = data_dir_or_default(args.data_dir)
    logger.info("Initializing JSON storage in %s", root)

    for filename, created in initialize_storage(root):
        print(f"{'Created' if created else 'Validated'} {filename}")
    print("OK: storage initialized")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
