#!/usr/bin/env python3
"""
Build the hand-strength abstraction tables.

Usage:
    python scripts/build_tables.py                                 # default config
    python scripts/build_tables.py --config fast_test              # named config
    python scripts/build_tables.py --config path/to/custom.yaml    # explicit file
    python scripts/build_tables.py --tables river --ochs data/tables/ochs_clusters.npy
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.bucketing import storage
from src.bucketing.config import TableConfig
from src.bucketing.constants import TABLE_NAMES
from src.bucketing.postflop.precompute import TablePrecomputer


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Build hand-strength abstraction tables")

    parser.add_argument(
        "--config",
        "-c",
        default="default",
        help="Config name under config/tables/ or path to a YAML file (default: default)",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Output directory (overrides config)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help="Worker processes (overrides config, default: CPU count)",
    )
    parser.add_argument(
        "--ochs",
        type=Path,
        default=None,
        help="Cluster assignment for river histograms (.npy or pickle)",
    )
    parser.add_argument(
        "--tables",
        nargs="+",
        choices=TABLE_NAMES,
        default=None,
        help="Tables to build (overrides config)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )

    return parser.parse_args()


def load_config(args) -> TableConfig:
    overrides = {
        "output_dir": str(args.output_dir) if args.output_dir else None,
        "num_workers": args.workers,
        "ochs_path": str(args.ochs) if args.ochs else None,
        "tables": args.tables,
    }

    config_path = Path(args.config)
    if config_path.suffix in (".yaml", ".yml"):
        return TableConfig.from_file(config_path, config_name=config_path.stem, **overrides)
    return TableConfig.from_yaml(args.config, **overrides)


def main():
    """Build tables entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args)
    except (FileNotFoundError, TypeError, ValueError) as e:
        print(f"Invalid configuration: {e}")
        return 1

    print(f"Config: {config.config_name} (hash {config.get_config_hash()})")
    print(f"  Deck: {config.num_ranks} ranks x {config.num_suits} suits")
    print(f"  Buckets: {config.num_buckets}")
    print(f"  Tables: {', '.join(config.tables)}")
    print(f"  Output: {config.output_dir}")
    print()

    start_time = time.time()
    precomputer = TablePrecomputer(config)
    try:
        tables = precomputer.precompute_all()
    except (storage.TableStorageError, FileNotFoundError, ValueError) as e:
        print(f"\nError building tables: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted; completed tables are kept on disk.")
        return 1

    manifest_path = precomputer.save_manifest()

    print()
    print("=" * 60)
    print("Tables complete")
    print("=" * 60)
    for name, table in tables.items():
        print(f"  {name}: {len(table):,} entries")
    print(f"Manifest: {manifest_path}")
    print(f"Elapsed Time: {time.time() - start_time:.1f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
