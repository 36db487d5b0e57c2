#!/usr/bin/env python3
"""
Bucket Topology Inspector

Loads a bucket config document, builds its topology and prints a
summary, optionally locating the nodes that own a key.

Usage:
    bucket-topology config.json                       # Summary
    bucket-topology config.json --key user:1          # Master for a key
    bucket-topology config.json --key user:1 --replica 1
    bucket-topology config.json --key user:1 --fast-forward
    bucket-topology config.json --debug               # Enable debug logging

Environment Variables:
    BUCKET_TOPOLOGY_DATA_PORT  - Data port assumed when a node lists none
    BUCKET_TOPOLOGY_MGMT_PORT  - Management port assumed when a node lists none
    BUCKET_TOPOLOGY_DEBUG      - Enable debug mode (true/false)
    BUCKET_TOPOLOGY_LOG_LEVEL  - Log level when not in debug mode
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .cluster.builder import build_bucket_config
from .cluster.router import ConfigHolder, PartitionRouter, partition_for_key
from .config.settings import settings
from .document.parser import ConfigParser
from .errors import TopologyError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Bucket Topology: inspect partition ownership of a bucket config",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "config",
        type=Path,
        help="Path to a bucket config JSON document",
    )

    parser.add_argument(
        "--key",
        type=str,
        default=None,
        help="Locate the nodes owning this key",
    )

    parser.add_argument(
        "--replica",
        type=int,
        default=0,
        help="0 for the master, n for the n-th replica",
    )

    parser.add_argument(
        "--fast-forward",
        action="store_true",
        help="Use the fast-forward map of a rebalancing bucket",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the inspector."""
    args = parse_args(argv)

    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        document = ConfigParser().parse(args.config.read_bytes())
        config = build_bucket_config(document)
    except OSError as e:
        logger.error(f"Could not read {args.config}: {e}")
        return 1
    except TopologyError as e:
        logger.error(f"Invalid bucket config {args.config}: {e}")
        return 1

    print(f"Bucket {config.name} (rev {config.rev})")
    print(f"  Partitions: {config.number_of_partitions()}")
    print(f"  Replicas: {config.number_of_replicas()}")
    print(f"  Tainted: {config.tainted}")
    print(f"  Ephemeral: {config.ephemeral}")
    print(f"  Fast-forward map: {config.has_fast_forward_map()}")
    for index, node in enumerate(config.partition_hosts):
        primary = "primary" if config.has_primary_partitions_on_node(node.hostname) else "no primary"
        print(f"  [{index}] {node.hostname} ({primary})")

    if args.key is None:
        return 0

    holder = ConfigHolder(config)
    router = PartitionRouter(holder)
    try:
        partition = partition_for_key(args.key, config.number_of_partitions())
        node = router.locate(args.key, replica=args.replica, use_fast_forward=args.fast_forward)
    except (TopologyError, ValueError) as e:
        logger.error(f"Could not locate {args.key}: {e}")
        return 1

    owner = node.hostname if node is not None else "none"
    print(f"Key {args.key} -> partition {partition}, replica {args.replica}: {owner}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
