"""
Cluster module for bucket-topology.

This module provides:
- Node references and partition maps
- Partition host resolution
- Building the immutable bucket config
- Key to partition to node routing
"""

from .bucket import (
    PARTITION_NOT_EXISTENT,
    BucketConfig,
    BucketNodeLocator,
    BucketType,
    CouchbaseBucketConfig,
)
from .builder import build_bucket_config
from .node import NodeInfo, ServiceType
from .partition import NO_OWNER, Partition, PartitionInfo
from .resolver import UNSPECIFIED_PORT, match_nodes, parse_host_descriptor
from .router import ConfigHolder, PartitionRouter, partition_for_key

__all__ = [
    'PARTITION_NOT_EXISTENT',
    'NO_OWNER',
    'UNSPECIFIED_PORT',
    'BucketConfig',
    'BucketNodeLocator',
    'BucketType',
    'CouchbaseBucketConfig',
    'ConfigHolder',
    'NodeInfo',
    'Partition',
    'PartitionInfo',
    'PartitionRouter',
    'ServiceType',
    'build_bucket_config',
    'match_nodes',
    'parse_host_descriptor',
    'partition_for_key',
]
