"""
Topology Builder Module

Builds an immutable CouchbaseBucketConfig from a parsed bucket document:

1. Resolve every partition host descriptor to a node reference
2. Check that each descriptor resolved to exactly one node
3. Compute the set of nodes holding at least one master partition
4. Check that every ordinal in the partition maps is a valid host index
   or NO_OWNER

Any inconsistency raises ConfigurationError and no config is built.
"""

import logging
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence

from ..config.settings import settings
from ..errors import ConfigurationError
from .bucket import CouchbaseBucketConfig
from .node import NodeInfo
from .partition import NO_OWNER, Partition, PartitionInfo
from .resolver import match_nodes

if TYPE_CHECKING:
    from ..document.models import BucketDocument

logger = logging.getLogger(__name__)


def build_partition_hosts(
        nodes: Sequence[NodeInfo],
        partition_info: PartitionInfo,
        log: Optional[logging.Logger] = None,
) -> List[NodeInfo]:
    """
    Reference the partition hosts from the raw node list.

    Args:
        nodes: The node list of the document
        partition_info: Partition layout holding the raw host descriptors
        log: Logger (defaults to the module logger)

    Returns:
        One node reference per descriptor, in descriptor order

    Raises:
        ConfigurationError: If a descriptor is malformed, or does not
            resolve to exactly one node
    """
    log = log or logger
    partition_hosts: List[NodeInfo] = []
    for raw_host in partition_info.partition_hosts:
        partition_hosts.extend(match_nodes(raw_host, nodes, log))

    if len(partition_hosts) != len(partition_info.partition_hosts):
        raise ConfigurationError(
            f"Partition host size mismatch after conversion: "
            f"{len(partition_info.partition_hosts)} descriptors resolved to "
            f"{len(partition_hosts)} nodes"
        )
    return partition_hosts


def build_nodes_with_primary_partitions(
        nodes: Sequence[NodeInfo],
        partitions: Sequence[Partition],
) -> FrozenSet[str]:
    """
    Pre-compute the addresses of nodes that own a master partition.

    Master ordinals are resolved against the raw node list.

    Raises:
        ConfigurationError: If a master ordinal is outside the node list
    """
    hostnames = set()
    for number, partition in enumerate(partitions):
        index = partition.master
        if index < 0:
            continue
        if index >= len(nodes):
            raise ConfigurationError(
                f"Master {index} of partition {number} is outside the "
                f"node list of {len(nodes)} nodes"
            )
        hostnames.add(nodes[index].hostname)
    return frozenset(hostnames)


def validate_partition_map(
        partitions: Sequence[Partition],
        host_count: int,
        map_name: str = "current",
) -> None:
    """
    Check that every ordinal in a map is a valid host index or NO_OWNER.

    Raises:
        ConfigurationError: On the first ordinal that is out of range
    """
    for number, partition in enumerate(partitions):
        for ordinal in (partition.master, *partition.replicas):
            if ordinal < NO_OWNER:
                raise ConfigurationError(
                    f"Partition {number} of the {map_name} map has invalid "
                    f"ordinal {ordinal}, only {NO_OWNER} marks a missing owner"
                )
            if ordinal >= host_count:
                raise ConfigurationError(
                    f"Partition {number} of the {map_name} map references "
                    f"host {ordinal}, only {host_count} partition hosts exist"
                )


def build_bucket_config(document: "BucketDocument", log: Optional[logging.Logger] = None) -> CouchbaseBucketConfig:
    """
    Build the topology model for a parsed bucket document.

    Args:
        document: A BucketDocument
        log: Logger used for the whole build (defaults to the module logger)

    Returns:
        The immutable CouchbaseBucketConfig

    Raises:
        ConfigurationError: If the document is inconsistent
    """
    log = log or logger
    partition_info = document.partition_info

    partition_hosts = build_partition_hosts(document.nodes, partition_info, log)
    nodes_with_primary = build_nodes_with_primary_partitions(document.nodes, partition_info.partitions)

    validate_partition_map(partition_info.partitions, len(partition_hosts))
    if partition_info.forward_partitions is not None:
        validate_partition_map(partition_info.forward_partitions, len(partition_hosts), "fast-forward")

    # A missing capability list means an old server without ephemeral buckets
    capabilities = document.capabilities
    ephemeral = capabilities is not None and settings.COUCHAPI_CAPABILITY not in capabilities

    config = CouchbaseBucketConfig(
        rev=document.rev,
        name=document.name,
        uri=document.uri,
        streaming_uri=document.streaming_uri,
        nodes=document.nodes,
        partition_info=partition_info,
        partition_hosts=partition_hosts,
        nodes_with_primary_partitions=nodes_with_primary,
        ephemeral=ephemeral,
    )
    log.debug(f"Built {config!r}")
    return config
