"""
Bucket Config Module

Immutable bucket configs queried by the request dispatch layer.

BucketConfig holds what every bucket kind shares (name, URIs, nodes,
revision) and a type discriminator. CouchbaseBucketConfig is the
partitioned, replicated kind: it answers which node owns a partition,
or one of its replicas, under the current map and under the
fast-forward map of an in-progress rebalance.

Lookup Results:
    >= 0                    ordinal into the partition host list
    NO_OWNER (-1)           the position exists but nobody owns it yet
    PARTITION_NOT_EXISTENT  the position does not exist (-2)
"""

import logging
from enum import Enum, auto
from typing import FrozenSet, Optional, Sequence, Tuple

from ..errors import ConfigurationError, IllegalStateError
from .node import NodeInfo, normalize_address
from .partition import Partition, PartitionInfo

logger = logging.getLogger(__name__)

PARTITION_NOT_EXISTENT = -2


class BucketType(Enum):
    """Enumeration of bucket kinds."""
    COUCHBASE = auto()
    MEMCACHED = auto()


class BucketNodeLocator(Enum):
    """Enumeration of strategies used to map a key to a node."""
    VBUCKET = auto()
    KETAMA = auto()


class BucketConfig:
    """
    Base class for bucket configs.

    Subclasses set ``bucket_type`` and ``locator`` so the dispatch layer
    can switch on capability instead of on the concrete class.
    """

    bucket_type: BucketType
    locator: BucketNodeLocator

    def __init__(
            self,
            rev: int,
            name: str,
            uri: Optional[str],
            streaming_uri: Optional[str],
            nodes: Sequence[NodeInfo],
    ):
        self._rev = rev
        self._name = name
        self._uri = uri
        self._streaming_uri = streaming_uri
        self._nodes = tuple(nodes)

    @property
    def rev(self) -> int:
        return self._rev

    @property
    def name(self) -> str:
        return self._name

    @property
    def uri(self) -> Optional[str]:
        return self._uri

    @property
    def streaming_uri(self) -> Optional[str]:
        return self._streaming_uri

    @property
    def nodes(self) -> Tuple[NodeInfo, ...]:
        return self._nodes


class CouchbaseBucketConfig(BucketConfig):
    """
    Partition ownership of a couchbase bucket.

    Instances are built by ``build_bucket_config`` and never mutated;
    a newer document produces a new instance. All queries are read-only
    and safe to call from any number of threads.

    Attributes:
        partition_hosts: Node references, one per partition host descriptor
        nodes_with_primary_partitions: Addresses owning a current master
    """

    bucket_type = BucketType.COUCHBASE
    locator = BucketNodeLocator.VBUCKET

    def __init__(
            self,
            rev: int,
            name: str,
            uri: Optional[str],
            streaming_uri: Optional[str],
            nodes: Sequence[NodeInfo],
            partition_info: PartitionInfo,
            partition_hosts: Sequence[NodeInfo],
            nodes_with_primary_partitions: FrozenSet[str],
            ephemeral: bool,
    ):
        super().__init__(rev, name, uri, streaming_uri, nodes)
        self._partition_info = partition_info
        self.partition_hosts: Tuple[NodeInfo, ...] = tuple(partition_hosts)
        self.nodes_with_primary_partitions = frozenset(nodes_with_primary_partitions)
        self._tainted = partition_info.tainted
        self._ephemeral = ephemeral

    @property
    def tainted(self) -> bool:
        return self._tainted

    @property
    def ephemeral(self) -> bool:
        return self._ephemeral

    @property
    def partition_info(self) -> PartitionInfo:
        return self._partition_info

    def number_of_partitions(self) -> int:
        """Get the number of partitions in the current map."""
        return len(self._partition_info.partitions)

    def number_of_replicas(self) -> int:
        """Get the replica count configured for the bucket."""
        return self._partition_info.number_of_replicas

    def has_fast_forward_map(self) -> bool:
        return self._partition_info.has_fast_forward_map()

    def has_primary_partitions_on_node(self, hostname: str) -> bool:
        """
        Check if a node owns at least one master partition.

        The address is normalized first, so "[FD00::1]" and "fd00::1" match.
        An empty or malformed address owns nothing.
        """
        try:
            address = normalize_address(hostname)
        except ConfigurationError:
            return False
        return address in self.nodes_with_primary_partitions

    def node_index_for_master(self, partition: int, use_fast_forward: bool = False) -> int:
        """
        Get the ordinal of the master node for a partition.

        Args:
            partition: The partition number
            use_fast_forward: Look the partition up in the fast-forward map

        Returns:
            The master's ordinal, NO_OWNER if the partition has no master,
            or PARTITION_NOT_EXISTENT if the partition is out of range

        Raises:
            IllegalStateError: If use_fast_forward is set and the config
                has no fast-forward map
        """
        entry = self._partition(partition, use_fast_forward)
        if entry is None:
            logger.debug(f"Out of bounds on index for master {partition}")
            return PARTITION_NOT_EXISTENT
        return entry.master

    def node_index_for_replica(
            self,
            partition: int,
            replica: int,
            use_fast_forward: bool = False,
    ) -> int:
        """
        Get the ordinal of a replica node for a partition.

        Args:
            partition: The partition number
            replica: Replica index, 0 for the first replica
            use_fast_forward: Look the partition up in the fast-forward map

        Returns:
            The replica's ordinal, NO_OWNER if that replica is unassigned,
            or PARTITION_NOT_EXISTENT if partition or replica is out of range

        Raises:
            IllegalStateError: If use_fast_forward is set and the config
                has no fast-forward map
        """
        entry = self._partition(partition, use_fast_forward)
        if entry is None or not 0 <= replica < len(entry.replicas):
            logger.debug(f"Out of bounds on index for replica {replica} of partition {partition}")
            return PARTITION_NOT_EXISTENT
        return entry.replicas[replica]

    def node_at_index(self, node_index: int) -> NodeInfo:
        """
        Get the node reference for an ordinal returned by this config.

        Raises:
            IndexError: If the ordinal is not a valid partition host index
        """
        if not 0 <= node_index < len(self.partition_hosts):
            raise IndexError(
                f"Node index {node_index} out of range for "
                f"{len(self.partition_hosts)} partition hosts"
            )
        return self.partition_hosts[node_index]

    def _partition(self, partition: int, use_fast_forward: bool) -> Optional[Partition]:
        if use_fast_forward and not self.has_fast_forward_map():
            raise IllegalStateError("Could not get index from fast-forward map, none found in this config")

        if use_fast_forward:
            partitions = self._partition_info.forward_partitions
        else:
            partitions = self._partition_info.partitions
        if not 0 <= partition < len(partitions):
            return None
        return partitions[partition]

    def __repr__(self) -> str:
        return (f"CouchbaseBucketConfig(name={self.name!r}, rev={self.rev}, "
                f"partitions={self.number_of_partitions()}, "
                f"replicas={self.number_of_replicas()}, "
                f"tainted={self.tainted}, ephemeral={self.ephemeral})")
