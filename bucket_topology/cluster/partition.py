"""
Partition Map Module

A partition map is an ordered sequence of partition descriptors; the
position of a descriptor in the sequence is its partition number.

Each descriptor stores ordinals into the bucket's partition host list:
one master and an ordered list of replicas. NO_OWNER (-1) marks a
position that exists but has nobody assigned yet (e.g. a failed node
without takeover).
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

NO_OWNER = -1


@dataclass(frozen=True)
class Partition:
    """
    Ownership of a single partition.

    Attributes:
        master: Ordinal of the master node, or NO_OWNER
        replicas: Ordinals of the replica nodes, ranked by replica index
    """
    master: int
    replicas: Tuple[int, ...] = ()

    @classmethod
    def from_row(cls, row: Sequence[int]) -> "Partition":
        """Create a partition from a raw ``[master, replica, ...]`` row."""
        return cls(master=int(row[0]), replicas=tuple(int(r) for r in row[1:]))


@dataclass(frozen=True)
class PartitionInfo:
    """
    Raw partition layout of a bucket, as listed in its config document.

    Attributes:
        number_of_replicas: Replica count configured for the bucket
        partition_hosts: Raw ``host[:port]`` descriptors, in document order
        partitions: The current partition map
        forward_partitions: The fast-forward map, None outside a rebalance
        tainted: True while a rebalance affecting the bucket is running
    """
    number_of_replicas: int
    partition_hosts: Tuple[str, ...]
    partitions: Tuple[Partition, ...]
    forward_partitions: Optional[Tuple[Partition, ...]] = None
    tainted: bool = False

    def has_fast_forward_map(self) -> bool:
        return self.forward_partitions is not None
