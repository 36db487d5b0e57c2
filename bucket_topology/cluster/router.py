"""
Cluster Router Module

Maps keys to partitions and partitions to nodes using the current
bucket config.

Responsibilities:
- Hash a key to its partition (CRC32 vbucket hashing)
- Hold the current config, replacing it only with newer revisions
- Locate the master or a replica node for a key
"""

import logging
import threading
import zlib
from typing import Optional, Union

from .bucket import CouchbaseBucketConfig
from .node import NodeInfo

logger = logging.getLogger(__name__)


def partition_for_key(key: Union[str, bytes], number_of_partitions: int) -> int:
    """
    Calculate which partition owns a given key.

    Args:
        key: The document key
        number_of_partitions: Partition count of the bucket, a power of two

    Returns:
        Partition number in [0, number_of_partitions)

    Raises:
        ValueError: If number_of_partitions is not a positive power of two
    """
    if number_of_partitions <= 0 or number_of_partitions & (number_of_partitions - 1):
        raise ValueError(f"Invalid partition count: {number_of_partitions}. Must be a power of two")
    if isinstance(key, str):
        key = key.encode("utf-8")
    crc = zlib.crc32(key) & 0xffffffff
    return ((crc >> 16) & 0x7fff) & (number_of_partitions - 1)


class ConfigHolder:
    """
    Holds the config currently used for routing.

    Readers take ``current`` without locking; a proposed config is
    installed only when its revision is newer than the current one.
    """

    def __init__(self, config: Optional[CouchbaseBucketConfig] = None):
        self._config = config
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[CouchbaseBucketConfig]:
        return self._config

    def propose(self, config: CouchbaseBucketConfig) -> bool:
        """
        Install a config if it is newer than the current one.

        Args:
            config: A freshly built config

        Returns:
            True if the config was installed, False if it was stale
        """
        with self._lock:
            current = self._config
            if current is not None and config.rev <= current.rev:
                logger.debug(f"Ignoring config rev {config.rev} for bucket {config.name}, "
                             f"current rev is {current.rev}")
                return False
            self._config = config

        logger.info(f"Installed config rev {config.rev} for bucket {config.name}")
        if config.tainted:
            logger.info(f"Bucket {config.name} is rebalancing")
        return True


class PartitionRouter:
    """
    Routes keys to the nodes that own them.

    Usage:
        router = PartitionRouter(holder)
        node = router.locate("user:1")              # master
        node = router.locate("user:1", replica=1)   # first replica
    """

    def __init__(self, holder: ConfigHolder):
        """
        Initialize the router.

        Args:
            holder: Holder of the current config
        """
        self.holder = holder

    def locate(
            self,
            key: Union[str, bytes],
            replica: int = 0,
            use_fast_forward: bool = False,
    ) -> Optional[NodeInfo]:
        """
        Find the node owning a key.

        Args:
            key: The document key
            replica: 0 for the master, n for the n-th replica
            use_fast_forward: Route to where the partition is moving to

        Returns:
            The owning node, or None if there is no config yet or nobody
            currently owns that position

        Raises:
            IllegalStateError: If use_fast_forward is set and the current
                config has no fast-forward map
            ValueError: If the partition count of the current config is not
                a power of two
        """
        config = self.holder.current
        if config is None or config.number_of_partitions() == 0:
            return None

        partition = partition_for_key(key, config.number_of_partitions())
        if replica == 0:
            index = config.node_index_for_master(partition, use_fast_forward)
        else:
            index = config.node_index_for_replica(partition, replica - 1, use_fast_forward)

        if index < 0:
            logger.debug(f"No owner for partition {partition} (replica {replica}), got {index}")
            return None
        return config.node_at_index(index)
