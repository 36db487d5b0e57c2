"""
Bucket Document Definitions

This module defines the parsed form of a bucket config document, the
input the topology builder works from.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ..cluster.node import NodeInfo
from ..cluster.partition import PartitionInfo


@dataclass(frozen=True)
class BucketDocument:
    """
    A parsed bucket config document.

    Attributes:
        rev: Revision of the document, used to discard stale configs
        name: The bucket name
        uri: REST URI of the bucket (opaque)
        streaming_uri: Streaming REST URI of the bucket (opaque)
        partition_info: Server list and partition maps
        nodes: Node references, in document order
        capabilities: Bucket capability markers, None when not advertised
    """
    rev: int
    name: str
    partition_info: PartitionInfo
    nodes: Tuple[NodeInfo, ...]
    uri: Optional[str] = None
    streaming_uri: Optional[str] = None
    capabilities: Optional[Tuple[str, ...]] = None

    @property
    def tainted(self) -> bool:
        return self.partition_info.tainted
