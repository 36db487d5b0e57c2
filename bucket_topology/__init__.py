"""
Bucket Topology: Partition Ownership Model

Client-side cluster topology for a partitioned, replicated key-value
store. Builds an immutable routing structure from a bucket config
document and answers which node owns a partition or one of its replicas.
"""

__version__ = "1.0.0"
