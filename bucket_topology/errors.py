"""
Topology Errors

Exceptions raised while building or querying a bucket topology.
"""


class TopologyError(Exception):
    """Base class for all bucket topology errors."""


class ConfigurationError(TopologyError):
    """
    Raised when a topology document is malformed or internally inconsistent.

    A config that raises this must never be installed; callers keep using
    the previous valid config.
    """


class IllegalStateError(TopologyError):
    """Raised when a config is queried for data it does not hold."""
