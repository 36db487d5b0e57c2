"""
Cluster Node Module

Defines the node reference used throughout the topology: a network
address plus the ports of the services the node exposes.

Service Types:
- BINARY:    key-value data service (the port partition hosts are matched on)
- CONFIG:    cluster management / REST
- VIEW:      view engine (couch API)
- QUERY:     query service
- SEARCH:    full text search
- ANALYTICS: analytics service
"""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from ..errors import ConfigurationError


class ServiceType(Enum):
    """Enumeration of services a node can expose."""
    BINARY = "kv"
    CONFIG = "mgmt"
    VIEW = "capi"
    QUERY = "n1ql"
    SEARCH = "fts"
    ANALYTICS = "cbas"


def normalize_address(host: str) -> str:
    """
    Normalize a host into the form used for node identity.

    IP literals are canonicalized (so ``::0001`` and ``::1`` compare equal),
    hostnames are lower-cased. No DNS lookup is performed.

    Args:
        host: Raw host string, IPv6 literals optionally in brackets

    Returns:
        The normalized address

    Raises:
        ConfigurationError: If the host is empty or has mismatched brackets
    """
    host = host.strip()
    if host.startswith("[") or host.endswith("]"):
        if not (host.startswith("[") and host.endswith("]")):
            raise ConfigurationError(f"Malformed address: {host!r}")
        host = host[1:-1]
    if not host:
        raise ConfigurationError("Empty address")
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return host.lower()


@dataclass(frozen=True)
class NodeInfo:
    """
    Immutable reference to one cluster node.

    Two references are equal when their addresses are equal; the service
    ports do not take part in equality or hashing.

    Attributes:
        hostname: Normalized network address of the node
        services: Mapping of service type to port
    """
    hostname: str
    services: Mapping[ServiceType, int] = field(
        default_factory=dict, compare=False, hash=False
    )

    def __post_init__(self):
        object.__setattr__(self, "hostname", normalize_address(self.hostname))
        object.__setattr__(self, "services", MappingProxyType(dict(self.services)))

    def port(self, service: ServiceType) -> Optional[int]:
        """Get the port bound to a service, or None if not exposed."""
        return self.services.get(service)

    def __repr__(self) -> str:
        ports = ", ".join(f"{s.value}={p}" for s, p in self.services.items())
        return f"NodeInfo(hostname={self.hostname!r}, services={{{ports}}})"
