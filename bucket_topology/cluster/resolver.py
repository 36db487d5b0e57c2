"""
Host Resolver Module

Resolves the raw ``host[:port]`` descriptors of a partition map to the
node references known from the node list.

Descriptor Format:
    10.0.0.1:11210     -> address 10.0.0.1, data port 11210
    10.0.0.1           -> address 10.0.0.1, any port
    10.0.0.1:0         -> address 10.0.0.1, any port
    [fd00::1]:11210    -> IPv6 address, data port 11210

A port of 0 (UNSPECIFIED_PORT) matches on address only, for deployments
that do not list explicit ports.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..errors import ConfigurationError
from .node import NodeInfo, ServiceType, normalize_address

logger = logging.getLogger(__name__)

UNSPECIFIED_PORT = 0


def parse_host_descriptor(
        raw: str,
        log: Optional[logging.Logger] = None,
) -> Tuple[str, int]:
    """
    Split a raw descriptor into its normalized address and port.

    Args:
        raw: Descriptor string such as ``"10.0.0.1:11210"``
        log: Logger for recoverable problems (defaults to the module logger)

    Returns:
        Tuple of (address, port). The port is UNSPECIFIED_PORT when it is
        missing or cannot be parsed.

    Raises:
        ConfigurationError: If the address part is missing or malformed
    """
    log = log or logger
    if not isinstance(raw, str) or not raw.strip():
        raise ConfigurationError(f"Could not resolve {raw!r} on config building")

    raw = raw.strip()
    if raw.startswith("["):
        # Bracketed IPv6 literal, optional :port after the closing bracket
        host_part, bracket, rest = raw.partition("]")
        if not bracket or (rest and not rest.startswith(":")):
            raise ConfigurationError(f"Could not resolve {raw!r} on config building")
        host = host_part + bracket
        port_part = rest[1:] if rest else None
    else:
        parts = raw.split(":")
        if len(parts) > 2:
            raise ConfigurationError(f"Could not resolve {raw!r} on config building")
        host = parts[0]
        port_part = parts[1] if len(parts) == 2 else None

    address = normalize_address(host)

    if port_part is None:
        return address, UNSPECIFIED_PORT
    try:
        port = int(port_part)
    except ValueError:
        log.warning(f"Could not parse port from the node address: {raw}, fallback to 0")
        return address, UNSPECIFIED_PORT
    return address, port


def match_nodes(
        raw: str,
        nodes: Sequence[NodeInfo],
        log: Optional[logging.Logger] = None,
) -> List[NodeInfo]:
    """
    Find every node a raw descriptor refers to.

    A node matches when its address equals the descriptor's address and
    its data service port equals the descriptor's port. With an
    unspecified port the address alone decides.

    Args:
        raw: Descriptor string from the partition map's server list
        nodes: The node list of the config document
        log: Logger (defaults to the module logger)

    Returns:
        The matching nodes in node list order. A well-formed document
        yields exactly one.
    """
    log = log or logger
    address, port = parse_host_descriptor(raw, log)

    matches = [
        node for node in nodes
        if node.hostname == address
        and (port == UNSPECIFIED_PORT or node.port(ServiceType.BINARY) == port)
    ]

    if len(matches) > 1:
        log.warning(
            f"Partition host {raw} is ambiguous, {len(matches)} nodes match: "
            f"{[n.port(ServiceType.BINARY) for n in matches]}"
        )
    elif not matches:
        log.warning(f"Partition host {raw} does not match any node")
    return matches
