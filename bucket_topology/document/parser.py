"""
Bucket Document Parser Module

This module turns a bucket config, as served by the cluster, into a
BucketDocument.

Document Format (abridged):
    {
      "rev": 1073,
      "name": "default",
      "uri": "/pools/default/buckets/default",
      "streamingUri": "/pools/default/bucketsStreaming/default",
      "nodes": [
        {"hostname": "10.0.0.1:8091", "ports": {"direct": 11210},
         "couchApiBase": "http://10.0.0.1:8092/default"}
      ],
      "nodesExt": [
        {"hostname": "10.0.0.1", "services": {"kv": 11210, "mgmt": 8091}}
      ],
      "vBucketServerMap": {
        "numReplicas": 1,
        "serverList": ["10.0.0.1:11210", "10.0.0.2:11210"],
        "vBucketMap": [[0, 1], [1, 0]],
        "vBucketMapForward": [[1, 0], [0, 1]]
      },
      "bucketCapabilities": ["couchapi", "xattr"]
    }

Only the fields needed for partition ownership are read; unknown fields
are ignored.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlsplit

from ..cluster.node import NodeInfo, ServiceType, normalize_address
from ..cluster.partition import Partition, PartitionInfo
from ..cluster.resolver import UNSPECIFIED_PORT, parse_host_descriptor
from ..config.settings import settings
from ..errors import ConfigurationError
from .models import BucketDocument

logger = logging.getLogger(__name__)

_SERVICE_KEYS = {service.value: service for service in ServiceType}


class ConfigParser:
    """
    Parser for bucket config documents.

    Usage:
        parser = ConfigParser()
        document = parser.parse(raw_json)
    """

    def __init__(self, data_port: int = None, mgmt_port: int = None):
        """
        Initialize the parser.

        Args:
            data_port: Data service port assumed when a node lists none
                (default from settings.DATA_PORT)
            mgmt_port: Management port assumed when a node lists none
                (default from settings.MGMT_PORT)
        """
        self.data_port = data_port if data_port is not None else settings.DATA_PORT
        self.mgmt_port = mgmt_port if mgmt_port is not None else settings.MGMT_PORT

    def parse(self, data: Union[str, bytes, Mapping[str, Any]]) -> BucketDocument:
        """
        Parse a bucket config document.

        Args:
            data: JSON text, or an already decoded mapping

        Returns:
            The parsed BucketDocument

        Raises:
            ConfigurationError: If the document is not valid JSON or is
                missing required fields
        """
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except ValueError as e:
                raise ConfigurationError(f"Bucket config is not valid JSON: {e}") from e
        if not isinstance(data, Mapping):
            raise ConfigurationError("Bucket config must be a JSON object")

        rev = _require_int(data, "rev")
        name = _require(data, "name", str)
        partition_info = self._parse_partition_info(_require(data, "vBucketServerMap", Mapping))
        nodes = self._parse_nodes(
            _require(data, "nodes", list),
            _optional(data, "nodesExt", list) or [],
        )

        capabilities = _optional(data, "bucketCapabilities", list)
        if capabilities is not None:
            capabilities = tuple(str(c) for c in capabilities)

        document = BucketDocument(
            rev=rev,
            name=name,
            uri=_optional(data, "uri", str),
            streaming_uri=_optional(data, "streamingUri", str),
            partition_info=partition_info,
            nodes=nodes,
            capabilities=capabilities,
        )
        logger.debug(f"Parsed config rev {rev} for bucket {name}: "
                     f"{len(nodes)} nodes, {len(partition_info.partitions)} partitions")
        return document

    def _parse_partition_info(self, server_map: Mapping[str, Any]) -> PartitionInfo:
        server_list = _require(server_map, "serverList", list)
        partitions = _parse_partition_map(_require(server_map, "vBucketMap", list), "vBucketMap")

        forward = _optional(server_map, "vBucketMapForward", list)
        forward_partitions = None
        if forward:
            forward_partitions = _parse_partition_map(forward, "vBucketMapForward")

        return PartitionInfo(
            number_of_replicas=_require_int(server_map, "numReplicas"),
            partition_hosts=tuple(str(host) for host in server_list),
            partitions=partitions,
            forward_partitions=forward_partitions,
            tainted=forward_partitions is not None,
        )

    def _parse_nodes(
            self,
            raw_nodes: List[Any],
            raw_nodes_ext: List[Any],
    ) -> Tuple[NodeInfo, ...]:
        # Positions are kept so entries can be paired with nodes by index
        ext_entries: List[Optional[Tuple[str, Dict[ServiceType, int]]]] = []
        for entry in raw_nodes_ext:
            if not isinstance(entry, Mapping) or "hostname" not in entry:
                logger.debug(f"Skipping nodesExt entry without hostname: {entry}")
                ext_entries.append(None)
                continue
            try:
                services = _parse_services(entry.get("services") or {})
            except (AttributeError, TypeError, ValueError) as e:
                raise ConfigurationError(f"nodesExt entry {entry['hostname']} lists an invalid port: {e}") from e
            ext_entries.append((normalize_address(str(entry["hostname"])), services))

        nodes = []
        for position, raw in enumerate(raw_nodes):
            if not isinstance(raw, Mapping):
                raise ConfigurationError(f"Node entry must be an object: {raw!r}")
            address, mgmt_port = parse_host_descriptor(_require(raw, "hostname", str))
            try:
                services = self._node_services(raw, mgmt_port)
                has_direct = (raw.get("ports") or {}).get("direct") is not None
            except (AttributeError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Node {address} lists an invalid port: {e}") from e

            data_port = services[ServiceType.BINARY]
            services.update(_pair_nodes_ext(address, data_port, position, ext_entries))
            if has_direct and services[ServiceType.BINARY] != data_port:
                # The node's own direct port wins over nodesExt
                logger.debug(f"Node {address} lists direct port {data_port}, "
                             f"nodesExt lists {services[ServiceType.BINARY]}")
                services[ServiceType.BINARY] = data_port

            nodes.append(NodeInfo(hostname=address, services=services))
        return tuple(nodes)

    def _node_services(self, raw: Mapping[str, Any], mgmt_port: int) -> Dict[ServiceType, int]:
        services = {
            ServiceType.CONFIG: mgmt_port if mgmt_port != UNSPECIFIED_PORT else self.mgmt_port,
            ServiceType.BINARY: self.data_port,
        }
        direct = (raw.get("ports") or {}).get("direct")
        if direct is not None:
            services[ServiceType.BINARY] = int(direct)
        view_port = _port_from_url(raw.get("couchApiBase"))
        if view_port is not None:
            services[ServiceType.VIEW] = view_port
        return services


def _pair_nodes_ext(
        address: str,
        data_port: int,
        position: int,
        ext_entries: List[Optional[Tuple[str, Dict[ServiceType, int]]]],
) -> Dict[ServiceType, int]:
    """
    Find the nodesExt services belonging to one node.

    Several nodes may share an address and differ only by port, so an
    entry is paired by (address, kv port) first, then by list position,
    then by address when it is the only entry for that address.
    """
    same_address = [e for e in ext_entries if e is not None and e[0] == address]
    for _, services in same_address:
        if services.get(ServiceType.BINARY) == data_port:
            return services

    if position < len(ext_entries):
        entry = ext_entries[position]
        if entry is not None and entry[0] == address:
            return entry[1]

    if len(same_address) == 1:
        return same_address[0][1]
    return {}


def _parse_partition_map(rows: List[Any], field_name: str) -> Tuple[Partition, ...]:
    partitions = []
    for index, row in enumerate(rows):
        if not isinstance(row, list) or not row:
            raise ConfigurationError(f"{field_name}[{index}] must be a non-empty list")
        try:
            partitions.append(Partition.from_row(row))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{field_name}[{index}] is not a list of ordinals: {row!r}") from e
    return tuple(partitions)


def _parse_services(raw: Mapping[str, Any]) -> Dict[ServiceType, int]:
    services = {}
    for key, port in raw.items():
        service = _SERVICE_KEYS.get(key)
        if service is not None:
            services[service] = int(port)
    return services


def _port_from_url(url: Optional[str]) -> Optional[int]:
    if not url:
        return None
    try:
        return urlsplit(url).port
    except ValueError:
        logger.warning(f"Could not parse port from URL: {url}")
        return None


def _require(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if key not in data or data[key] is None:
        raise ConfigurationError(f"Bucket config is missing {key!r}")
    value = data[key]
    if not isinstance(value, kind):
        raise ConfigurationError(f"Bucket config field {key!r} has unexpected type {type(value).__name__}")
    return value


def _require_int(data: Mapping[str, Any], key: str) -> int:
    value = _require(data, key, int)
    if isinstance(value, bool):
        raise ConfigurationError(f"Bucket config field {key!r} has unexpected type bool")
    return value


def _optional(data: Mapping[str, Any], key: str, kind: type) -> Any:
    if data.get(key) is None:
        return None
    return _require(data, key, kind)
