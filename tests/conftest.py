"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import copy
import json
from typing import Any, Callable, Dict

import pytest

from bucket_topology.cluster.bucket import CouchbaseBucketConfig
from bucket_topology.cluster.builder import build_bucket_config
from bucket_topology.cluster.node import NodeInfo, ServiceType
from bucket_topology.document.parser import ConfigParser


# ============================================================================
# Documents
# ============================================================================

# Three nodes, four partitions, one replica. Node 10.0.0.3 owns no master.
BUCKET_DOCUMENT: Dict[str, Any] = {
    "rev": 1073,
    "name": "default",
    "uri": "/pools/default/buckets/default?bucket_uuid=7f1c",
    "streamingUri": "/pools/default/bucketsStreaming/default?bucket_uuid=7f1c",
    "nodes": [
        {
            "hostname": "10.0.0.1:8091",
            "ports": {"direct": 11210},
            "couchApiBase": "http://10.0.0.1:8092/default",
        },
        {
            "hostname": "10.0.0.2:8091",
            "ports": {"direct": 11210},
            "couchApiBase": "http://10.0.0.2:8092/default",
        },
        {
            "hostname": "10.0.0.3:8091",
            "ports": {"direct": 11210},
            "couchApiBase": "http://10.0.0.3:8092/default",
        },
    ],
    "nodesExt": [
        {"hostname": "10.0.0.1", "services": {"kv": 11210, "mgmt": 8091, "capi": 8092, "n1ql": 8093}},
        {"hostname": "10.0.0.2", "services": {"kv": 11210, "mgmt": 8091, "capi": 8092}},
        {"hostname": "10.0.0.3", "services": {"kv": 11210, "mgmt": 8091, "capi": 8092}},
    ],
    "vBucketServerMap": {
        "hashAlgorithm": "CRC",
        "numReplicas": 1,
        "serverList": ["10.0.0.1:11210", "10.0.0.2:11210", "10.0.0.3:11210"],
        "vBucketMap": [[0, 1], [1, 2], [0, 2], [1, -1]],
    },
    "bucketCapabilities": ["couchapi", "xattr", "dcp"],
}

FORWARD_MAP = [[1, 0], [2, 1], [2, 0], [0, 2]]


@pytest.fixture
def document() -> Dict[str, Any]:
    """A fresh copy of the sample bucket document."""
    return copy.deepcopy(BUCKET_DOCUMENT)


@pytest.fixture
def rebalancing_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """The sample document with a fast-forward map."""
    document["vBucketServerMap"]["vBucketMapForward"] = copy.deepcopy(FORWARD_MAP)
    return document


# ============================================================================
# Parser / Builder Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ConfigParser:
    """Create a ConfigParser instance with fixed default ports."""
    return ConfigParser(data_port=11210, mgmt_port=8091)


@pytest.fixture
def build(parser: ConfigParser) -> Callable[[Dict[str, Any]], CouchbaseBucketConfig]:
    """
    Factory fixture building a config from a document mapping.

    Usage:
        def test_something(build, document):
            config = build(document)
    """
    def factory(raw: Dict[str, Any]) -> CouchbaseBucketConfig:
        return build_bucket_config(parser.parse(json.dumps(raw)))
    return factory


@pytest.fixture
def config(build, document) -> CouchbaseBucketConfig:
    """Config built from the sample document."""
    return build(document)


@pytest.fixture
def rebalancing_config(build, rebalancing_document) -> CouchbaseBucketConfig:
    """Config built from the sample document with a fast-forward map."""
    return build(rebalancing_document)


# ============================================================================
# Node Fixtures
# ============================================================================

def make_node(hostname: str, data_port: int = 11210) -> NodeInfo:
    """Create a node exposing the data and management services."""
    return NodeInfo(hostname, {ServiceType.BINARY: data_port, ServiceType.CONFIG: 8091})


@pytest.fixture
def nodes():
    """Three nodes on distinct addresses."""
    return [make_node("10.0.0.1"), make_node("10.0.0.2"), make_node("10.0.0.3")]


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
