"""
Bucket Topology Configuration Settings

This module contains the configuration constants for building and
inspecting bucket topologies.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Topology configuration settings."""

    # Default service ports, used when a node does not advertise them
    DATA_PORT: int = int(os.environ.get("BUCKET_TOPOLOGY_DATA_PORT", "11210"))
    MGMT_PORT: int = int(os.environ.get("BUCKET_TOPOLOGY_MGMT_PORT", "8091"))

    # Bucket capability whose absence marks an ephemeral bucket
    COUCHAPI_CAPABILITY: str = "couchapi"

    # Logging settings
    DEBUG: bool = os.environ.get("BUCKET_TOPOLOGY_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("BUCKET_TOPOLOGY_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
