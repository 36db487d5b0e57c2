"""Configuration module for bucket-topology."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
