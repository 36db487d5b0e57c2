"""Document module for bucket-topology."""

from .models import BucketDocument
from .parser import ConfigParser

__all__ = [
    "BucketDocument",
    "ConfigParser",
]
