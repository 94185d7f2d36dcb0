"""
Utility functions for the MCP DevOps Plan integration.
This package provides various utility functions used throughout the codebase.
"""

from .env import is_env_extended_truthy, is_env_ssl_verify, is_env_truthy
from .io import is_read_only_mode
from .logging import mask_sensitive

__all__ = [
    "is_env_extended_truthy",
    "is_env_ssl_verify",
    "is_env_truthy",
    "is_read_only_mode",
    "mask_sensitive",
]
