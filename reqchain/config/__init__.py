"""
Runtime Configuration Module

Provides configuration loading and management for reqchain clients.
"""

from .runtime import (
    ClientConfig,
    FormatConfig,
    HttpConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "ClientConfig",
    "FormatConfig",
    "HttpConfig",
    "get_default_config",
    "set_default_config",
]
