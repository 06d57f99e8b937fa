"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from restaurant_orders.core.config import (
    get_settings,
    setup_logging,
    Settings,
    EnvironmentMode,
    StorageBackend,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "StorageBackend",
]
