"""
Core module initialization.
Exports configuration, logging and error types.
"""

from wlogistics.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from wlogistics.core.exceptions import (
    WLogisticsError,
    OrderNotFoundError,
    OrderValidationError,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "WLogisticsError",
    "OrderNotFoundError",
    "OrderValidationError",
]
