"""
Core module: Configuration, Logging, Exceptions
"""

from khw_console.core.config import settings
from khw_console.core.logging import configure_logging, get_logger

__all__ = ["settings", "configure_logging", "get_logger"]
