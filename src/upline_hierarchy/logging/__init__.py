"""
Logging package for ``upline_hierarchy``.

Use ``get_logger("<module>")`` in modules to inherit the shared handlers.
"""

from .logger import get_logger, list_active_loggers, set_debug

__all__ = [
    "get_logger",
    "list_active_loggers",
    "set_debug",
]
