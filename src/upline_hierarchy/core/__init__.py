from __future__ import annotations

from .exceptions import (
    ConfigurationError,
    ContactLoadError,
    ContactNotFoundError,
    PipelineError,
    PipelineExecutionError,
)

__all__ = [
    "ConfigurationError",
    "ContactLoadError",
    "ContactNotFoundError",
    "PipelineError",
    "PipelineExecutionError",
]
