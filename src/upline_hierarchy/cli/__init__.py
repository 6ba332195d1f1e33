"""
CLI package for upline_hierarchy.

Provides the Typer application entrypoint and shared CLI utilities.
"""

from upline_hierarchy.cli.app import app, main

__all__ = [
    "app",
    "main",
]
