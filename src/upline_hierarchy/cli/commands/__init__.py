"""
CLI command modules for upline_hierarchy.

Each command module defines a single Typer-compatible command function.
"""

from upline_hierarchy.cli.commands.build import build_command
from upline_hierarchy.cli.commands.issues import issues_command
from upline_hierarchy.cli.commands.set_upline import set_upline_command
from upline_hierarchy.cli.commands.stats import stats_command

__all__ = [
    "build_command",
    "issues_command",
    "set_upline_command",
    "stats_command",
]
