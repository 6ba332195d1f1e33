"""
Upline resolution: parent precedence chain, cycle guard, forest assembly.
"""

from __future__ import annotations

from .cycle_guard import EdgeSet, would_create_cycle
from .engine import build_snapshot
from .forest import assemble, derive_status
from .parent_resolver import ParentResolver, Resolution, select_fallback_root
from .updates import update_upline_reference

__all__ = [
    "EdgeSet",
    "ParentResolver",
    "Resolution",
    "assemble",
    "build_snapshot",
    "derive_status",
    "select_fallback_root",
    "update_upline_reference",
    "would_create_cycle",
]
