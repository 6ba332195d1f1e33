"""
Upline hierarchy resolution for the producer org-chart dashboard.

Turns a flat list of CRM contacts into a validated forest of upline
relationships, with issue flags for every data-quality condition found.
"""

from __future__ import annotations

from upline_hierarchy.config import ResolverConfig
from upline_hierarchy.exporter import EmitOptions, emit
from upline_hierarchy.registry.entities import ContactFlags, ContactRecord, Snapshot, VendorAffiliation
from upline_hierarchy.resolution import build_snapshot, update_upline_reference

__version__ = "0.1.0"

__all__ = [
    "ContactFlags",
    "ContactRecord",
    "EmitOptions",
    "ResolverConfig",
    "Snapshot",
    "VendorAffiliation",
    "build_snapshot",
    "emit",
    "update_upline_reference",
]
