"""
Exporter package.

Re-exports the snapshot emitter and the JSON file writers.
"""

from __future__ import annotations

from .exporter import export_snapshot_to_json, serialize_payload, write_snapshot_json
from .json_exporter import EmitOptions, emit

__all__ = [
    "EmitOptions",
    "emit",
    "export_snapshot_to_json",
    "serialize_payload",
    "write_snapshot_json",
]
