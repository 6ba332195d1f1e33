"""
exporter.py
High-level JSON export entry point.

    write_snapshot_json(payload, output_path)
    export_snapshot_to_json(snapshot, output_path, options)

The dict construction lives in json_exporter.emit.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from upline_hierarchy.logging import get_logger
from upline_hierarchy.registry.entities import Snapshot

from .json_exporter import EmitOptions, emit

log = get_logger("exporter")


def serialize_payload(payload: Dict[str, Any], pretty: bool = True) -> str:
    if pretty:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def write_snapshot_json(payload: Dict[str, Any], output_path: str | Path, pretty: bool = True) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        f.write(serialize_payload(payload, pretty=pretty))

    log.info("JSON export complete: %s (%d bytes)", output_path, output_path.stat().st_size)
    return output_path


def export_snapshot_to_json(
    snapshot: Snapshot,
    output_path: str | Path,
    options: Optional[EmitOptions] = None,
    pretty: bool = True,
) -> Path:
    stats = snapshot.stats
    log.info(
        "Exporting snapshot to: %s (contacts=%d, roots=%d, synthetic=%d)",
        output_path,
        stats.total_contacts,
        stats.root_count,
        stats.synthetic_count,
    )
    return write_snapshot_json(emit(snapshot, options), output_path, pretty=pretty)
