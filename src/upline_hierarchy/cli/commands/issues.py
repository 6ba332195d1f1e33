from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from upline_hierarchy.cli.utils import load_and_build
from upline_hierarchy.registry.entities import ContactNode

console = Console()


class IssueFlag(str, Enum):
    missingIdentifier = "missingIdentifier"
    duplicateIdentifier = "duplicateIdentifier"
    uplineNotFound = "uplineNotFound"
    cycleBreak = "cycleBreak"


def issues_command(
    contacts: Path = typer.Argument(..., exists=True, readable=True),
    flag: Optional[IssueFlag] = typer.Option(None, "--flag", "-f", help="Only show one issue type"),
    limit: int = typer.Option(50, "--limit", help="Rows per issue type"),
    config: Optional[Path] = typer.Option(None, "--config", help="Alternate YAML config"),
):
    """
    List contacts flagged with data-quality issues.
    """
    _, snapshot, _ = load_and_build(contacts, config_path=config)

    for name, ids in snapshot.issues.by_flag().items():
        if flag is not None and flag.value != name:
            continue

        table = Table(title=f"{name} ({len(ids)})")
        table.add_column("Contact id")
        table.add_column("Name")
        table.add_column("Licensing #")
        table.add_column("Upline #")
        table.add_column("Parent")

        for cid in ids[:limit]:
            node = snapshot.nodes[cid]
            if not isinstance(node, ContactNode):
                continue
            table.add_row(
                cid,
                node.contact.display_name,
                node.contact.licensing_number or "",
                node.contact.upline_licensing_number or "",
                node.parent_id or "",
            )

        console.print(table)
