from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from upline_hierarchy.cli.commands.stats import render_stats
from upline_hierarchy.cli.utils import load_and_build, resolver_config
from upline_hierarchy.core.exceptions import ContactNotFoundError
from upline_hierarchy.loader import save_contacts
from upline_hierarchy.registry.entities import IdentifierField
from upline_hierarchy.resolution import update_upline_reference

console = Console()


def set_upline_command(
    contacts: Path = typer.Argument(..., exists=True, readable=True),
    contact_id: str = typer.Argument(..., help="Contact whose upline changes"),
    value: str = typer.Argument(..., help="New upline value; empty string clears it"),
    field: IdentifierField = typer.Option(
        IdentifierField.LICENSING_NUMBER, "--field", help="Which upline reference to set"
    ),
    out: Optional[Path] = typer.Option(
        None, "--out", "-o", help="Write updated contacts here (defaults to overwriting CONTACTS)"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Alternate YAML config"),
):
    """
    Update one contact's upline reference and rebuild the hierarchy.
    """
    records, _, cfg = load_and_build(contacts, config_path=config)

    try:
        updated, snapshot = update_upline_reference(
            records, contact_id, field, value, resolver_config(cfg)
        )
    except ContactNotFoundError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    target = save_contacts(updated, out or contacts)
    node = snapshot.nodes[contact_id]

    console.print(f"Updated [bold]{contact_id}[/bold] in {target}")
    console.print(
        f"Parent: {node.parent_id or '<none>'} "
        f"(source={node.upline_source.value}, confidence={node.upline_confidence})"
    )
    console.print(render_stats(snapshot, title="Refreshed Statistics"))
