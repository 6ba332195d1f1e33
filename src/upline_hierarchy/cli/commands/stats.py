from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from upline_hierarchy.cli.utils import load_and_build
from upline_hierarchy.registry.entities import Snapshot

console = Console()


def render_stats(snapshot: Snapshot, title: str = "Upline Hierarchy Statistics") -> Table:
    stats = snapshot.stats
    table = Table(title=title)
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("Contacts", str(stats.total_contacts))
    table.add_row("Roots / branches", str(stats.root_count))
    table.add_row("Resolved uplines", str(stats.resolved_count))
    table.add_row("Producers (licensing #)", str(stats.producer_count))
    table.add_row("Vendor flagged", str(stats.vendor_flagged_count))
    table.add_row("Synthetic nodes", str(stats.synthetic_count))
    table.add_row("Likely test contacts", str(stats.test_candidate_count))

    for flag, ids in snapshot.issues.by_flag().items():
        table.add_row(f"Issue: {flag}", str(len(ids)), style="yellow" if ids else None)

    return table


def stats_command(
    contacts: Path = typer.Argument(..., exists=True, readable=True),
    config: Optional[Path] = typer.Option(None, "--config", help="Alternate YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Show summary statistics for a contacts export.
    """
    _, snapshot, _ = load_and_build(contacts, config_path=config, verbose=verbose)
    console.print(render_stats(snapshot))
