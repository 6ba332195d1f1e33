from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from upline_hierarchy.cli.utils import load_and_build, write_json
from upline_hierarchy.exporter import EmitOptions, emit

console = Console(stderr=True)


def build_command(
    contacts: Path = typer.Argument(..., exists=True, readable=True, help="Contacts JSON export"),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Write output to file instead of stdout",
    ),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print JSON"),
    flat: bool = typer.Option(False, "--flat", help="Emit a flat node map instead of nested children"),
    lite: bool = typer.Option(False, "--lite", help="Omit opportunity and custom field payloads"),
    root_identifier: Optional[str] = typer.Option(
        None, "--root-identifier", help="Override resolver.known_root_identifier"
    ),
    fallback_root_id: Optional[str] = typer.Option(
        None, "--fallback-root-id", help="Override resolver.fallback_root_contact_id"
    ),
    exclude_test_candidates: Optional[bool] = typer.Option(
        None,
        "--exclude-test-candidates/--include-test-candidates",
        help="Override resolver.exclude_test_candidates",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Alternate YAML config"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Build the upline hierarchy snapshot and export it as JSON.
    """
    _, snapshot, _ = load_and_build(
        contacts,
        config_path=config,
        verbose=verbose,
        root_identifier=root_identifier,
        fallback_root_id=fallback_root_id,
        exclude_test_candidates=exclude_test_candidates,
    )

    data = emit(snapshot, EmitOptions(nested=not flat, include_auxiliary=not lite))
    write_json(data, out=out, pretty=pretty)

    if verbose:
        console.log("Export complete")
