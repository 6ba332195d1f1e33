from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.console import Console

from upline_hierarchy.config import AppConfig, ResolverConfig, load_config
from upline_hierarchy.core.exceptions import PipelineError
from upline_hierarchy.exporter import serialize_payload
from upline_hierarchy.loader import load_contacts
from upline_hierarchy.logging import set_debug
from upline_hierarchy.registry.entities import ContactRecord, Snapshot
from upline_hierarchy.resolution import build_snapshot

console = Console()


def resolver_config(
    cfg: AppConfig,
    *,
    root_identifier: Optional[str] = None,
    fallback_root_id: Optional[str] = None,
    fallback_root_email: Optional[str] = None,
    exclude_test_candidates: Optional[bool] = None,
) -> ResolverConfig:
    return cfg.resolver.with_overrides(
        known_root_identifier=root_identifier,
        fallback_root_contact_id=fallback_root_id,
        fallback_root_email=fallback_root_email,
        exclude_test_candidates=exclude_test_candidates,
    )


def load_and_build(
    path: Path,
    *,
    config_path: Optional[Path] = None,
    verbose: bool = False,
    **overrides: Any,
) -> Tuple[List[ContactRecord], Snapshot, AppConfig]:
    """
    Load contacts and build a snapshot, turning pipeline errors into a clean
    CLI exit.
    """
    if verbose:
        set_debug(True)

    t0 = time.perf_counter()
    try:
        cfg = load_config(config_path)
        contacts = load_contacts(path, cfg.crm_fields)
        snapshot = build_snapshot(contacts, resolver_config(cfg, **overrides))
    except (PipelineError, FileNotFoundError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if verbose:
        console.log(f"Built snapshot for {len(contacts)} contacts in {time.perf_counter() - t0:.2f}s")

    return contacts, snapshot, cfg


def write_json(
    data: Dict[str, Any],
    *,
    out: Path | None,
    pretty: bool,
):
    """
    Write JSON to stdout or file.
    """
    payload = serialize_payload(data, pretty=pretty)

    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload, encoding="utf-8")
    else:
        typer.echo(payload)
