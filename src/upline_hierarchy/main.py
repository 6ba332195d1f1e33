"""
File-based entry for the upline hierarchy builder.

This module is intentionally thin:
- argument parsing
- configuration setup
- pipeline orchestration

No resolution logic lives here. The richer CLI is ``upline_hierarchy.cli``.
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from upline_hierarchy.config import get_config
from upline_hierarchy.core.context import BuildContext
from upline_hierarchy.core.pipeline import Pipeline
from upline_hierarchy.logging import get_logger, set_debug

log = get_logger("main")


# ---------------------------------------------------------
# CLI Argument Parsing
# ---------------------------------------------------------
def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build an upline hierarchy snapshot from a contacts export"
    )
    parser.add_argument(
        "-i",
        "--input",
        required=True,
        help="Path to contacts JSON",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Snapshot JSON path (defaults to paths.output in the config)",
    )
    parser.add_argument(
        "--flat",
        action="store_true",
        help="Emit a flat node map instead of a nested hierarchy",
    )
    parser.add_argument(
        "--lite",
        action="store_true",
        help="Omit opportunity and custom field payloads",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )
    return parser


# ---------------------------------------------------------
# Pipeline Runner
# ---------------------------------------------------------
def run(
    input_path: str,
    output_path: Optional[str],
    debug_flag: bool,
    nested: bool = True,
    include_auxiliary: bool = True,
):
    cfg = get_config()
    if debug_flag:
        set_debug(True)

    output_path = output_path or cfg.paths.get("output", "outputs/snapshot.json")
    log.info(f"Loading contacts: {input_path}")

    ctx = BuildContext(
        config=cfg,
        logger=log,
        input_path=input_path,
        output_path=output_path,
        nested=nested,
        include_auxiliary=include_auxiliary,
        debug=debug_flag or cfg.debug,
    )

    snapshot = Pipeline(ctx).run()

    log.info(f"Main pipeline complete. Output: {output_path}")
    return snapshot


# ---------------------------------------------------------
# Program Entry Point
# ---------------------------------------------------------
def main(argv: Optional[List[str]] = None) -> None:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    try:
        run(
            input_path=args.input,
            output_path=args.output,
            debug_flag=args.debug,
            nested=not args.flat,
            include_auxiliary=not args.lite,
        )
    except Exception as exc:
        log.exception(f"Unhandled exception in main: {exc}")
        raise


if __name__ == "__main__":
    main()
