from __future__ import annotations

from upline_hierarchy.core.context import BuildContext
from upline_hierarchy.core.exceptions import PipelineError, PipelineExecutionError
from upline_hierarchy.exporter import EmitOptions, export_snapshot_to_json
from upline_hierarchy.loader import load_contacts
from upline_hierarchy.registry.entities import Snapshot
from upline_hierarchy.resolution import build_snapshot


class Pipeline:
    """
    Orchestrates load -> build -> export for file-based runs.
    No resolution logic lives here.
    """

    def __init__(self, context: BuildContext):
        self.ctx = context
        self.log = context.logger

    def run(self) -> Snapshot:
        self.log.info("Pipeline starting")

        try:
            contacts = load_contacts(self.ctx.input_path, self.ctx.config.crm_fields)
            snapshot = build_snapshot(contacts, self.ctx.config.resolver)

            if self.ctx.output_path:
                export_snapshot_to_json(
                    snapshot,
                    self.ctx.output_path,
                    EmitOptions(
                        nested=self.ctx.nested,
                        include_auxiliary=self.ctx.include_auxiliary,
                    ),
                )

            self.ctx.stats = {
                "contacts": snapshot.stats.total_contacts,
                "roots": snapshot.stats.root_count,
                "resolved": snapshot.stats.resolved_count,
            }
            self.log.info("Pipeline completed successfully")

            return snapshot

        except PipelineError:
            self.log.exception("Pipeline execution failed")
            raise
        except Exception as exc:
            self.log.exception("Pipeline execution failed")
            raise PipelineExecutionError(str(exc)) from exc
