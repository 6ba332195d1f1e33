from __future__ import annotations

import typer

from upline_hierarchy.cli.commands.build import build_command
from upline_hierarchy.cli.commands.issues import issues_command
from upline_hierarchy.cli.commands.set_upline import set_upline_command
from upline_hierarchy.cli.commands.stats import stats_command

app = typer.Typer(
    name="upline-hierarchy",
    help="Upline hierarchy resolver, inspector, and exporter",
    add_completion=False,
)

app.command("build")(build_command)
app.command("stats")(stats_command)
app.command("issues")(issues_command)
app.command("set-upline")(set_upline_command)


def main():
    app()


if __name__ == "__main__":
    main()
