"""``analysis-mirror types`` and ``analysis-mirror outputs``."""

from __future__ import annotations

import click
from rich.markup import escape

from analysis_mirror.cli.output import console, print_analysis_types
from analysis_mirror.cli.runtime import require_project, run_synced
from analysis_mirror.core import Selection, SyncCoordinator, SyncResult


@click.command("types")
@click.argument("project")
@click.pass_context
def types_command(ctx: click.Context, project: str) -> None:
    """List the analysis types that can be started on PROJECT."""

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> None:
        require_project(coordinator, project)
        print_analysis_types(project, coordinator.session.registry)

    run_synced(ctx, body)


@click.command("outputs")
@click.argument("project")
@click.argument("snapshot")
@click.argument("analysis")
@click.pass_context
def outputs_command(ctx: click.Context, project: str, snapshot: str, analysis: str) -> None:
    """List the output datasets of one analysis run.

    The first id listed is the one ``dataset`` shows by default.
    """

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> None:
        output_ids = coordinator.outputs_for(Selection(project, snapshot, analysis))
        if not output_ids:
            where = escape(f"{project}/{snapshot}/{analysis}")
            console.print(f"[dim]No outputs for {where}.[/dim]")
            return
        for output_id in output_ids:
            click.echo(output_id)

    run_synced(ctx, body)
