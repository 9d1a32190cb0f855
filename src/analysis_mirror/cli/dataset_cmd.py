"""``analysis-mirror dataset`` and ``analysis-mirror lookup``.

Usage::

    analysis-mirror dataset my-app 2024-05-01 "Points-to" warnings --count 100
    analysis-mirror dataset my-app 2024-05-01 "Points-to" --format json
    analysis-mirror lookup my-app 2024-05-01 src/Main.java 42
"""

from __future__ import annotations

import click

from analysis_mirror.cli.output import dataset_json, print_dataset, print_line_results
from analysis_mirror.cli.runtime import run_synced
from analysis_mirror.core import DatasetQuery, DatasetView, Selection, SyncCoordinator, SyncResult


@click.command("dataset")
@click.argument("project")
@click.argument("snapshot")
@click.argument("analysis")
@click.argument("output", required=False)
@click.option("--start", default=0, type=click.IntRange(min=0), help="First row (default 0).")
@click.option("--count", default=50, type=click.IntRange(min=1), help="Rows per page (default 50).")
@click.option("--app-only", is_flag=True, help="Only rows from application code.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_context
def dataset_command(
    ctx: click.Context,
    project: str,
    snapshot: str,
    analysis: str,
    output: str | None,
    start: int,
    count: int,
    app_only: bool,
    output_format: str,
) -> None:
    """Show one page of an analysis output dataset.

    OUTPUT defaults to the first output id of the analysis profile.
    """

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> DatasetView:
        selection = Selection(project, snapshot, analysis)
        output_id = output
        if output_id is None:
            output_ids = coordinator.outputs_for(selection)
            output_id = output_ids[0] if output_ids else None
        return await coordinator.refresh_dataset(
            output_id, DatasetQuery(start=start, count=count, app_only=app_only), selection
        )

    view = run_synced(ctx, body)
    if output_format == "json":
        click.echo(dataset_json(view))
    else:
        print_dataset(view)


@click.command("lookup")
@click.argument("project")
@click.argument("snapshot")
@click.argument("code_file", metavar="FILE")
@click.argument("line", type=click.IntRange(min=1))
@click.pass_context
def lookup_command(
    ctx: click.Context, project: str, snapshot: str, code_file: str, line: int
) -> None:
    """Show the analysis results the server has for one source line."""

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> None:
        results = await coordinator.lookup_line(code_file, line, project, snapshot)
        print_line_results(results)

    run_synced(ctx, body)
