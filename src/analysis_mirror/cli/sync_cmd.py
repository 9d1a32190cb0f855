"""``analysis-mirror sync`` and ``analysis-mirror web-url``.

Usage::

    analysis-mirror sync
    analysis-mirror sync --local-project my-app --format json
    analysis-mirror web-url my-app 2024-05-01
"""

from __future__ import annotations

import json
import sys

import click

from analysis_mirror.cli.output import print_hierarchy, print_sync_summary
from analysis_mirror.cli.runtime import CliState, run_synced
from analysis_mirror.core import SyncCoordinator, SyncResult


@click.command("sync")
@click.option(
    "--local-project", default=None,
    help="Name of the locally open project to auto-select after the sync.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.pass_context
def sync_command(ctx: click.Context, local_project: str | None, output_format: str) -> None:
    """Mirror the server's project -> snapshot -> analysis hierarchy.

    Exits with status 1 when any branch of the sync failed. Snapshots
    without an analysis configuration yet are listed but do not count as
    failures.
    """

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> SyncResult:
        session = coordinator.session
        if output_format == "json":
            click.echo(json.dumps(
                {
                    "projects": session.tree.labels(),
                    "selected_project": result.selected_project,
                    "failures": result.failures,
                    "unconfigured": result.unconfigured,
                },
                indent=2,
            ))
        else:
            print_hierarchy(session.tree, session.registry)
            print_sync_summary(result)
            if result.selected_project:
                click.echo(f"Selected project: {result.selected_project}")
        return result

    result = run_synced(ctx, body, local_project=local_project)
    sys.exit(0 if result.ok else 1)


@click.command("web-url")
@click.argument("project", required=False)
@click.argument("snapshot", required=False)
@click.pass_obj
def web_url_command(state: CliState, project: str | None, snapshot: str | None) -> None:
    """Print the web UI address of a project or snapshot.

    No server call is made.
    """
    click.echo(state.config.web_path(project, snapshot))
