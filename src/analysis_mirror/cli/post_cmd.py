"""``analysis-mirror post``: Post a code snapshot through the bundled CLI."""

from __future__ import annotations

from pathlib import Path

import click

from analysis_mirror.cli.output import print_sync_summary
from analysis_mirror.cli.runtime import run_synced
from analysis_mirror.core import SyncCoordinator, SyncResult
from analysis_mirror.posting import CliPoster


@click.command("post")
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option("--project", "project_name", required=True, help="Server project to post to.")
@click.option(
    "--cli-bundle",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Zipped CLI distribution (overrides the configured cli_bundle).",
)
@click.pass_context
def post_command(
    ctx: click.Context, directory: Path, project_name: str, cli_bundle: Path | None
) -> None:
    """Post DIRECTORY as a new snapshot of a project, then re-sync.

    The CLI's output is streamed as it runs.
    """

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> SyncResult:
        poster = CliPoster.from_config(coordinator.session.config)
        if cli_bundle is not None:
            poster.bundle = cli_bundle
        return await coordinator.post_snapshot(
            poster, directory.resolve(), project_name, on_line=click.echo
        )

    after = run_synced(ctx, body, local_project=project_name)
    click.echo(f"Posted {directory} to {project_name}.")
    print_sync_summary(after)
