"""analysis-mirror CLI: Browse a remote code-analysis service from the terminal.

Entry point for the ``analysis-mirror`` command-line tool. Registers all
subcommands under a single Click group. Every command except ``web-url``
starts with a full sync of the server hierarchy.

Commands:
    sync    : Mirror the project -> snapshot -> analysis hierarchy.
    types   : List the analysis types of a project.
    outputs : List the output datasets of an analysis run.
    dataset : Show one page of an output dataset.
    analyze : Start an analysis with options from its form.
    lookup  : Show the results for one source line.
    post    : Post a code snapshot through the bundled CLI.
    web-url : Print the web UI address of a project or snapshot.

Usage::

    analysis-mirror --server https://analysis.example.org --user alice sync
    analysis-mirror types my-app
    analysis-mirror dataset my-app 2024-05-01 "Points-to" --count 20
    analysis-mirror -v post ./my-app --project my-app
"""

from __future__ import annotations

from pathlib import Path

import click

from analysis_mirror import __version__
from analysis_mirror.cli.analyze_cmd import analyze_command
from analysis_mirror.cli.browse_cmd import outputs_command, types_command
from analysis_mirror.cli.dataset_cmd import dataset_command, lookup_command
from analysis_mirror.cli.post_cmd import post_command
from analysis_mirror.cli.runtime import CliState
from analysis_mirror.cli.sync_cmd import sync_command, web_url_command
from analysis_mirror.config import load_config
from analysis_mirror.exceptions import ConfigurationError
from analysis_mirror.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file (default: ~/.config/analysis-mirror/config.yaml).",
)
@click.option("--server", default=None, help="Server address, e.g. localhost:8080.")
@click.option("--user", default=None, help="User name.")
@click.option("--token", default=None, help="API key or password.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    server: str | None,
    user: str | None,
    token: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """analysis-mirror: Mirror and query a remote code-analysis service.

    Settings come from the configuration file, then the
    ANALYSIS_MIRROR_SERVER / ANALYSIS_MIRROR_USER / ANALYSIS_MIRROR_TOKEN
    environment variables, then these options.
    """
    setup_logging(verbose=verbose, quiet=quiet)
    try:
        config = load_config(config_path)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(2)
    ctx.obj = CliState(config=config.with_overrides(server=server, user=user, token=token))


# Register all subcommands
cli.add_command(sync_command)
cli.add_command(types_command)
cli.add_command(outputs_command)
cli.add_command(dataset_command)
cli.add_command(analyze_command)
cli.add_command(lookup_command)
cli.add_command(post_command)
cli.add_command(web_url_command)
