"""``analysis-mirror analyze``: Start an analysis from its options form.

Option values are given as ``-o ID=VALUE``. Repeating an id selects
several values of a multi-valued option, in the order given.

Usage::

    analysis-mirror analyze my-app 2024-05-01 "Points-to" -o timeout=90
    analysis-mirror analyze my-app 2024-05-01 "Points-to" -o platform=java_8 -o platform=android
    analysis-mirror analyze my-app 2024-05-01 "Points-to" --dry-run
"""

from __future__ import annotations

import sys

import click

from analysis_mirror.cli.output import print_form, print_sync_summary
from analysis_mirror.cli.runtime import require_project, run_synced
from analysis_mirror.core import FieldKind, FormModel, SyncCoordinator, SyncResult
from analysis_mirror.exceptions import InvalidOptionValue


def _parse_overrides(values: tuple[str, ...]) -> dict[str, list[str]]:
    """Group ``ID=VALUE`` arguments by id, keeping the given order."""
    grouped: dict[str, list[str]] = {}
    for item in values:
        option_id, sep, value = item.partition("=")
        if not sep or not option_id:
            raise click.BadParameter(f"expected ID=VALUE, got {item!r}", param_hint="-o")
        grouped.setdefault(option_id, []).append(value)
    return grouped


def apply_overrides(form: FormModel, overrides: dict[str, list[str]]) -> None:
    """Apply grouped overrides to ``form``.

    Raises:
        InvalidOptionValue: For unknown ids, invalid values, or several
            values given for a single-valued option.
    """
    for option_id, values in overrides.items():
        field = form.get(option_id)
        if field is None:
            raise InvalidOptionValue(f"Unknown option: {option_id}")
        if field.kind is FieldKind.MULTI_CHOICE:
            form.select(option_id, values)
        elif len(values) > 1:
            raise InvalidOptionValue(f"Option {option_id} takes a single value")
        else:
            form.set_value(option_id, values[0])


@click.command("analyze")
@click.argument("project")
@click.argument("snapshot")
@click.argument("analysis_type", metavar="TYPE")
@click.option(
    "-o", "--option", "options", multiple=True, metavar="ID=VALUE",
    help="Set an analysis option (repeat an id for multi-valued options).",
)
@click.option("--dry-run", is_flag=True, help="Print the options without starting the analysis.")
@click.pass_context
def analyze_command(
    ctx: click.Context,
    project: str,
    snapshot: str,
    analysis_type: str,
    options: tuple[str, ...],
    dry_run: bool,
) -> None:
    """Start analysis TYPE on a snapshot, then re-sync.

    The option form is built from the server's profile for TYPE; use
    ``types PROJECT`` to list the available types.
    """
    overrides = _parse_overrides(options)

    async def body(coordinator: SyncCoordinator, result: SyncResult) -> SyncResult | None:
        require_project(coordinator, project)
        form = coordinator.build_analysis_form(analysis_type, project=project)
        apply_overrides(form, overrides)
        print_form(f"{analysis_type} options", form)
        if dry_run:
            return result
        return await coordinator.start_analysis(analysis_type, form, project, snapshot)

    after = run_synced(ctx, body)
    if after is None:
        sys.exit(1)
    if not dry_run:
        click.echo(f"Started {analysis_type} on {project}/{snapshot}.")
        print_sync_summary(after)
