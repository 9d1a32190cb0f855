"""Rich output formatting helpers for the analysis-mirror CLI.

Provides consistent terminal output for the mirrored hierarchy, sync
summaries, analysis types, option forms, dataset tables and line results.
"""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from analysis_mirror.core import (
    AnalysisRunRegistry,
    DatasetView,
    FieldKind,
    FormModel,
    HierarchyTree,
    LineResult,
    SyncResult,
    parse_source_position,
)

console = Console()
err_console = Console(stderr=True)


class ConsoleNotifier:
    """Notifier printing user-facing messages to stderr."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def report_error(self, message: str) -> None:
        self.messages.append(message)
        err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_hierarchy(tree: HierarchyTree, registry: AnalysisRunRegistry | None = None) -> None:
    """Print the project -> snapshot -> analysis tree.

    Analyses show their cached server run id when ``registry`` is given.
    """
    if len(tree) == 0:
        console.print("[dim]No projects on the server.[/dim]")
        return
    view = Tree("[bold]Projects[/bold]")
    for project in tree.root.children:
        project_branch = view.add(Text(project.label or "", style="bold"))
        for snapshot in project.children:
            snapshot_branch = project_branch.add(Text(snapshot.label or "", style="cyan"))
            for analysis in snapshot.children:
                label = Text(analysis.label or "")
                if registry is not None and analysis.label is not None:
                    info = registry.lookup(project.label or "", snapshot.label or "", analysis.label)
                    if info.server_run_id:
                        label.append(f"  (run {info.server_run_id})", style="dim")
                snapshot_branch.add(label)
    console.print(view)


def print_sync_summary(result: SyncResult) -> None:
    """Print a one-line summary after a sync."""
    if result.superseded:
        console.print("[yellow]Sync superseded by a newer request.[/yellow]")
        return
    parts = [
        f"[bold]{result.projects}[/bold] projects",
        f"{result.snapshots} snapshots",
        f"{result.analyses} analyses",
    ]
    if result.unconfigured:
        parts.append(f"[dim]{len(result.unconfigured)} not analyzed yet[/dim]")
    if result.failures:
        parts.append(f"[red]{len(result.failures)} failed branches[/red]")
    console.print(" | ".join(parts))
    for failure in result.failures:
        console.print(f"  [dim]- {escape(failure)}[/dim]")


def print_analysis_types(project: str, registry: AnalysisRunRegistry) -> None:
    names = registry.analysis_types(project)
    if not names:
        console.print(f"[dim]No analysis types for project {escape(project)}.[/dim]")
        return
    table = Table(title=Text(f"Analysis types: {project}"), show_header=True, header_style="bold")
    table.add_column("Analysis", style="bold")
    table.add_column("Profile", style="dim")
    table.add_column("Outputs", justify="right")
    for name in names:
        profile_id = registry.profile_for_type(project, name) or ""
        descriptor = registry.descriptor(profile_id)
        outputs = str(len(descriptor.outputs)) if descriptor else "-"
        table.add_row(Text(name), Text(profile_id), outputs)
    console.print(table)


def _field_value_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ", ".join(value)
    return "" if value is None else str(value)


def print_form(title: str, form: FormModel) -> None:
    """Print the option fields of an analysis form and any schema warnings."""
    table = Table(title=Text(title), show_header=True, header_style="bold")
    table.add_column("Option", style="bold")
    table.add_column("Id", style="dim")
    table.add_column("Kind")
    table.add_column("Value")
    table.add_column("Choices", style="dim")
    for f in form.fields:
        choices = ", ".join(f.choices) if f.kind in (
            FieldKind.SINGLE_CHOICE, FieldKind.MULTI_CHOICE
        ) else ""
        table.add_row(
            Text(f.label), Text(f.option_id), f.kind.value, Text(_field_value_text(f.value)), Text(choices)
        )
    console.print(table)
    for warning in form.warnings:
        console.print(f"[yellow]WARNING:[/yellow] {escape(warning)}")


def _cell(value: str) -> Text:
    if parse_source_position(value) is not None:
        return Text(value, style="cyan")
    return Text(value)


def print_dataset(view: DatasetView) -> None:
    """Print a dataset view as a table (column order as declared by the server)."""
    if view.layout.is_empty:
        console.print(f"[dim]No such output: {escape(view.output_id)}[/dim]")
        return
    table = Table(title=Text(view.output_id), show_header=True, header_style="bold")
    for column in view.columns:
        table.add_column(Text(column))
    for row in view.rows:
        table.add_row(*(_cell(value) for value in row))
    console.print(table)
    console.print(f"{len(view.rows)} rows")


def dataset_json(view: DatasetView) -> str:
    return json.dumps(
        {
            "output": view.output_id,
            "columns": list(view.columns),
            "attributes": list(view.layout.attribute_ids),
            "rows": view.as_records(),
        },
        indent=2,
    )


def print_line_results(results: list[LineResult]) -> None:
    if not results:
        console.print("[dim]No results for this line.[/dim]")
        return
    table = Table(title="Line Results", show_header=True, header_style="bold")
    table.add_column("Symbol", style="bold")
    table.add_column("Type")
    table.add_column("Description")
    for r in results:
        table.add_row(Text(r.symbol_id), Text(r.result_type), Text(r.description))
    console.print(table)
