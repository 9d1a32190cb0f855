"""Schema -> tabular dataset interpreter for analysis outputs.

A profile's ``outputs`` schema lists the datasets an analysis produces and,
for each, the attributes that make up its columns. ``resolve_columns`` turns
one output entry into parallel lists of column names and attribute ids in
schema order (never alphabetized: the server decides that "file" comes
before "line"). ``extract_row`` then projects a flat result record onto
those attribute ids; missing values become blank cells.

Result cells of the form ``file:line:column`` point into the source tree;
``parse_source_position`` recognizes them so a front end can navigate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

from analysis_mirror.remote.records import parse_attribute

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnLayout:
    """Column names and the attribute ids feeding them, in schema order."""

    columns: tuple[str, ...] = ()
    attribute_ids: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.attribute_ids


@dataclass(frozen=True)
class DatasetQuery:
    """Paging and filtering for an output query.

    Attributes:
        start: Offset of the first record.
        count: Maximum number of records.
        app_only: Only show results about application (non-library) code.
    """

    start: int = 0
    count: int = 50
    app_only: bool = False


@dataclass
class DatasetView:
    """A rendered output table."""

    output_id: str | None = None
    layout: ColumnLayout = field(default_factory=ColumnLayout)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def columns(self) -> tuple[str, ...]:
        return self.layout.columns

    @property
    def is_empty(self) -> bool:
        return self.layout.is_empty and not self.rows

    def as_records(self) -> list[dict[str, str]]:
        """Rows keyed by column name (for JSON output)."""
        return [dict(zip(self.layout.columns, row)) for row in self.rows]


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


def _output_entries(outputs: Any) -> Iterator[Mapping[str, Any]]:
    if not isinstance(outputs, list):
        return
    for entry in outputs:
        if isinstance(entry, Mapping):
            yield entry
        else:
            logger.warning("Skipping malformed output entry: %r", entry)


def list_output_ids(outputs: Any) -> list[str]:
    """Return the ids of all declared outputs, sorted ascending."""
    ids = {
        entry["id"] for entry in _output_entries(outputs)
        if isinstance(entry.get("id"), str) and entry["id"]
    }
    return sorted(ids)


def resolve_columns(outputs: Any, output_id: str) -> ColumnLayout:
    """Resolve the column layout of output ``output_id``.

    Args:
        outputs: The profile's raw ``outputs`` list.
        output_id: Id of the output to display.

    Returns:
        The layout; empty when the output is not declared ("show an empty
        table", not an error).
    """
    declared = next(
        (entry for entry in _output_entries(outputs) if entry.get("id") == output_id),
        None,
    )
    if declared is None:
        logger.debug("No output %s in profile schema", output_id)
        return ColumnLayout()
    attributes = declared.get("attributes")
    if not isinstance(attributes, list):
        return ColumnLayout()
    columns: list[str] = []
    attribute_ids: list[str] = []
    for raw in attributes:
        attribute = parse_attribute(raw)
        if attribute is None:
            continue
        columns.append(attribute.display_name)
        attribute_ids.append(attribute.id)
    return ColumnLayout(columns=tuple(columns), attribute_ids=tuple(attribute_ids))


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def extract_row(record: Mapping[str, Any], attribute_ids: Sequence[str]) -> list[str]:
    """Project one result record onto ``attribute_ids``; missing values are ""."""
    return [_cell_text(record.get(attribute_id)) for attribute_id in attribute_ids]


# ---------------------------------------------------------------------------
# Source positions in result cells
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourcePosition:
    """A ``file:line:column`` reference found in a result cell (1-based)."""

    filename: str
    line: int
    column: int

    def candidate_paths(self) -> list[str]:
        """Relative paths to try, in order.

        Snapshots posted by different tools follow different source layouts,
        so both ``<file>`` and ``src/<file>`` are tried.
        """
        return [self.filename, f"src/{self.filename}"]


def parse_source_position(cell: Any) -> SourcePosition | None:
    """Parse a ``file:line:column`` cell; None for anything else."""
    if not isinstance(cell, str):
        return None
    parts = cell.split(":")
    if len(parts) != 3:
        return None
    filename, line, column = parts
    try:
        return SourcePosition(filename=filename, line=int(line), column=int(column))
    except ValueError:
        logger.debug("Bad line/column in cell: %s", cell)
        return None
