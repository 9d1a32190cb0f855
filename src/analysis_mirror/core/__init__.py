"""Synchronization and schema-interpretation engine.

The package is split into focused submodules:

- ``models``: Value types (``AnalysisRun``, ``RunInfo``, ``Selection``,
  ``LineResult``).
- ``hierarchy``: The labeled project -> snapshot -> analysis tree.
- ``registry``: The run-keyed profile / run-id / descriptor cache.
- ``forms``: Options schema -> editable form -> ``<id>=<value>`` list.
- ``datasets``: Outputs schema -> column layout -> table rows.
- ``session``: Per-session state and presentation protocols.
- ``sync``: The coordinator driving remote calls.

All public names are re-exported here.
"""

from analysis_mirror.core.datasets import (
    ColumnLayout,
    DatasetQuery,
    DatasetView,
    SourcePosition,
    extract_row,
    list_output_ids,
    parse_source_position,
    resolve_columns,
)
from analysis_mirror.core.forms import FieldKind, FormField, FormModel, build_form, serialize
from analysis_mirror.core.hierarchy import HierarchyNode, HierarchyTree
from analysis_mirror.core.models import AnalysisRun, LineResult, RunInfo, Selection
from analysis_mirror.core.registry import AnalysisRunRegistry
from analysis_mirror.core.session import (
    LoggingNotifier,
    Notifier,
    NullTreeView,
    SessionContext,
    TreeView,
)
from analysis_mirror.core.sync import SyncCoordinator, SyncResult

__all__ = [
    "AnalysisRun",
    "AnalysisRunRegistry",
    "ColumnLayout",
    "DatasetQuery",
    "DatasetView",
    "FieldKind",
    "FormField",
    "FormModel",
    "HierarchyNode",
    "HierarchyTree",
    "LineResult",
    "LoggingNotifier",
    "Notifier",
    "NullTreeView",
    "RunInfo",
    "Selection",
    "SessionContext",
    "SourcePosition",
    "SyncCoordinator",
    "SyncResult",
    "TreeView",
    "build_form",
    "extract_row",
    "list_output_ids",
    "parse_source_position",
    "resolve_columns",
    "serialize",
]
