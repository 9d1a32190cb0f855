"""Per-session state and presentation hooks.

A ``SessionContext`` owns everything a sync mutates: the hierarchy tree,
the run registry, and the user's current selection. It is passed
explicitly to the coordinator so that two sessions (e.g. two open
projects) never share cache state.

The presentation layer is reached only through two small protocols:
``TreeView`` (expand and select rows in a tree widget) and ``Notifier``
(show a user-facing message). Headless callers use the defaults, which
log instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from analysis_mirror.config import ServerConfig
from analysis_mirror.core.hierarchy import HierarchyNode, HierarchyTree
from analysis_mirror.core.models import Selection
from analysis_mirror.core.registry import AnalysisRunRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Presentation protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class TreeView(Protocol):
    """The external widget presenting the hierarchy tree."""

    def expand_all(self) -> None:
        """Expand every currently visible row."""

    def select(self, path: Sequence[HierarchyNode]) -> None:
        """Select the node at ``path`` (``[root, project, ...]``)."""


@runtime_checkable
class Notifier(Protocol):
    """Shows user-facing messages."""

    def report_error(self, message: str) -> None:
        """Report a non-blocking error to the user."""


class NullTreeView:
    """TreeView that ignores presentation hints."""

    def expand_all(self) -> None:
        return None

    def select(self, path: Sequence[HierarchyNode]) -> None:
        return None


class LoggingNotifier:
    """Notifier that records messages and logs them at error level."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def report_error(self, message: str) -> None:
        self.messages.append(message)
        logger.error(message)


# ---------------------------------------------------------------------------
# SessionContext
# ---------------------------------------------------------------------------


@dataclass
class SessionContext:
    """Mutable state of one client session.

    Attributes:
        config: Server address and credentials.
        local_project: Name of the locally open project; a server project
            with the same name is auto-selected after a sync.
        tree: Mirrored project -> snapshot -> analysis hierarchy.
        registry: Run and profile metadata gathered by syncs.
        selection: The user's current tree selection.
        tree_view: Presentation hook for the tree widget.
        notifier: Presentation hook for user-facing messages.
    """

    config: ServerConfig
    local_project: str | None = None
    tree: HierarchyTree = field(default_factory=HierarchyTree)
    registry: AnalysisRunRegistry = field(default_factory=AnalysisRunRegistry)
    selection: Selection = field(default_factory=Selection)
    tree_view: TreeView = field(default_factory=NullTreeView)
    notifier: Notifier = field(default_factory=LoggingNotifier)

    def select_path(self, path: Sequence[HierarchyNode | str | None] | None) -> Selection:
        """Update the selection from a positional tree path and return it."""
        self.selection = HierarchyTree.resolve_selection(path)
        return self.selection

    def web_path(self) -> str:
        """URL of the current selection in the web UI."""
        return self.config.web_path(self.selection.project, self.selection.snapshot)
