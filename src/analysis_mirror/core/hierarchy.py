"""Labeled project -> snapshot -> analysis tree mirrored from the server.

The tree has a synthetic, unlabeled root whose children are projects;
projects hold snapshots and snapshots hold analyses. Every node keeps its
children both as an ordered list (presentation order) and as a
label -> child index for O(1) lookup.

Each level is rebuilt wholesale during a sync: children are sorted by label
and inserted at indices 0..n-1 rather than merged into an existing sorted
sequence. Levels hold tens of items, so the O(n log n) rebuild is cheap.

Thread safety: This class is NOT thread-safe. The sync coordinator
guarantees a single in-flight mutation.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

from analysis_mirror.core.models import Selection

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# HierarchyNode
# ---------------------------------------------------------------------------


class HierarchyNode:
    """A node with a label. Supports fast look up of children by label."""

    def __init__(self, label: str | None = None) -> None:
        self.label = label
        self._children: list[HierarchyNode] = []
        self._by_label: dict[str, HierarchyNode] = {}

    def __repr__(self) -> str:
        return f"HierarchyNode({self.label!r}, children={len(self._children)})"

    @property
    def children(self) -> list[HierarchyNode]:
        """Children in presentation order (a copy)."""
        return list(self._children)

    @property
    def child_labels(self) -> list[str]:
        return [c.label for c in self._children if c.label is not None]

    def get_child(self, label: str) -> HierarchyNode | None:
        """Return the child with the given label, or None."""
        return self._by_label.get(label)

    def insert_child(self, index: int, child: HierarchyNode) -> None:
        """Insert ``child`` at ``index``.

        A sibling with the same label is removed first, so labels stay
        unique among siblings.

        Raises:
            ValueError: If ``child`` is unlabeled.
        """
        if child.label is None:
            raise ValueError("Only labeled nodes can be children")
        if child.label in self._by_label:
            self.remove_child(child.label)
        index = max(0, min(index, len(self._children)))
        self._children.insert(index, child)
        self._by_label[child.label] = child

    def remove_child(self, label: str) -> HierarchyNode | None:
        """Detach and return the child with ``label`` (None if absent)."""
        child = self._by_label.pop(label, None)
        if child is not None:
            self._children.remove(child)
        return child

    def clear(self) -> None:
        """Remove all children."""
        self._children.clear()
        self._by_label.clear()


# ---------------------------------------------------------------------------
# HierarchyTree
# ---------------------------------------------------------------------------


class HierarchyTree:
    """The mirrored project -> snapshot -> analysis structure."""

    def __init__(self) -> None:
        self.root = HierarchyNode()

    def __len__(self) -> int:
        return len(self.root.children)

    @property
    def project_names(self) -> list[str]:
        return self.root.child_labels

    def upsert_project(self, name: str) -> HierarchyNode:
        """Return the project node for ``name``, creating it in sorted position."""
        node = self.root.get_child(name)
        if node is None:
            node = self.add_sorted_children([], [name])[0]
        return node

    def replace_projects(self, names: Iterable[str]) -> list[HierarchyNode]:
        """Clear the root and repopulate it with sorted project nodes.

        Clearing first means no stale node survives into the rebuilt tree.

        Returns:
            The new project nodes, in tree order.
        """
        self.root.clear()
        return self.add_sorted_children([], names)

    def add_sorted_children(
        self, parent_path: Sequence[str], names: Iterable[str]
    ) -> list[HierarchyNode]:
        """Add children under the node at ``parent_path`` in ascending label order.

        The whole level is rebuilt: existing children are kept, each name in
        ``names`` gets a fresh node (replacing any sibling with that label),
        and the level is reinserted sorted at indices 0..n-1.

        Args:
            parent_path: Labels from the root to the parent ([] for the root).
            names: Child labels, in any order. Duplicates collapse to one node.

        Returns:
            The newly created nodes, sorted by label.

        Raises:
            KeyError: If ``parent_path`` does not resolve to a node.
        """
        parent = self.find_by_path(parent_path)
        if parent is None:
            raise KeyError(f"No node for path {'/'.join(parent_path)}")
        level = {child.label: child for child in parent.children}
        added: list[HierarchyNode] = []
        for name in sorted(set(names)):
            logger.debug("Adding node for item: %s", name)
            node = HierarchyNode(name)
            level[name] = node
            added.append(node)
        parent.clear()
        for index, label in enumerate(sorted(level)):
            parent.insert_child(index, level[label])
        return added

    def find_by_path(self, labels: Sequence[str]) -> HierarchyNode | None:
        """Walk ``labels`` from the root; None when any label is missing."""
        node: HierarchyNode | None = self.root
        for label in labels:
            if node is None:
                return None
            node = node.get_child(label)
        return node

    def node_path(self, labels: Sequence[str]) -> list[HierarchyNode] | None:
        """Return ``[root, n1, n2, ...]`` for ``labels``, as a tree widget path."""
        path = [self.root]
        for label in labels:
            child = path[-1].get_child(label)
            if child is None:
                return None
            path.append(child)
        return path

    @staticmethod
    def resolve_selection(path: Sequence[HierarchyNode | str | None] | None) -> Selection:
        """Turn a positional selection path into a ``Selection``.

        Index 0 is the invisible root; index 1 is the project, 2 the
        snapshot and 3 the analysis. Missing indices yield None components.
        Both node paths and plain label paths are accepted.
        """
        if not path:
            logger.debug("No selection in tree.")
            return Selection()

        def _label(index: int) -> str | None:
            if len(path) <= index:
                return None
            item = path[index]
            if isinstance(item, HierarchyNode):
                return item.label
            return item if isinstance(item, str) else None

        return Selection(project=_label(1), snapshot=_label(2), analysis=_label(3))

    def walk(self) -> Iterator[tuple[int, HierarchyNode]]:
        """Yield ``(depth, node)`` depth-first in tree order, excluding the root."""
        stack = [(1, child) for child in reversed(self.root.children)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, child) for child in reversed(node.children))

    def labels(self) -> dict[str, dict[str, list[str]]]:
        """Nested ``{project: {snapshot: [analysis, ...]}}`` view of the tree."""
        return {
            project.label: {
                snapshot.label: snapshot.child_labels for snapshot in project.children
            }
            for project in self.root.children
        }
