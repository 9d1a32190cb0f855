"""Tests for HierarchyNode and HierarchyTree.

Covers sorted level rebuilding, label uniqueness among siblings, path
lookup and positional selection resolution.
"""

from __future__ import annotations

import pytest

from analysis_mirror.core import HierarchyNode, HierarchyTree, Selection


def _tree() -> HierarchyTree:
    tree = HierarchyTree()
    tree.replace_projects(["proj2", "proj1"])
    tree.add_sorted_children(["proj1"], ["s2", "s1"])
    tree.add_sorted_children(["proj1", "s1"], ["B", "A"])
    return tree


class TestHierarchyNode:
    """Tests for the labeled node and its child index."""

    def test_insert_and_lookup(self) -> None:
        parent = HierarchyNode()
        child = HierarchyNode("x")
        parent.insert_child(0, child)
        assert parent.get_child("x") is child
        assert parent.child_labels == ["x"]

    def test_same_label_replaces_sibling(self) -> None:
        """Labels stay unique: re-inserting a label replaces the old node."""
        parent = HierarchyNode()
        first, second = HierarchyNode("x"), HierarchyNode("x")
        parent.insert_child(0, first)
        parent.insert_child(0, second)
        assert parent.children == [second]
        assert parent.get_child("x") is second

    def test_unlabeled_child_rejected(self) -> None:
        with pytest.raises(ValueError):
            HierarchyNode().insert_child(0, HierarchyNode())

    def test_index_is_clamped(self) -> None:
        parent = HierarchyNode()
        parent.insert_child(10, HierarchyNode("a"))
        parent.insert_child(-5, HierarchyNode("b"))
        assert parent.child_labels == ["b", "a"]

    def test_remove_child(self) -> None:
        parent = HierarchyNode()
        parent.insert_child(0, HierarchyNode("a"))
        assert parent.remove_child("a") is not None
        assert parent.remove_child("a") is None
        assert parent.children == []

    def test_children_is_a_copy(self) -> None:
        parent = HierarchyNode()
        parent.insert_child(0, HierarchyNode("a"))
        parent.children.clear()
        assert parent.child_labels == ["a"]


class TestHierarchyTree:
    """Tests for tree-level operations."""

    def test_replace_projects_sorts(self) -> None:
        tree = HierarchyTree()
        nodes = tree.replace_projects(["proj2", "proj1"])
        assert tree.project_names == ["proj1", "proj2"]
        assert [n.label for n in nodes] == ["proj1", "proj2"]

    def test_replace_projects_clears_stale_nodes(self) -> None:
        tree = _tree()
        tree.replace_projects(["proj3"])
        assert tree.project_names == ["proj3"]
        assert tree.find_by_path(["proj1"]) is None

    def test_replace_projects_collapses_duplicates(self) -> None:
        tree = HierarchyTree()
        tree.replace_projects(["a", "a", "b"])
        assert tree.project_names == ["a", "b"]

    def test_add_sorted_children_merges_with_existing(self) -> None:
        tree = HierarchyTree()
        tree.replace_projects(["p"])
        tree.add_sorted_children(["p"], ["c", "a"])
        tree.add_sorted_children(["p"], ["b"])
        assert tree.find_by_path(["p"]).child_labels == ["a", "b", "c"]

    def test_re_added_label_gets_fresh_node(self) -> None:
        tree = _tree()
        old = tree.find_by_path(["proj1", "s1"])
        tree.add_sorted_children(["proj1"], ["s1"])
        new = tree.find_by_path(["proj1", "s1"])
        assert new is not old
        assert new.children == []

    def test_add_sorted_children_bad_parent(self) -> None:
        with pytest.raises(KeyError):
            HierarchyTree().add_sorted_children(["nope"], ["a"])

    def test_upsert_project(self) -> None:
        tree = HierarchyTree()
        b = tree.upsert_project("b")
        a = tree.upsert_project("a")
        assert tree.upsert_project("b") is b
        assert tree.root.children == [a, b]

    def test_find_by_path_matches_construction(self) -> None:
        tree = _tree()
        node = tree.find_by_path(["proj1", "s1", "A"])
        direct = tree.root.get_child("proj1").get_child("s1").get_child("A")
        assert node is direct
        assert tree.find_by_path([]) is tree.root

    def test_find_by_path_missing(self) -> None:
        tree = _tree()
        assert tree.find_by_path(["proj1", "missing", "A"]) is None
        assert tree.find_by_path(["proj2", "s1"]) is None

    def test_node_path(self) -> None:
        tree = _tree()
        path = tree.node_path(["proj1", "s1"])
        assert path is not None
        assert path[0] is tree.root
        assert [n.label for n in path[1:]] == ["proj1", "s1"]
        assert tree.node_path(["proj3"]) is None

    def test_walk_is_depth_first_in_order(self) -> None:
        labels = [(d, n.label) for d, n in _tree().walk()]
        assert labels == [
            (1, "proj1"), (2, "s1"), (3, "A"), (3, "B"), (2, "s2"), (1, "proj2"),
        ]

    def test_labels(self) -> None:
        assert _tree().labels() == {
            "proj1": {"s1": ["A", "B"], "s2": []},
            "proj2": {},
        }


class TestResolveSelection:
    """Positional path -> Selection."""

    def test_full_node_path(self) -> None:
        tree = _tree()
        path = tree.node_path(["proj1", "s1", "A"])
        assert HierarchyTree.resolve_selection(path) == Selection("proj1", "s1", "A")

    def test_under_length_path_yields_none_components(self) -> None:
        tree = _tree()
        path = tree.node_path(["proj1"])
        assert HierarchyTree.resolve_selection(path) == Selection("proj1", None, None)

    def test_empty_and_missing_paths(self) -> None:
        assert HierarchyTree.resolve_selection(None) == Selection()
        assert HierarchyTree.resolve_selection([]) == Selection()

    def test_label_path(self) -> None:
        selection = HierarchyTree.resolve_selection([None, "p", "s"])
        assert selection == Selection("p", "s", None)
        assert selection.as_run() is None
