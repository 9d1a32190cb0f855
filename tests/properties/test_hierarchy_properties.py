"""Property-based tests for the hierarchy tree ordering.

Whatever sequence of ``add_sorted_children`` calls is made, each level
ends up strictly ascending by label, and every label that was ever added
to the level is still present exactly once.
"""
from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from analysis_mirror.core import AnalysisRun, AnalysisRunRegistry, HierarchyTree


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

labels = st.text(min_size=1, max_size=8)
batches = st.lists(st.lists(labels, max_size=6), min_size=1, max_size=6)
triples = st.tuples(labels, labels, labels)


class TestSortedLevels:
    """Ordering laws for add_sorted_children."""

    @given(batches=batches)
    def test_root_level_strictly_ascending(self, batches: list[list[str]]) -> None:
        tree = HierarchyTree()
        for batch in batches:
            tree.add_sorted_children([], batch)
        names = tree.project_names
        assert all(a < b for a, b in zip(names, names[1:]))
        assert set(names) == {name for batch in batches for name in batch}

    @given(batches=batches)
    def test_nested_level_strictly_ascending(self, batches: list[list[str]]) -> None:
        tree = HierarchyTree()
        tree.replace_projects(["p"])
        for batch in batches:
            tree.add_sorted_children(["p"], batch)
        snapshots = tree.find_by_path(["p"]).child_labels
        assert snapshots == sorted(set(snapshots))

    @given(names=st.lists(labels, max_size=10))
    def test_replace_is_independent_of_input_order(self, names: list[str]) -> None:
        forward, backward = HierarchyTree(), HierarchyTree()
        forward.replace_projects(names)
        backward.replace_projects(list(reversed(names)))
        assert forward.project_names == backward.project_names


class TestRegistryKeys:
    """Lookup is exact on the full triple."""

    @given(run=triples, other=triples)
    def test_lookup_requires_exact_triple(
        self, run: tuple[str, str, str], other: tuple[str, str, str]
    ) -> None:
        registry = AnalysisRunRegistry()
        registry.record_profile(AnalysisRun(*run), "X")
        registry.record_run_id(AnalysisRun(*run), "42")
        info = registry.lookup(*other)
        if other == run:
            assert (info.profile_id, info.server_run_id) == ("X", "42")
        else:
            assert info.is_empty
