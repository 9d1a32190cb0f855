"""Core value types: AnalysisRun, RunInfo, Selection, LineResult.

These are pure data holders shared by the registry, the hierarchy tree and
the sync coordinator, kept apart so that each of those modules can import
them without pulling in the others.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisRun:
    """A unique analysis run: project -> snapshot -> analysis name.

    Used exclusively as a cache key. Identity is structural equality over
    all three fields.
    """

    project: str
    snapshot: str
    analysis: str


@dataclass(frozen=True)
class RunInfo:
    """Cached identifiers for one analysis run.

    Attributes:
        profile_id: The profile (schema) the run used, if known.
        server_run_id: Opaque server identifier for result retrieval.
    """

    profile_id: str | None = None
    server_run_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.profile_id is None and self.server_run_id is None


@dataclass(frozen=True)
class Selection:
    """The (project, snapshot, analysis) picked in the hierarchy tree.

    Any component may be ``None`` when a non-leaf node is selected.
    """

    project: str | None = None
    snapshot: str | None = None
    analysis: str | None = None

    def as_run(self) -> AnalysisRun | None:
        """Return the ``AnalysisRun`` key, or None unless all parts are set."""
        if self.project is None or self.snapshot is None or self.analysis is None:
            return None
        return AnalysisRun(self.project, self.snapshot, self.analysis)


@dataclass(frozen=True)
class LineResult:
    """An analysis result returned by the server for a specific source line."""

    symbol_id: str
    result_type: str
    description: str
