"""Analysis-run keyed metadata cache.

``AnalysisRunRegistry`` remembers, for the lifetime of a session:

- run -> profile id (which schema the run used)
- run -> server run id (opaque id used to fetch outputs)
- project -> {analysis-type display name -> profile id}
- profile id -> ``ProfileDescriptor`` (the raw schema document)

Runs are keyed directly by the structural ``AnalysisRun`` triple, so lookup
is a single dict access and duplicate triples cannot exist. The maps are
never cleared by a sync: entries are overwritten when seen again, and an
entry whose server object was deleted stays until the session ends.
Profile descriptors are keyed by id; the last write wins.
"""

from __future__ import annotations

import logging

from analysis_mirror.core.models import AnalysisRun, RunInfo
from analysis_mirror.remote.records import ProfileDescriptor

logger = logging.getLogger(__name__)


class AnalysisRunRegistry:
    """Per-session cache of run identifiers and profile descriptors.

    Thread safety: This class is NOT thread-safe. External synchronization is
    required for concurrent access.
    """

    def __init__(self) -> None:
        self._profiles: dict[AnalysisRun, str] = {}
        self._run_ids: dict[AnalysisRun, str] = {}
        self._type_profiles: dict[str, dict[str, str]] = {}
        self._descriptors: dict[str, ProfileDescriptor] = {}

    def __len__(self) -> int:
        return len(self._profiles.keys() | self._run_ids.keys())

    # -- recording ----------------------------------------------------------

    def record_profile(self, run: AnalysisRun, profile_id: str) -> None:
        self._profiles[run] = profile_id

    def record_run_id(self, run: AnalysisRun, server_run_id: str) -> None:
        self._run_ids[run] = server_run_id

    def record_profile_descriptor(self, profile_id: str, descriptor: ProfileDescriptor) -> None:
        """Store a profile schema; an existing descriptor for the id is replaced."""
        previous = self._descriptors.get(profile_id)
        if previous is not None and previous != descriptor:
            logger.debug("Replacing descriptor for profile %s", profile_id)
        self._descriptors[profile_id] = descriptor

    def record_analysis_type(self, project: str, display_name: str, profile_id: str) -> None:
        """Map one of a project's analysis types to its profile id."""
        self._type_profiles.setdefault(project, {})[display_name] = profile_id

    # -- lookup -------------------------------------------------------------

    def lookup(self, project: str, snapshot: str, analysis: str) -> RunInfo:
        """Return the cached profile and server run id for a triple.

        Both fields are None when the triple was never recorded.
        """
        run = AnalysisRun(project, snapshot, analysis)
        return RunInfo(
            profile_id=self._profiles.get(run),
            server_run_id=self._run_ids.get(run),
        )

    def descriptor(self, profile_id: str | None) -> ProfileDescriptor | None:
        if profile_id is None:
            return None
        return self._descriptors.get(profile_id)

    def descriptor_for_run(self, run: AnalysisRun) -> ProfileDescriptor | None:
        """Return the profile descriptor used by ``run``, if both are cached."""
        return self.descriptor(self._profiles.get(run))

    def analysis_types(self, project: str) -> list[str]:
        """Display names of the analysis types available in ``project``."""
        return list(self._type_profiles.get(project, {}))

    def profile_for_type(self, project: str, display_name: str) -> str | None:
        return self._type_profiles.get(project, {}).get(display_name)

    @property
    def profile_ids(self) -> list[str]:
        return list(self._descriptors)
