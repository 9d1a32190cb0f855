"""Sync coordinator: rebuilds the mirrored hierarchy and serves dataset views.

Full sync algorithm:
    1. Check credentials (``ConfigurationError`` before any network call).
    2. ``list_projects``; remember the project matching the local project.
    3. Replace the tree's projects (clear, then insert sorted) and ask the
       tree view to expand.
    4. Per project, concurrently: ``get_project_analyses`` (analysis-type
       and profile maps) and ``list_snapshots`` (sorted snapshot nodes).
    5. Per snapshot, concurrently: ``get_configuration``; add sorted
       analysis nodes and register each run's profile and server run id.
    6. Select the remembered project in the tree view.

Failures are scoped to one branch: a failed call abandons only the work
that depends on it. If ``list_projects`` itself fails the previous tree
is left untouched.

Full syncs are serialized by an ``asyncio.Lock``. Every request takes a new
generation number; a running sync that sees a newer generation at one of
its suspension points stops mutating the session and reports
``superseded=True``, so the most recent request always wins.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable

from analysis_mirror.core.datasets import (
    DatasetQuery,
    DatasetView,
    extract_row,
    list_output_ids,
    resolve_columns,
)
from analysis_mirror.core.forms import FormModel, build_form, serialize
from analysis_mirror.core.models import AnalysisRun, LineResult, Selection
from analysis_mirror.core.session import SessionContext
from analysis_mirror.exceptions import RemoteError, SelectionError
from analysis_mirror.remote.base import CONFIG_FILE_NAME, RemoteAnalysisClient
from analysis_mirror.remote.records import (
    parse_configured_analyses,
    parse_profile,
    parse_project,
    parse_snapshot,
    unwrap_results,
)

if TYPE_CHECKING:
    from analysis_mirror.posting.poster import CliPoster

logger = logging.getLogger(__name__)

CONNECTIVITY_NOTICE: str = "Could not reach server!"


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass
class SyncResult:
    """Summary of one full sync.

    Attributes:
        projects: Project nodes created.
        snapshots: Snapshot nodes created.
        analyses: Analysis nodes created.
        failures: One message per abandoned branch.
        unconfigured: ``project/snapshot`` paths whose configuration could
            not be fetched (routine for fresh snapshots; not a failure).
        superseded: True when a newer sync request took over.
        selected_project: The auto-selected local project, if any.
    """

    projects: int = 0
    snapshots: int = 0
    analyses: int = 0
    failures: list[str] = field(default_factory=list)
    unconfigured: list[str] = field(default_factory=list)
    superseded: bool = False
    selected_project: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failures and not self.superseded


class _Superseded(Exception):
    """A newer sync request was made while this one was suspended."""


# ---------------------------------------------------------------------------
# SyncCoordinator
# ---------------------------------------------------------------------------


class SyncCoordinator:
    """Orchestrates remote calls against one ``SessionContext``.

    Usage::

        coordinator = SyncCoordinator(session, remote)
        result = await coordinator.full_sync()
        view = await coordinator.refresh_dataset("warnings")
    """

    def __init__(self, session: SessionContext, remote: RemoteAnalysisClient) -> None:
        self.session = session
        self.remote = remote
        self._lock = asyncio.Lock()
        self._generation = 0
        self._posts_in_flight = 0

    @property
    def is_syncing(self) -> bool:
        return self._lock.locked()

    @property
    def posts_in_flight(self) -> int:
        """Number of snapshot posts that have not yet terminated."""
        return self._posts_in_flight

    # -- helpers ------------------------------------------------------------

    @property
    def _user(self) -> str:
        return self.session.config.user

    def _check(self, generation: int) -> None:
        if generation != self._generation:
            raise _Superseded()

    def _report_connectivity(self, exc: Exception) -> None:
        logger.warning("Connectivity error: %s", exc)
        self.session.notifier.report_error(CONNECTIVITY_NOTICE)

    def _branch_failed(self, result: SyncResult, what: str, exc: Exception) -> None:
        result.failures.append(f"{what}: {exc}")
        self._report_connectivity(exc)

    @staticmethod
    async def _gather(branches: Iterable[Awaitable[None]]) -> None:
        """Run branches concurrently, waiting for all before propagating errors."""
        outcomes = await asyncio.gather(*branches, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    # -- full sync ----------------------------------------------------------

    async def full_sync(self) -> SyncResult:
        """Rebuild the hierarchy tree and registry from the server.

        Returns:
            A ``SyncResult``; ``superseded`` is set when a newer request
            took over before this one finished.

        Raises:
            ConfigurationError: If user, token or server is missing.
        """
        self.session.config.require_credentials()
        self._generation += 1
        generation = self._generation
        async with self._lock:
            result = SyncResult()
            if generation != self._generation:
                logger.debug("Sync #%d superseded before it started", generation)
                result.superseded = True
                return result
            logger.info("Sync #%d started", generation)
            try:
                await self._sync(generation, result)
            except _Superseded:
                logger.info("Sync #%d superseded by a newer request", generation)
                result.superseded = True
            return result

    async def _sync(self, generation: int, result: SyncResult) -> None:
        session = self.session
        try:
            payload = await self.remote.list_projects(self._user)
        except RemoteError as exc:
            self._branch_failed(result, "projects", exc)
            return
        self._check(generation)

        names: list[str] = []
        for record in unwrap_results(payload):
            project = parse_project(record)
            if project is not None:
                logger.debug("Found project: %s", project.name)
                names.append(project.name)
        current = session.local_project if session.local_project in names else None

        session.tree.replace_projects(names)
        session.tree_view.expand_all()
        result.projects = len(session.tree)

        await self._gather(
            self._sync_project(generation, name, result)
            for name in session.tree.project_names
        )

        if current is not None:
            path = session.tree.node_path([current])
            if path is not None:
                session.tree_view.select(path)
                session.select_path(path)
                result.selected_project = current
        logger.info(
            "Sync #%d done: %d projects, %d snapshots, %d analyses, %d failures",
            generation, result.projects, result.snapshots, result.analyses,
            len(result.failures),
        )

    async def _sync_project(self, generation: int, project: str, result: SyncResult) -> None:
        await self._gather([
            self._sync_analysis_types(generation, project, result),
            self._sync_snapshots(generation, project, result),
        ])

    async def _sync_analysis_types(
        self, generation: int, project: str, result: SyncResult
    ) -> None:
        try:
            payload = await self.remote.get_project_analyses(self._user, project)
        except RemoteError as exc:
            self._branch_failed(result, f"analysis types of {project}", exc)
            return
        self._check(generation)
        registry = self.session.registry
        for record in unwrap_results(payload):
            profile = parse_profile(record)
            if profile is None:
                continue
            logger.debug("Project analysis profile: %s", profile.id)
            registry.record_analysis_type(project, profile.display_name, profile.id)
            registry.record_profile_descriptor(profile.id, profile)

    async def _sync_snapshots(self, generation: int, project: str, result: SyncResult) -> None:
        try:
            payload = await self.remote.list_snapshots(self._user, project)
        except RemoteError as exc:
            self._branch_failed(result, f"snapshots of {project}", exc)
            return
        self._check(generation)
        names: list[str] = []
        for record in unwrap_results(payload):
            snapshot = parse_snapshot(record)
            if snapshot is not None:
                names.append(snapshot.name)
        tree = self.session.tree
        if tree.find_by_path([project]) is None:
            logger.error("Internal error: no project node for %s", project)
            return
        added = tree.add_sorted_children([project], names)
        result.snapshots += len(added)
        await self._gather(
            self._sync_snapshot(generation, project, node.label, result)
            for node in added
        )

    async def _sync_snapshot(
        self, generation: int, project: str, snapshot: str, result: SyncResult
    ) -> None:
        try:
            payload = await self.remote.get_configuration(
                self._user, project, snapshot, CONFIG_FILE_NAME
            )
        except RemoteError as exc:
            logger.warning("No analysis configuration for %s/%s: %s", project, snapshot, exc)
            result.unconfigured.append(f"{project}/{snapshot}")
            return
        self._check(generation)
        registry = self.session.registry
        analyses = parse_configured_analyses(payload)
        for analysis in analyses:
            run = AnalysisRun(project, snapshot, analysis.display_name)
            logger.debug(
                "%s : id = %s, profile = %s",
                analysis.display_name, analysis.run_id, analysis.profile_id,
            )
            if analysis.profile_id is not None:
                registry.record_profile(run, analysis.profile_id)
            if analysis.run_id is not None:
                registry.record_run_id(run, analysis.run_id)
        tree = self.session.tree
        if tree.find_by_path([project, snapshot]) is None:
            logger.error("Internal error: no node for %s/%s", project, snapshot)
            return
        added = tree.add_sorted_children(
            [project, snapshot], [a.display_name for a in analyses]
        )
        result.analyses += len(added)

    # -- datasets -----------------------------------------------------------

    def outputs_for(self, selection: Selection | None = None) -> list[str]:
        """Sorted output ids of the selected analysis (the first is the default)."""
        run = (selection or self.session.selection).as_run()
        if run is None:
            return []
        descriptor = self.session.registry.descriptor_for_run(run)
        if descriptor is None:
            logger.debug("No profile information for %s", run)
            return []
        return list_output_ids(descriptor.outputs)

    async def refresh_dataset(
        self,
        output_id: str | None,
        query: DatasetQuery | None = None,
        selection: Selection | None = None,
    ) -> DatasetView:
        """Fetch one page of an output dataset for the selected analysis.

        Args:
            output_id: Output to display.
            query: Paging/filter values (defaults: start 0, count 50).
            selection: Defaults to the session's current selection.

        Returns:
            The dataset view. It is empty when the selection is incomplete
            (a notice is shown) or when the run, profile or output is not
            cached (silently: "no such output").
        """
        selection = selection or self.session.selection
        query = query or DatasetQuery()
        project, snapshot, analysis = selection.project, selection.snapshot, selection.analysis
        if project is None or snapshot is None or analysis is None or not output_id:
            self.session.notifier.report_error(_missing_selection(selection))
            return DatasetView(output_id=output_id)

        info = self.session.registry.lookup(project, snapshot, analysis)
        descriptor = self.session.registry.descriptor(info.profile_id)
        if descriptor is None or info.server_run_id is None:
            logger.debug("No cached run/profile for %s/%s/%s", project, snapshot, analysis)
            return DatasetView(output_id=output_id)
        layout = resolve_columns(descriptor.outputs, output_id)
        if layout.is_empty:
            return DatasetView(output_id=output_id)

        view = DatasetView(output_id=output_id, layout=layout)
        try:
            payload = await self.remote.get_output(
                self._user, project, snapshot, CONFIG_FILE_NAME, info.server_run_id,
                output_id, query.start, query.count, query.app_only,
            )
        except RemoteError as exc:
            self._report_connectivity(exc)
            return view
        for record in unwrap_results(payload):
            view.rows.append(extract_row(record, layout.attribute_ids))
        return view

    # -- analyses -----------------------------------------------------------

    def _require_project(self, project: str | None) -> str:
        project = project or self.session.selection.project
        if project is None:
            raise SelectionError("No project selected in the code tree.")
        return project

    def _require_snapshot(self, snapshot: str | None) -> str:
        snapshot = snapshot or self.session.selection.snapshot
        if snapshot is None:
            raise SelectionError("No snapshot selected in the code tree.")
        return snapshot

    def build_analysis_form(self, analysis_type: str, project: str | None = None) -> FormModel:
        """Build the options form for one of a project's analysis types.

        Raises:
            SelectionError: If no project is selected or the type is unknown.
        """
        project = self._require_project(project)
        registry = self.session.registry
        profile_id = registry.profile_for_type(project, analysis_type)
        descriptor = registry.descriptor(profile_id)
        if descriptor is None:
            raise SelectionError(f"No profile for analysis: {analysis_type}")
        return build_form(descriptor.options)

    async def start_analysis(
        self,
        analysis_type: str,
        form: FormModel,
        project: str | None = None,
        snapshot: str | None = None,
    ) -> SyncResult | None:
        """Start an analysis with the edited form, then re-sync.

        Returns:
            The follow-up ``SyncResult``, or None if the server could not be
            reached (a notice is shown).

        Raises:
            SelectionError: If project/snapshot are not selected or the
                analysis type is unknown.
        """
        project = self._require_project(project)
        snapshot = self._require_snapshot(snapshot)
        profile_id = self.session.registry.profile_for_type(project, analysis_type)
        if profile_id is None:
            raise SelectionError(f"No profile for analysis: {analysis_type}")
        options = serialize(form)
        logger.info("Starting %s on %s/%s with %s", analysis_type, project, snapshot, options)
        try:
            await self.remote.analyze(
                self._user, project, snapshot, CONFIG_FILE_NAME, profile_id, options
            )
        except RemoteError as exc:
            self._report_connectivity(exc)
            return None
        return await self.full_sync()

    async def lookup_line(
        self,
        code_file: str,
        line: int,
        project: str | None = None,
        snapshot: str | None = None,
    ) -> list[LineResult]:
        """Query the server for results about one source line.

        Raises:
            SelectionError: If project/snapshot are not selected.
        """
        project = self._require_project(project)
        snapshot = self._require_snapshot(snapshot)
        try:
            payload = await self.remote.get_symbols(
                self._user, project, snapshot, CONFIG_FILE_NAME, code_file, line
            )
        except RemoteError as exc:
            self._report_connectivity(exc)
            return []
        results: list[LineResult] = []
        for record in unwrap_results(payload):
            line_result = _parse_line_result(record)
            if line_result is not None:
                results.append(line_result)
        return results

    # -- posting ------------------------------------------------------------

    async def post_snapshot(
        self,
        poster: CliPoster,
        project_dir: Path,
        project_name: str,
        on_line: Callable[[str], None] | None = None,
    ) -> SyncResult:
        """Post a code snapshot on a worker thread, then run a full sync.

        Raises:
            PostError: If the bundled CLI is missing or fails; no sync runs.
        """
        self._posts_in_flight += 1
        try:
            await asyncio.to_thread(
                poster.post, project_dir, project_name, self.session.config, on_line
            )
        finally:
            self._posts_in_flight -= 1
        return await self.full_sync()


def _missing_selection(selection: Selection) -> str:
    """User-facing message naming the first missing selection component."""
    if selection.project is None:
        return "No project selected in the code tree."
    if selection.snapshot is None:
        return "No snapshot selected in the code tree."
    if selection.analysis is None:
        return "No analysis selected in the code tree."
    return "No output selected."


def _parse_line_result(record: dict[str, Any]) -> LineResult | None:
    symbol_id = record.get("symbolId")
    if symbol_id is None:
        symbol_id = "Analysis result" if record.get("analysisId") is not None else ""
    result_type = record.get("resultType", "")
    description = record.get("message", "")
    if isinstance(symbol_id, str) and isinstance(result_type, str) and isinstance(description, str):
        return LineResult(symbol_id, result_type, description)
    logger.warning("Bad line result data: %r", record)
    return None
