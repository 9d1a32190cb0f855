"""Abstract contract for the remote analysis service.

Defines the ``RemoteAnalysisClient`` abstract base class that the sync
coordinator depends on. The concrete HTTP implementation lives in
``analysis_mirror.remote.http_client``; tests substitute in-memory fakes.

All operations are implicitly authenticated with the client's (user, token)
pair and raise ``RemoteError`` when the service cannot be reached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

# Name of the analysis configuration file shared by every snapshot-level call.
CONFIG_FILE_NAME: str = "clyze.json"


class RemoteAnalysisClient(ABC):
    """Asynchronous client for the project/snapshot/analysis service."""

    @abstractmethod
    async def list_projects(self, user: str) -> dict[str, Any] | None:
        """List the user's projects: ``{results: [{name, ...}]}``."""

    @abstractmethod
    async def list_snapshots(self, user: str, project: str) -> dict[str, Any] | None:
        """List a project's snapshots: ``{results: [{displayName, ...}]}``."""

    @abstractmethod
    async def get_project_analyses(self, user: str, project: str) -> dict[str, Any] | None:
        """List the analysis types (profiles) a project supports.

        Returns ``{results: [{displayName, id, options, outputs, ...}]}``
        where ``id`` is the profile id.
        """

    @abstractmethod
    async def get_configuration(
        self, user: str, project: str, snapshot: str, config_file: str
    ) -> dict[str, Any] | None:
        """Return a snapshot's configuration: ``{analyses: [{displayName, id, profile}]}``.

        May return ``None`` or raise when the snapshot has no data yet.
        """

    @abstractmethod
    async def analyze(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        profile_id: str,
        options: list[str],
    ) -> None:
        """Start an analysis run. Fire-and-forget: no response is consumed."""

    @abstractmethod
    async def get_output(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        run_id: str,
        output_id: str,
        start: int,
        count: int,
        app_only: bool,
    ) -> dict[str, Any] | None:
        """Fetch one page of an output dataset: ``{results: [{<attr>: value}]}``."""

    @abstractmethod
    async def get_symbols(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        code_file: str,
        line: int,
    ) -> dict[str, Any] | None:
        """Fetch results about one source line.

        Returns ``{results: [{symbolId?, analysisId?, resultType, message}]}``.
        """

    async def aclose(self) -> None:
        """Release any held connections (no-op by default)."""
