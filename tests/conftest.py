"""Shared fixtures for analysis-mirror tests.

``FakeRemote`` is an in-memory ``RemoteAnalysisClient``: it serves canned
listings, records every call, and raises ``RemoteError`` for any call
registered with ``fail``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable

import pytest

from analysis_mirror.config import ServerConfig
from analysis_mirror.core import LoggingNotifier, SessionContext, SyncCoordinator
from analysis_mirror.exceptions import RemoteError
from analysis_mirror.remote.base import RemoteAnalysisClient


# ---------------------------------------------------------------------------
# Canned server data
# ---------------------------------------------------------------------------

POINTS_TO_PROFILE: dict[str, Any] = {
    "id": "p1",
    "displayName": "Points-to",
    "options": [
        {"id": "platform", "name": "Platform", "validValues": ["java_8", "android"],
         "defaultValue": "java_8"},
        {"id": "reflection", "name": "Reflection", "isBoolean": True, "defaultValue": "false"},
        {"id": "timeout", "name": "Timeout", "defaultValue": "90"},
        {"id": "extras", "name": "Extras", "validValues": ["a", "b", "c"],
         "multipleValues": True},
    ],
    "outputs": [
        {"id": "o1", "attributes": [
            {"id": "f", "displayName": "File"},
            {"id": "l", "displayName": "Line"},
        ]},
        {"id": "calls", "attributes": [{"id": "caller", "displayName": "Caller"}]},
    ],
}


class FakeRemote(RemoteAnalysisClient):
    """In-memory remote service.

    Args:
        projects: Project names, in server order.
        snapshots: project -> snapshot names.
        profiles: project -> analysis profile records.
        configurations: (project, snapshot) -> configuration document.
        outputs: (run id, output id) -> result records.
        symbols: (code file, line) -> line result records.
    """

    def __init__(
        self,
        projects: list[str] | None = None,
        snapshots: dict[str, list[str]] | None = None,
        profiles: dict[str, list[dict[str, Any]]] | None = None,
        configurations: dict[tuple[str, str], Any] | None = None,
        outputs: dict[tuple[str, str], list[dict[str, Any]]] | None = None,
        symbols: dict[tuple[str, int], list[dict[str, Any]]] | None = None,
    ) -> None:
        self.projects = projects or []
        self.snapshots = snapshots or {}
        self.profiles = profiles or {}
        self.configurations = configurations or {}
        self.outputs = outputs or {}
        self.symbols = symbols or {}
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False
        self._failures: set[tuple[Any, ...]] = set()
        self._gates: dict[str, asyncio.Event] = {}

    # -- test controls ------------------------------------------------------

    def fail(self, method: str, *key: Any) -> None:
        """Make ``method`` raise ``RemoteError`` (only for ``key`` if given)."""
        self._failures.add((method, *key))

    def gate(self, method: str) -> asyncio.Event:
        """Make ``method`` wait until the returned event is set."""
        event = asyncio.Event()
        self._gates[method] = event
        return event

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == method]

    async def _enter(self, method: str, *key: Any) -> None:
        self.calls.append((method, *key))
        gate = self._gates.get(method)
        if gate is not None:
            await gate.wait()
        if (method,) in self._failures or (method, *key) in self._failures:
            raise RemoteError(f"{method} failed")

    @staticmethod
    def _results(records: Iterable[Any]) -> dict[str, Any]:
        return {"results": list(records)}

    # -- RemoteAnalysisClient -----------------------------------------------

    async def list_projects(self, user: str) -> dict[str, Any] | None:
        await self._enter("list_projects")
        return self._results({"name": name} for name in self.projects)

    async def list_snapshots(self, user: str, project: str) -> dict[str, Any] | None:
        await self._enter("list_snapshots", project)
        return self._results({"displayName": s} for s in self.snapshots.get(project, []))

    async def get_project_analyses(self, user: str, project: str) -> dict[str, Any] | None:
        await self._enter("get_project_analyses", project)
        return self._results(self.profiles.get(project, []))

    async def get_configuration(
        self, user: str, project: str, snapshot: str, config_file: str
    ) -> dict[str, Any] | None:
        await self._enter("get_configuration", project, snapshot)
        return self.configurations.get((project, snapshot))

    async def analyze(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        profile_id: str,
        options: list[str],
    ) -> None:
        await self._enter("analyze", project, snapshot, profile_id, tuple(options))

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
        await self._enter(
            "get_output", project, snapshot, run_id, output_id, start, count, app_only
        )
        return self._results(self.outputs.get((run_id, output_id), []))

    async def get_symbols(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        code_file: str,
        line: int,
    ) -> dict[str, Any] | None:
        await self._enter("get_symbols", project, snapshot, code_file, line)
        return self._results(self.symbols.get((code_file, line), []))

    async def aclose(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def make_remote() -> FakeRemote:
    """Two projects (listed out of order), one analyzed snapshot."""
    return FakeRemote(
        projects=["proj2", "proj1"],
        snapshots={"proj1": ["s2", "s1"], "proj2": ["s1"]},
        profiles={"proj1": [POINTS_TO_PROFILE], "proj2": []},
        configurations={
            ("proj1", "s1"): {"analyses": [
                {"displayName": "Points-to #1", "id": "run-42", "profile": "p1"},
            ]},
            ("proj1", "s2"): {"analyses": []},
            ("proj2", "s1"): None,
        },
        outputs={("run-42", "o1"): [{"f": "A.java"}, {"f": "B.java", "l": 7}]},
        symbols={("src/Main.java", 12): [
            {"symbolId": "<Main: void main()>/x", "resultType": "points-to",
             "message": "may point to new Foo"},
            {"analysisId": "run-42", "resultType": "warning", "message": "unused"},
        ]},
    )


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(server="localhost:8080", user="alice", token="secret")


@pytest.fixture
def remote() -> FakeRemote:
    return make_remote()


@pytest.fixture
def session(config: ServerConfig) -> SessionContext:
    return SessionContext(config, notifier=LoggingNotifier())


@pytest.fixture
def coordinator(session: SessionContext, remote: FakeRemote) -> SyncCoordinator:
    return SyncCoordinator(session, remote)


@pytest.fixture
def remote_factory() -> Callable[[], FakeRemote]:
    """Builds fresh copies of the canned remote."""
    return make_remote
