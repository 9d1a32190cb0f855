"""Shared plumbing for the analysis-mirror commands.

Every command runs inside one event loop: build a remote client and a
fresh ``SessionContext``, run a full sync, then hand the coordinator to
the command body. ``AnalysisMirrorError`` is turned into an error
message and a non-zero exit status here, so command bodies just raise.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import click

from analysis_mirror.cli.output import ConsoleNotifier
from analysis_mirror.config import ServerConfig
from analysis_mirror.core import SessionContext, SyncCoordinator, SyncResult
from analysis_mirror.exceptions import AnalysisMirrorError, ConfigurationError
from analysis_mirror.remote.base import RemoteAnalysisClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

CommandBody = Callable[[SyncCoordinator, SyncResult], Awaitable[T]]


@dataclass
class CliState:
    """Objects shared by the group and its commands via ``click.Context``."""

    config: ServerConfig


def _run_async(coro: Awaitable[T]) -> T:
    """Run an async coroutine in a synchronous context.

    Args:
        coro: Awaitable coroutine to execute.

    Returns:
        The coroutine's return value.
    """
    return asyncio.run(coro)  # type: ignore[arg-type]


def _get_remote(config: ServerConfig) -> RemoteAnalysisClient:
    """Create the remote client for ``config``."""
    from analysis_mirror.remote.http_client import HttpRemoteClient

    return HttpRemoteClient.from_config(config)


async def _with_coordinator(
    config: ServerConfig, body: CommandBody[T], local_project: str | None
) -> T:
    config.require_credentials()
    remote = _get_remote(config)
    session = SessionContext(config, local_project=local_project, notifier=ConsoleNotifier())
    coordinator = SyncCoordinator(session, remote)
    try:
        result = await coordinator.full_sync()
        return await body(coordinator, result)
    finally:
        await remote.aclose()


def run_synced(
    ctx: click.Context, body: CommandBody[T], local_project: str | None = None
) -> T:
    """Run ``body`` after a full sync, mapping library errors to exit codes.

    Configuration errors exit with status 2, every other
    ``AnalysisMirrorError`` with status 1.
    """
    state = ctx.find_object(CliState)
    if state is None:
        raise click.UsageError("analysis-mirror commands must run under the main group")
    try:
        return _run_async(_with_coordinator(state.config, body, local_project))
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    except AnalysisMirrorError as exc:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(exc)) from exc


def require_project(coordinator: SyncCoordinator, project: str) -> None:
    """Fail with a click error if ``project`` is not on the server."""
    if coordinator.session.tree.find_by_path([project]) is None:
        raise click.ClickException(f"Unknown project: {project}")
