"""Shared fixtures for CLI tests.

The remote client factory is patched so every command talks to the
in-memory ``FakeRemote``; credentials come from command-line options and
the environment is cleared of ``ANALYSIS_MIRROR_*`` variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterator
from unittest.mock import patch

import pytest
from click.testing import CliRunner, Result

from analysis_mirror.cli.main import cli

CLEAN_ENV: dict[str, str | None] = {
    "ANALYSIS_MIRROR_SERVER": None,
    "ANALYSIS_MIRROR_USER": None,
    "ANALYSIS_MIRROR_TOKEN": None,
}


@pytest.fixture
def runner() -> CliRunner:
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def patched_remote(remote: Any) -> Iterator[Any]:
    """Route ``_get_remote`` to the canned ``FakeRemote``."""
    with patch("analysis_mirror.cli.runtime._get_remote", return_value=remote) as factory:
        yield factory


@pytest.fixture
def invoke(
    runner: CliRunner, tmp_path: Path, patched_remote: Any
) -> Callable[..., Result]:
    """Invoke the CLI as user ``alice`` against the fake remote."""

    def _invoke(*args: str, credentials: bool = True) -> Result:
        base = ["--config", str(tmp_path / "missing.yaml")]
        if credentials:
            base += ["--user", "alice", "--token", "secret"]
        return runner.invoke(cli, [*base, *args], env=CLEAN_ENV)

    return _invoke
