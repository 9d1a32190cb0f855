"""Post a code snapshot by running the bundled CLI tool.

The CLI ships as a zip archive whose top-level directory is named after
its version (``cli-4.0.69``). Posting extracts it to a temporary
directory and runs::

    <cli> --dir <path> --host <h> --port <p> --server-base-path <bp>
          --user <u> --api-key <k> --project <name>

stdout is decoded as UTF-8 (undecodable bytes replaced) and streamed line
by line to a callback. A non-zero exit status is raised as ``PostError``
after the output has been streamed. If the callback raises, the CLI
process is killed and reaped before the error propagates.

``CliPoster.post`` blocks on subprocess I/O; callers on an event loop run
it on a worker thread (see ``SyncCoordinator.post_snapshot``).
"""

from __future__ import annotations

import logging
import platform
import subprocess
import tempfile
import zipfile
from pathlib import Path
from typing import Callable

from analysis_mirror.config import ServerConfig
from analysis_mirror.exceptions import PostError

logger = logging.getLogger(__name__)


def _launcher_name() -> str:
    return "cli.bat" if platform.system().lower() == "windows" else "cli"


def build_command(
    cli: Path, project_dir: Path, config: ServerConfig, project_name: str
) -> list[str]:
    """Assemble the CLI invocation for posting ``project_dir``."""
    return [
        str(cli),
        "--dir", str(project_dir),
        "--host", config.host,
        "--port", config.port,
        "--server-base-path", config.base_path,
        "--user", config.user,
        "--api-key", config.token,
        "--project", project_name,
    ]


class CliPoster:
    """Runs the bundled CLI to post code snapshots.

    Args:
        bundle: Path to the zipped CLI distribution.
        cli_id: Name of the distribution's top-level directory.
    """

    def __init__(self, bundle: Path | None, cli_id: str) -> None:
        self.bundle = bundle
        self.cli_id = cli_id

    @classmethod
    def from_config(cls, config: ServerConfig) -> CliPoster:
        bundle = Path(config.cli_bundle).expanduser() if config.cli_bundle else None
        return cls(bundle, config.cli_id)

    def extract(self, target: Path) -> Path:
        """Extract the bundle under ``target`` and return the launcher path.

        Raises:
            PostError: If the bundle or the launcher inside it is missing.
        """
        if self.bundle is None or not self.bundle.is_file():
            raise PostError(f"Could not find bundled CLI tool: {self.bundle}")
        try:
            with zipfile.ZipFile(self.bundle) as archive:
                archive.extractall(target)
        except zipfile.BadZipFile as exc:
            raise PostError(f"Bundled CLI is not a zip archive: {self.bundle}") from exc
        launcher = target / self.cli_id / "bin" / _launcher_name()
        if not launcher.is_file():
            raise PostError(f"No CLI launcher at {launcher}")
        launcher.chmod(launcher.stat().st_mode | 0o111)
        logger.info("Extracted bundled CLI %s -> %s", self.bundle, target)
        return launcher

    def post(
        self,
        project_dir: Path,
        project_name: str,
        config: ServerConfig,
        on_line: Callable[[str], None] | None = None,
    ) -> None:
        """Post ``project_dir`` as a new snapshot of ``project_name``.

        Raises:
            PostError: If the CLI cannot be extracted, started, or exits
                with a non-zero status.
        """
        with tempfile.TemporaryDirectory(prefix="cli") as tmp:
            launcher = self.extract(Path(tmp))
            cmd = build_command(launcher, project_dir, config, project_name)
            logger.info("Running command: %s", [c if c != config.token else "***" for c in cmd])
            try:
                process = subprocess.Popen(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    encoding="utf-8",
                    errors="replace",
                )
            except OSError as exc:
                raise PostError(f"Could not start CLI: {exc}") from exc
            try:
                with process.stdout:  # type: ignore[union-attr]
                    for line in process.stdout:  # type: ignore[union-attr]
                        line = line.rstrip("\n")
                        logger.debug("cli: %s", line)
                        if on_line is not None:
                            on_line(line)
            except BaseException:
                process.kill()
                process.wait()
                raise
            returncode = process.wait()
        if returncode != 0:
            raise PostError(f"CLI exited with status {returncode}")
