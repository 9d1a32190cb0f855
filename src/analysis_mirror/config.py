"""Server configuration for analysis-mirror.

A ``ServerConfig`` carries the server address and the (user, token) pair
used for every remote call, plus the location of the bundled CLI used to
post code snapshots.

Values are resolved in three layers, each overriding the previous one:

    1. Defaults (``localhost:8080``, empty credentials).
    2. A YAML file (``~/.config/analysis-mirror/config.yaml`` by default).
    3. Environment variables ``ANALYSIS_MIRROR_SERVER``,
       ``ANALYSIS_MIRROR_USER`` and ``ANALYSIS_MIRROR_TOKEN``.

The CLI applies its own flags on top via ``ServerConfig.with_overrides``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from analysis_mirror.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_SERVER: str = "localhost:8080"

DEFAULT_CLI_ID: str = "cli-4.0.69"

DEFAULT_TIMEOUT: float = 30.0

DEFAULT_CONFIG_PATH: Path = Path.home() / ".config" / "analysis-mirror" / "config.yaml"

ENV_SERVER: str = "ANALYSIS_MIRROR_SERVER"
ENV_USER: str = "ANALYSIS_MIRROR_USER"
ENV_TOKEN: str = "ANALYSIS_MIRROR_TOKEN"


# ---------------------------------------------------------------------------
# ServerConfig
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ServerConfig:
    """Connection settings for the remote analysis service.

    Attributes:
        server: Server address, with or without scheme
            (e.g. ``localhost:8080`` or ``https://host/base``).
        user: User name sent with every request.
        token: API key or password paired with ``user``.
        cli_bundle: Path to the zipped CLI used for posting snapshots.
        cli_id: Name of the top-level directory inside ``cli_bundle``.
        timeout: Request timeout in seconds.
    """

    server: str = DEFAULT_SERVER
    user: str = ""
    token: str = ""
    cli_bundle: str | None = None
    cli_id: str = DEFAULT_CLI_ID
    timeout: float = DEFAULT_TIMEOUT

    @property
    def base_url(self) -> str:
        """Server address with an ``http://`` scheme added when missing."""
        server = self.server.rstrip("/")
        if not server.startswith(("http://", "https://")):
            server = f"http://{server}"
        return server

    @property
    def host(self) -> str:
        """Host name part of the server address."""
        return urlsplit(self.base_url).hostname or ""

    @property
    def port(self) -> str:
        """Port part of the server address (scheme default when absent)."""
        parts = urlsplit(self.base_url)
        if parts.port is not None:
            return str(parts.port)
        return "443" if parts.scheme == "https" else "80"

    @property
    def base_path(self) -> str:
        """Path prefix under which the server is mounted ("" at the root)."""
        return urlsplit(self.base_url).path.rstrip("/")

    def require_credentials(self) -> None:
        """Check that user, token and server are all set.

        Raises:
            ConfigurationError: Naming the first missing setting.
        """
        if not self.user:
            raise ConfigurationError("No user found, open Project Settings to diagnose.")
        if not self.token:
            raise ConfigurationError(
                "No API key / password found, open Project Settings to diagnose."
            )
        if not self.server:
            raise ConfigurationError("No server configured, open Project Settings to diagnose.")

    def web_path(self, project: str | None = None, snapshot: str | None = None) -> str:
        """Return a URL landing the user at the right place in the web UI.

        The project is only appended for a known user, and the snapshot only
        under a project.
        """
        path = self.base_url
        if self.user:
            path += f"#/u/{self.user}"
            if project is not None:
                path += f"/projects/{project}"
                if snapshot is not None:
                    path += f"/snapshots/{snapshot}"
        return path

    def with_overrides(self, **overrides: Any) -> ServerConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_FILE_KEYS: frozenset[str] = frozenset(
    {"server", "user", "token", "cli_bundle", "cli_id", "timeout"}
)


def load_config(
    path: Path | None = None,
    *,
    environ: dict[str, str] | None = None,
) -> ServerConfig:
    """Load configuration from YAML and the environment.

    Args:
        path: YAML file to read. Defaults to ``DEFAULT_CONFIG_PATH``; a
            missing file is not an error.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        The resolved ``ServerConfig``.

    Raises:
        ConfigurationError: If the file exists but is not a YAML mapping.
    """
    config_path = path if path is not None else DEFAULT_CONFIG_PATH
    values: dict[str, Any] = {}

    if config_path.is_file():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid configuration file {config_path}: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping"
            )
        for key, value in data.items():
            if key in _FILE_KEYS:
                values[key] = value
            else:
                logger.warning("Ignoring unknown configuration key: %s", key)
        for key in ("server", "user", "token", "cli_bundle", "cli_id"):
            if values.get(key) is not None:
                values[key] = str(values[key])
        if "timeout" in values:
            try:
                values["timeout"] = float(values["timeout"])
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"Invalid timeout in {config_path}: {values['timeout']!r}"
                ) from exc
    else:
        logger.debug("No configuration file at %s, using defaults", config_path)

    env = os.environ if environ is None else environ
    for key, var in (("server", ENV_SERVER), ("user", ENV_USER), ("token", ENV_TOKEN)):
        if env.get(var):
            values[key] = env[var]

    return ServerConfig(**values)
