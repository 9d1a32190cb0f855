"""HTTP implementation of the remote analysis service contract.

Provides a thin wrapper around ``httpx.AsyncClient`` with standardised
timeouts, user-agent headers, basic authentication and error handling.
Every failure (timeout, transport error, HTTP error status, invalid JSON)
is logged and raised as ``RemoteError`` so that callers can decide whether
the failure is fatal to their step.

Usage::

    async with HttpRemoteClient.from_config(config) as remote:
        projects = await remote.list_projects(config.user)
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from analysis_mirror import __version__
from analysis_mirror.config import DEFAULT_TIMEOUT, ServerConfig
from analysis_mirror.exceptions import RemoteError
from analysis_mirror.remote.base import RemoteAnalysisClient

logger = logging.getLogger(__name__)

# User-Agent sent with every request.
USER_AGENT: str = f"analysis-mirror/{__version__}"

API_PREFIX: str = "/api/v1"


def _seg(value: str) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(value, safe="")


class HttpRemoteClient(RemoteAnalysisClient):
    """``RemoteAnalysisClient`` speaking JSON over HTTP.

    Args:
        base_url: Server root (``http://host:port/base``).
        user: User name for basic authentication.
        token: API key or password for basic authentication.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str,
        user: str,
        token: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + API_PREFIX,
            auth=(user, token),
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: ServerConfig) -> HttpRemoteClient:
        """Build a client from a ``ServerConfig``."""
        return cls(config.base_url, config.user, config.token, timeout=config.timeout)

    async def __aenter__(self) -> HttpRemoteClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # -- transport ----------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: Any = None,
        expect_json: bool = True,
    ) -> Any:
        """Issue a request and parse the JSON response.

        Raises:
            RemoteError: On HTTP errors, timeouts, or invalid JSON.
        """
        try:
            resp = await self._client.request(method, path, params=params, json=json_body)
            resp.raise_for_status()
            if not expect_json or not resp.content:
                return None
            return resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("Timeout on %s %s", method, path)
            raise RemoteError(f"Timeout contacting server ({method} {path})") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("HTTP %d from %s %s", exc.response.status_code, method, path)
            raise RemoteError(
                f"Server returned HTTP {exc.response.status_code} for {method} {path}"
            ) from exc
        except (httpx.RequestError, ValueError) as exc:
            logger.warning("Request error for %s %s: %s", method, path, exc)
            raise RemoteError(f"Could not reach server: {exc}") from exc

    @staticmethod
    def _project_path(user: str, project: str | None = None) -> str:
        path = f"/users/{_seg(user)}/projects"
        if project is not None:
            path += f"/{_seg(project)}"
        return path

    def _config_path(self, user: str, project: str, snapshot: str, config_file: str) -> str:
        return (
            f"{self._project_path(user, project)}/snapshots/{_seg(snapshot)}"
            f"/configs/{_seg(config_file)}"
        )

    # -- operations ---------------------------------------------------------

    async def list_projects(self, user: str) -> dict[str, Any] | None:
        return await self._request("GET", self._project_path(user))

    async def list_snapshots(self, user: str, project: str) -> dict[str, Any] | None:
        return await self._request("GET", f"{self._project_path(user, project)}/snapshots")

    async def get_project_analyses(self, user: str, project: str) -> dict[str, Any] | None:
        return await self._request("GET", f"{self._project_path(user, project)}/analyses")

    async def get_configuration(
        self, user: str, project: str, snapshot: str, config_file: str
    ) -> dict[str, Any] | None:
        return await self._request("GET", self._config_path(user, project, snapshot, config_file))

    async def analyze(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        profile_id: str,
        options: list[str],
    ) -> None:
        await self._request(
            "POST",
            f"{self._config_path(user, project, snapshot, config_file)}/analyze",
            json_body={"profile": profile_id, "options": list(options)},
            expect_json=False,
        )

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
        path = (
            f"{self._config_path(user, project, snapshot, config_file)}"
            f"/analyses/{_seg(run_id)}/outputs/{_seg(output_id)}"
        )
        params = {
            "start": str(start),
            "count": str(count),
            "appOnly": "true" if app_only else "false",
        }
        return await self._request("GET", path, params=params)

    async def get_symbols(
        self,
        user: str,
        project: str,
        snapshot: str,
        config_file: str,
        code_file: str,
        line: int,
    ) -> dict[str, Any] | None:
        path = f"{self._config_path(user, project, snapshot, config_file)}/symbols"
        return await self._request("GET", path, params={"file": code_file, "line": str(line)})
