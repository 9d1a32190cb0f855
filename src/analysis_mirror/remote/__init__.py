"""Remote analysis service access.

Public API::

    from analysis_mirror.remote import RemoteAnalysisClient, CONFIG_FILE_NAME
    from analysis_mirror.remote.http_client import HttpRemoteClient
    from analysis_mirror.remote.records import unwrap_results
"""

from __future__ import annotations

from analysis_mirror.remote.base import CONFIG_FILE_NAME, RemoteAnalysisClient

__all__ = [
    "CONFIG_FILE_NAME",
    "RemoteAnalysisClient",
]
