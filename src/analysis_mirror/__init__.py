"""analysis-mirror: Local mirror and schema interpreter for a remote code-analysis service."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
