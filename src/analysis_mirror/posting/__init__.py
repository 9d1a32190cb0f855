"""Posting code snapshots to the analysis service through the bundled CLI."""

from __future__ import annotations

from analysis_mirror.posting.poster import CliPoster, build_command

__all__ = ["CliPoster", "build_command"]
