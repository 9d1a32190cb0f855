"""Route analysis-mirror logging through rich.

Library modules only create ``logging.getLogger(__name__)`` loggers. The
CLI calls ``setup_logging`` once per invocation; log records go to stderr
so that ``--format json`` output on stdout stays parseable.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

# Third-party loggers that are chatty at INFO (httpx logs every request).
_NOISY_LOGGERS = ("httpx", "httpcore")


def _level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    return logging.DEBUG if verbose else logging.WARNING


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Install a RichHandler on the root logger.

    ``quiet`` wins over ``verbose``. Timestamps and source paths are only
    shown in verbose mode.
    """
    level = _level(verbose, quiet)
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)
    logging.getLogger("analysis_mirror").setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
