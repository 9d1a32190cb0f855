"""Tests for the rich logging setup."""

from __future__ import annotations

import logging
from typing import Iterator

import pytest
from rich.logging import RichHandler

from analysis_mirror.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    names = ("analysis_mirror", "httpx", "httpcore")
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


class TestSetupLogging:

    def test_default_is_warning(self) -> None:
        setup_logging()
        assert logging.getLogger("analysis_mirror").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
        assert any(isinstance(h, RichHandler) for h in logging.getLogger().handlers)

    def test_verbose_enables_debug(self) -> None:
        setup_logging(verbose=True)
        assert logging.getLogger("analysis_mirror").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_quiet_wins_over_verbose(self) -> None:
        setup_logging(verbose=True, quiet=True)
        assert logging.getLogger("analysis_mirror").level == logging.ERROR

    def test_single_handler_after_repeated_calls(self) -> None:
        setup_logging()
        setup_logging()
        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
