"""Shared pytest fixtures and configuration for the cmdtree test suite.

Guidelines
----------
* No network access in any test.
* Process creation is mocked at the ``ProcessRunner`` seam, except in
  end-to-end tests which need a POSIX ``sh``.
* Config files are written to ``tmp_path`` — never to the repository.
* Tests must not depend on the caller's ``CMDTREE_*`` environment.
"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _clean_cmdtree_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CMDTREE_SHELL", raising=False)
    monkeypatch.delenv("CMDTREE_LOG_LEVEL", raising=False)
    # Keep argparse help on one line per entry.
    monkeypatch.setenv("COLUMNS", "200")


@pytest.fixture(autouse=True)
def _reset_cmdtree_logger():
    yield
    logger = logging.getLogger("cmdtree")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Return a factory writing dedented *text* to a config file."""

    def _write(text: str, suffix: str = ".toml", name: str = "cmdtree") -> Path:
        path = tmp_path / f"{name}{suffix}"
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write
