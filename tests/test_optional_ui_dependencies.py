"""Regression tests for the optional Rich dependency.

These tests verify bootstrap commands, ``check`` and the error boundary
keep working with plain stderr output when Rich cannot be imported.
"""

from __future__ import annotations

import sys

import pytest

from cmdtree.cli import exit_codes
from cmdtree.cli.app import cli, main


def _hide_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "rich", None)
    monkeypatch.setitem(sys.modules, "rich.console", None)
    monkeypatch.setitem(sys.modules, "rich.logging", None)
    monkeypatch.setitem(sys.modules, "rich.markup", None)
    monkeypatch.setitem(sys.modules, "rich.tree", None)


def test_help_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_version_works_without_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    _hide_rich(monkeypatch)

    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0


def test_check_falls_back_to_plain_text(
    monkeypatch: pytest.MonkeyPatch,
    write_config,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)
    path = write_config(
        """\
        name = "ops"

        [subcommands.deploy]
        run = "echo deploy"
        args = [{ id = "target", long = "target", short = "t", required = true }]
        """,
    )

    assert main(["check", "-c", str(path)]) == exit_codes.SUCCESS

    err = capsys.readouterr().err
    assert "ops  [group]" in err
    assert "  deploy  [run: echo deploy]" in err
    assert "--target/-t → target (required)" in err
    assert "Configuration is valid." in err


def test_logging_works_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    write_config,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)
    path = write_config('name = "ops"\n')

    assert main(["--log-level", "info", "run", "-c", str(path)]) == exit_codes.NO_SCRIPT
    assert "INFO cmdtree.cli.app: Command 'ops' has no script" in capsys.readouterr().err


def test_error_boundary_without_rich(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _hide_rich(monkeypatch)
    monkeypatch.setattr(
        sys, "argv", ["cmdtree", "run", "-c", str(tmp_path / "missing.toml")],
    )

    with pytest.raises(SystemExit) as exc_info:
        cli()

    assert exc_info.value.code == exit_codes.GENERAL_ERROR
    err = capsys.readouterr().err
    assert "[bold red]Error:[/bold red] Failed to load config file" in err
