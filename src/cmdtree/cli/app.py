"""CLI application entry point and command routing for cmdtree.

This module is the **sole error boundary** for the entire application.
It catches :class:`~cmdtree.exceptions.CmdtreeError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* Diagnostics go to the Rich stderr console; stdout carries only what
  the user asked for (help text, completion scripts, script output).
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from cmdtree.cli import exit_codes
from cmdtree.cli.console import LOG_LEVELS, configure_logging, console, escape_markup
from cmdtree.core.dispatch_service import DEFAULT_SHELL
from cmdtree.core.matcher import split_trailing
from cmdtree.exceptions import ArgumentParseExit, CmdtreeError
from cmdtree.version import __version__

logger = logging.getLogger(__name__)

ARGS_JSON_VARIABLE: str = "CMDTREE_ARGS_JSON"
"""Variable carrying all exported arguments as JSON with ``--export-json``."""


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _env_log_level() -> str | None:
    level = os.environ.get("CMDTREE_LOG_LEVEL", "").strip().lower()
    return level if level in LOG_LEVELS else None


def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    The CLI supports:
    * ``cmdtree run --config PATH [-- ARGS...]``       — run a configured command
    * ``cmdtree completions SHELL --config PATH``      — print a completion script
    * ``cmdtree check --config PATH``                  — validate a configuration
    * ``cmdtree --version``
    """
    parser = argparse.ArgumentParser(
        prog="cmdtree",
        description="Run command-line interfaces declared in a configuration file.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=LOG_LEVELS,
        default=_env_log_level(),
        help="Emit operational log events at this level (env: CMDTREE_LOG_LEVEL).",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    run = subparsers.add_parser(
        "run",
        help="Run a command declared in a configuration file.",
        description=(
            "Match ARGS against the configured command tree and run the "
            "script of the command they select."
        ),
        usage="%(prog)s [-h] -c PATH [--shell SHELL] [--export-json] [-- ARGS ...]",
    )
    run.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Configuration file (.toml, .yaml, .yml or .json).",
    )
    run.add_argument(
        "--shell",
        default=os.environ.get("CMDTREE_SHELL") or DEFAULT_SHELL,
        help="Shell used to execute scripts (env: CMDTREE_SHELL, default: sh).",
    )
    run.add_argument(
        "--export-json",
        action="store_true",
        help=f"Also export all arguments as JSON in ${ARGS_JSON_VARIABLE}.",
    )

    completions = subparsers.add_parser(
        "completions",
        help="Print a shell completion script for a configured command.",
    )
    completions.add_argument(
        "shell",
        metavar="SHELL",
        help="Target shell: bash, zsh or tcsh (fish, elvish and powershell are not supported).",
    )
    completions.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Configuration file.",
    )

    check = subparsers.add_parser(
        "check",
        help="Validate a configuration file and show its command tree.",
    )
    check.add_argument(
        "-c",
        "--config",
        required=True,
        metavar="PATH",
        help="Configuration file.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_run(
    config_path: str,
    shell: str,
    passthrough: Sequence[str],
    *,
    export_json: bool = False,
) -> int:
    """Run the command selected by *passthrough*.

    Flow:
    1. Load the configuration and compile the command tree.
    2. Match *passthrough* against the tree (help/version/usage exit here).
    3. Resolve the invoked leaf.
    4. Print help if the leaf has no script, else export its arguments
       and dispatch the script.
    """
    from cmdtree.core.compiler import compile_tree
    from cmdtree.core.dispatch_service import DispatchService
    from cmdtree.core.exporter import to_env_record, to_json_record
    from cmdtree.core.matcher import match
    from cmdtree.core.resolver import resolve
    from cmdtree.infra.config_file import load as load_config
    from cmdtree.infra.subprocess_runner import SubprocessRunner

    tree = compile_tree(load_config(config_path))

    try:
        matches = match(tree, passthrough)
    except ArgumentParseExit as exc:
        return exc.status

    invocation = resolve(tree, matches)
    command_path = tree.path(invocation.command.index)

    if invocation.run is None:
        logger.info("Command '%s' has no script; showing help", command_path)
        invocation.command.print_help()
        return exit_codes.NO_SCRIPT

    arguments = invocation.config.arguments
    env = to_env_record(arguments, invocation.matches)
    if export_json:
        env[ARGS_JSON_VARIABLE] = to_json_record(arguments, invocation.matches)

    service = DispatchService(SubprocessRunner())
    return service.execute(shell, invocation.run, env, command=command_path)


def _handle_completions(shell: str, config_path: str) -> int:
    """Write the completion script for *config_path* to stdout."""
    from cmdtree.core.compiler import compile_tree
    from cmdtree.infra.completions import generate
    from cmdtree.infra.config_file import load as load_config

    tree = compile_tree(load_config(config_path))
    sys.stdout.write(generate(tree, shell))
    return exit_codes.SUCCESS


def _handle_check(config_path: str) -> int:
    """Dispatch the ``check`` command."""
    from cmdtree.cli.check import run_check

    return run_check(config_path)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the cmdtree CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    if argv is None:
        argv = sys.argv[1:]
    head, passthrough = split_trailing(argv)

    parser = _build_parser()
    args = parser.parse_args(head)
    configure_logging(args.log_level)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "run":
        return _handle_run(
            args.config,
            args.shell,
            passthrough or [],
            export_json=args.export_json,
        )

    if passthrough is not None:
        parser.error(f"'--' arguments are only accepted by 'run', not '{args.command}'")

    if args.command == "completions":
        return _handle_completions(args.shell, args.config)

    return _handle_check(args.config)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except CmdtreeError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape_markup(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
