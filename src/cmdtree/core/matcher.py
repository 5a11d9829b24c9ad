"""Argument matching — runs argv through the compiled parsers.

The parsing engine itself is ``argparse``; this module only feeds it and
turns the flat namespace it produces back into a nested
:class:`~cmdtree.core.models.MatchResult`, one level per invoked
command.

Value precedence for every argument is command line, then the
environment variable named by ``env`` (ignored when empty), then
``default_value``.  ``required`` and ``requires`` are enforced after
that precedence has been applied, through the owning parser's
``error()`` so the usage line and exit status match argparse's own.

Tokens after the first ``--`` go to the invoked command's ``last``
argument when it declares one; otherwise ``--`` only ends option
parsing and the tokens bind to ordinary positionals.
"""

from __future__ import annotations

import contextlib
import io
import os
from collections.abc import Mapping, Sequence
from typing import Any

from cmdtree.core.compiler import (
    CommandParser,
    CommandTree,
    CompiledCommand,
    argument_dest,
    subcommand_dest,
)
from cmdtree.core.models import ArgumentSpec, MatchResult, ValueSource
from cmdtree.exceptions import ArgumentParseExit

_SUPPLIED = (ValueSource.COMMAND_LINE, ValueSource.ENV)


def split_trailing(argv: Sequence[str]) -> tuple[list[str], list[str] | None]:
    """Split *argv* at the first ``--``.

    Returns the tokens before the separator and the tokens after it, or
    ``None`` for the latter when no separator is present.
    """
    tokens = list(argv)
    if "--" not in tokens:
        return tokens, None
    position = tokens.index("--")
    return tokens[:position], tokens[position + 1:]


def match(
    tree: CommandTree,
    argv: Sequence[str],
    environ: Mapping[str, str] | None = None,
) -> MatchResult:
    """Match *argv* (without the program name) against *tree*.

    Raises
    ------
    ArgumentParseExit
        On ``--help``, ``--version`` or any usage error.  The parser has
        already written its output.
    """
    if environ is None:
        environ = os.environ
    parser = tree.root.parser
    head, tail = split_trailing(argv)

    if tail:
        # Without a trailing argument on the invoked command, "--" only ends
        # option parsing and the tail binds to ordinary positionals.
        namespace = _parse_quietly(parser, [*head, "--", *tail])
        if namespace is not None and not _takes_trailing(tree, namespace):
            return _collect(tree, tree.root.index, namespace, None, environ)

    namespace = vars(parser.parse_args(head))
    if tail and not _takes_trailing(tree, namespace):
        # Repeats the failed parse so argparse reports its own error.
        parser.parse_args([*head, "--", *tail])
    return _collect(tree, tree.root.index, namespace, tail, environ)


def _parse_quietly(
    parser: CommandParser,
    argv: list[str],
) -> dict[str, Any] | None:
    """Parse *argv*, returning ``None`` instead of printing on any exit."""
    sink = io.StringIO()
    try:
        with contextlib.redirect_stdout(sink), contextlib.redirect_stderr(sink):
            return vars(parser.parse_args(argv))
    except ArgumentParseExit:
        return None


def _takes_trailing(tree: CommandTree, namespace: Mapping[str, Any]) -> bool:
    """Whether the deepest command selected in *namespace* has a ``last`` argument."""
    index = tree.root.index
    while True:
        child = tree.child(index, namespace.get(subcommand_dest(index)) or "")
        if child is None:
            break
        index = child.index
    return any(arg.last for arg in tree[index].config.arguments)


def _collect(
    tree: CommandTree,
    index: int,
    namespace: dict[str, Any],
    tail: list[str] | None,
    environ: Mapping[str, str],
) -> MatchResult:
    command = tree[index]

    subcommand: tuple[str, MatchResult] | None = None
    chosen = namespace.get(subcommand_dest(index))
    if chosen is not None:
        child = tree.child(index, chosen)
        if child is not None:
            subcommand = (chosen, _collect(tree, child.index, namespace, tail, environ))

    # Tokens after "--" belong to the deepest invoked command only.
    own_tail = tail if subcommand is None else None

    values: dict[str, str] = {}
    sources: dict[str, ValueSource] = {}
    for arg in command.config.arguments:
        dest = argument_dest(index, arg.id)
        if dest in namespace:
            values[arg.id] = namespace[dest]
            sources[arg.id] = ValueSource.COMMAND_LINE
        elif arg.last and own_tail:
            if len(own_tail) > 1:
                command.parser.error(
                    f"unexpected trailing arguments: {' '.join(own_tail[1:])}",
                )
            values[arg.id] = own_tail[0]
            sources[arg.id] = ValueSource.COMMAND_LINE
        elif arg.env and environ.get(arg.env):
            values[arg.id] = environ[arg.env]
            sources[arg.id] = ValueSource.ENV
        elif arg.default_value is not None:
            values[arg.id] = arg.default_value
            sources[arg.id] = ValueSource.DEFAULT

    if own_tail and not any(arg.last for arg in command.config.arguments):
        command.parser.error(f"unrecognized arguments: -- {' '.join(own_tail)}")

    _check_constraints(command, sources)
    return MatchResult(values=values, sources=sources, subcommand=subcommand)


def _check_constraints(
    command: CompiledCommand,
    sources: Mapping[str, ValueSource],
) -> None:
    arguments = {arg.id: arg for arg in command.config.arguments}

    missing = [
        _label(arg)
        for arg in arguments.values()
        if arg.required and arg.id not in sources
    ]
    if missing:
        command.parser.error(
            f"the following arguments are required: {', '.join(missing)}",
        )

    for arg in arguments.values():
        if arg.requires is None or sources.get(arg.id) not in _SUPPLIED:
            continue
        if sources.get(arg.requires) not in _SUPPLIED:
            command.parser.error(
                f"argument {_label(arg)}: requires "
                f"{_label(arguments[arg.requires])}",
            )


def _label(arg: ArgumentSpec) -> str:
    """Render *arg* the way argparse names it in error messages."""
    if arg.last:
        return f"-- {arg.value_name or arg.id}"
    if arg.is_positional:
        return arg.value_name or arg.id
    flags = []
    if arg.short:
        flags.append(f"-{arg.short}")
    if arg.long:
        flags.append(f"--{arg.long}")
    return "/".join(flags)
