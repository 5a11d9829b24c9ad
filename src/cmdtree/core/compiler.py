"""Command-tree compiler — turns a :class:`CommandNode` into live parsers.

The compiled form is an arena: a flat, pre-ordered list of
:class:`CompiledCommand` entries addressed by index, root at ``0``.
Every entry keeps a back-pointer to the :class:`CommandNode` it was
built from, the ``argparse`` parser that matches its level, and an
index of its children by compiled name.  Resolution therefore walks a
single structure instead of two parallel trees.

Rules
-----
* Each subcommand is named after its map key unless its own ``name``
  is set.
* Every :class:`ArgumentSpec` is registered; values are never given
  argparse defaults (``SUPPRESS``) so the matcher can tell command-line
  values from environment and default fallbacks.
* Structural problems are rejected here, at construction time, as
  :class:`~cmdtree.exceptions.CommandTreeError`.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import NoReturn

from cmdtree.core.models import ArgumentSpec, CommandNode
from cmdtree.exceptions import ArgumentParseExit, CommandTreeError


# ---------------------------------------------------------------------------
# Parser class
# ---------------------------------------------------------------------------

class CommandParser(argparse.ArgumentParser):
    """``ArgumentParser`` that raises instead of terminating the process.

    Help, version and usage errors still print exactly what argparse
    prints; the exit status travels in :class:`ArgumentParseExit`.
    """

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        if message:
            self._print_message(message, sys.stderr)
        raise ArgumentParseExit(status, message)


def argument_dest(index: int, arg_id: str) -> str:
    """Namespace attribute holding *arg_id* for the command at *index*."""
    return f"{index}:arg:{arg_id}"


def subcommand_dest(index: int) -> str:
    """Namespace attribute holding the subcommand chosen below *index*."""
    return f"{index}:subcommand"


# ---------------------------------------------------------------------------
# Compiled structures
# ---------------------------------------------------------------------------

@dataclass(slots=True, eq=False)
class CompiledCommand:
    """One arena entry: a command level and its parser."""

    index: int
    name: str
    parent: int | None
    config: CommandNode
    """The configuration node this command was compiled from."""

    parser: CommandParser
    children: dict[str, int] = field(default_factory=dict)
    """Compiled subcommand name → arena index."""

    @property
    def about(self) -> str | None:
        return self.config.about

    @property
    def version(self) -> str | None:
        return self.config.version

    @property
    def subcommand_names(self) -> tuple[str, ...]:
        return tuple(self.children)

    def format_help(self) -> str:
        return self.parser.format_help()

    def print_help(self) -> None:
        self.parser.print_help()


class CommandTree:
    """Arena of :class:`CompiledCommand` entries built by :func:`compile_tree`."""

    def __init__(self) -> None:
        self._nodes: list[CompiledCommand] = []

    def __getitem__(self, index: int) -> CompiledCommand:
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[CompiledCommand]:
        return iter(self._nodes)

    @property
    def root(self) -> CompiledCommand:
        return self._nodes[0]

    @property
    def nodes(self) -> tuple[CompiledCommand, ...]:
        return tuple(self._nodes)

    def child(self, index: int, name: str) -> CompiledCommand | None:
        """Return the subcommand of *index* compiled as *name*, if any."""
        child_index = self._nodes[index].children.get(name)
        if child_index is None:
            return None
        return self._nodes[child_index]

    def path(self, index: int) -> str:
        """Space-joined command names from the root down to *index*."""
        names: list[str] = []
        current: int | None = index
        while current is not None:
            node = self._nodes[current]
            if node.name:
                names.append(node.name)
            current = node.parent
        return " ".join(reversed(names))

    def _add(self, command: CompiledCommand) -> None:
        self._nodes.append(command)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def compile_tree(node: CommandNode) -> CommandTree:
    """Compile *node* and all of its subcommands into a :class:`CommandTree`.

    Raises
    ------
    CommandTreeError
        When the tree is structurally invalid or argparse refuses one of
        its arguments.
    """
    tree = CommandTree()
    name = node.name or ""
    parser = CommandParser(prog=name, description=node.about, allow_abbrev=False)
    _compile_node(tree, node, name, None, parser)
    return tree


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _compile_node(
    tree: CommandTree,
    node: CommandNode,
    name: str,
    parent: int | None,
    parser: CommandParser,
) -> int:
    index = len(tree)
    command = CompiledCommand(
        index=index,
        name=name,
        parent=parent,
        config=node,
        parser=parser,
    )
    tree._add(command)
    where = tree.path(index) or "<root>"

    _validate_arguments(node.arguments, where)
    child_names = _subcommand_names(node, where)

    try:
        if node.version:
            parser.add_argument(
                "-V",
                "--version",
                action="version",
                version=f"{name} {node.version}".strip(),
            )
        _register_arguments(parser, index, node.arguments)
    except (argparse.ArgumentError, ValueError, TypeError) as exc:
        raise CommandTreeError(
            f"Command '{where}' cannot be compiled: {exc}",
            hint="Check for flags that clash with -h/--help or -V/--version.",
        ) from exc

    if not node.subcommands:
        return index

    subparsers = parser.add_subparsers(
        dest=subcommand_dest(index),
        metavar="COMMAND",
        title="commands",
    )
    for child_name, child in zip(child_names, node.subcommands.values()):
        child_parser = subparsers.add_parser(
            child_name,
            help=_escape(child.about) if child.about else "",
            description=child.about,
            allow_abbrev=False,
        )
        command.children[child_name] = _compile_node(
            tree, child, child_name, index, child_parser,
        )
    return index


def _subcommand_names(node: CommandNode, where: str) -> list[str]:
    """Return compiled names in map order, rejecting duplicates."""
    owners: dict[str, str] = {}
    for key, child in node.subcommands.items():
        child_name = child.name or key
        if child_name in owners:
            raise CommandTreeError(
                f"Subcommands '{owners[child_name]}' and '{key}' of "
                f"'{where}' both compile to the name '{child_name}'.",
            )
        owners[child_name] = key
    return list(owners)


def _validate_arguments(arguments: Sequence[ArgumentSpec], where: str) -> None:
    ids = {arg.id for arg in arguments}
    seen: set[str] = set()
    trailing = 0

    for arg in arguments:
        if not arg.id:
            raise CommandTreeError(f"Command '{where}' has an argument with an empty id.")
        if arg.id in seen:
            raise CommandTreeError(
                f"Command '{where}' declares argument '{arg.id}' more than once.",
            )
        seen.add(arg.id)

        label = f"Argument '{arg.id}' of '{where}'"
        if arg.short is not None and (len(arg.short) != 1 or arg.short == "-"):
            raise CommandTreeError(
                f"{label}: short flag must be a single character, got {arg.short!r}.",
            )
        for spelling in (arg.long, *arg.aliases):
            if spelling is not None and (not spelling or spelling.startswith("-")):
                raise CommandTreeError(
                    f"{label}: long flags are written without leading dashes, "
                    f"got {spelling!r}.",
                )
        if arg.requires is not None and arg.requires not in ids:
            raise CommandTreeError(
                f"{label} requires unknown argument '{arg.requires}'.",
            )
        if arg.group is not None:
            if arg.group in ids:
                raise CommandTreeError(
                    f"{label}: group name '{arg.group}' collides with an argument id.",
                )
            if arg.required:
                raise CommandTreeError(
                    f"{label}: arguments in group '{arg.group}' cannot be required.",
                )
            if arg.last:
                raise CommandTreeError(
                    f"{label}: a trailing argument cannot belong to a group.",
                )
        if arg.last:
            if not arg.is_positional:
                raise CommandTreeError(
                    f"{label}: a trailing argument must be positional.",
                )
            trailing += 1

    if trailing > 1:
        raise CommandTreeError(
            f"Command '{where}' declares more than one trailing (last) argument.",
        )


def _register_arguments(
    parser: CommandParser,
    index: int,
    arguments: Sequence[ArgumentSpec],
) -> None:
    groups: dict[str, argparse._MutuallyExclusiveGroup] = {}
    trailing: list[str] = []

    for arg in arguments:
        if arg.last:
            trailing.append(_trailing_line(arg))
            continue

        container: argparse._ActionsContainer = parser
        if arg.group is not None:
            if arg.group not in groups:
                groups[arg.group] = parser.add_mutually_exclusive_group()
            container = groups[arg.group]

        # Required arguments with an env fallback are checked after the
        # environment has been consulted.
        required = bool(arg.required) and not arg.env
        dest = argument_dest(index, arg.id)

        if arg.is_positional:
            container.add_argument(
                dest,
                nargs=None if required else "?",
                metavar=arg.value_name or arg.id,
                default=argparse.SUPPRESS,
                help=_help_text(arg),
            )
        else:
            container.add_argument(
                *_flags(arg),
                dest=dest,
                metavar=arg.value_name or arg.id.upper(),
                required=required,
                default=argparse.SUPPRESS,
                help=_help_text(arg),
            )

    if trailing:
        parser.epilog = "trailing arguments: " + "; ".join(trailing)


def _flags(arg: ArgumentSpec) -> list[str]:
    flags: list[str] = []
    if arg.short:
        flags.append(f"-{arg.short}")
    if arg.long:
        flags.append(f"--{arg.long}")
    flags.extend(f"--{alias}" for alias in arg.aliases)
    return flags


def _help_text(arg: ArgumentSpec) -> str | None:
    parts = [arg.help or arg.long_help or ""]
    if arg.env:
        parts.append(f"[env: {arg.env}]")
    if arg.default_value is not None:
        parts.append(f"[default: {arg.default_value}]")
    text = " ".join(part for part in parts if part)
    return _escape(text) if text else None


def _trailing_line(arg: ArgumentSpec) -> str:
    line = f"-- {arg.value_name or arg.id}"
    description = arg.help or arg.long_help
    return f"{line} ({description})" if description else line


def _escape(text: str) -> str:
    """Protect literal ``%`` from argparse's help interpolation."""
    return text.replace("%", "%%")
