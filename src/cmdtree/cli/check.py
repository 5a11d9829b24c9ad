"""``cmdtree check`` — validate a configuration file and show its tree.

Loads and compiles the configuration exactly as ``cmdtree run`` would,
so every configuration error surfaces here first, then renders the
compiled command tree on stderr.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays data.
"""

from __future__ import annotations

import sys
from pathlib import Path

from cmdtree.cli import exit_codes
from cmdtree.cli.console import console
from cmdtree.core.compiler import CommandTree, CompiledCommand, compile_tree
from cmdtree.core.models import ArgumentSpec
from cmdtree.infra.config_file import load as load_config


# ---------------------------------------------------------------------------
# Row builders
# ---------------------------------------------------------------------------

def _argument_label(arg: ArgumentSpec) -> str:
    """Return a one-line summary such as ``--output/-o (required)``."""
    if arg.last:
        label = f"-- {arg.id}"
    elif arg.is_positional:
        label = arg.id
    else:
        label = "/".join(
            flag for flag in (
                f"--{arg.long}" if arg.long else None,
                f"-{arg.short}" if arg.short else None,
            ) if flag
        )
        if label != arg.id:
            label = f"{label} → {arg.id}"

    notes: list[str] = []
    if arg.required:
        notes.append("required")
    if arg.env:
        notes.append(f"env {arg.env}")
    if arg.default_value is not None:
        notes.append(f"default {arg.default_value!r}")
    if arg.group:
        notes.append(f"group {arg.group}")
    return f"{label} ({', '.join(notes)})" if notes else label


def _command_label(command: CompiledCommand) -> tuple[str, str]:
    """Return (name, action) for one command row."""
    name = command.name or "<root>"
    if command.config.run is not None:
        action = f"run: {command.config.run}"
    elif command.children:
        action = "group"
    else:
        action = "help only"
    return name, action


def _print_plain_tree(tree: CommandTree) -> None:
    """Render the command tree without Rich."""
    def walk(command: CompiledCommand, depth: int) -> None:
        name, action = _command_label(command)
        indent = "  " * depth
        print(f"{indent}{name}  [{action}]", file=sys.stderr)
        for arg in command.config.arguments:
            print(f"{indent}    {_argument_label(arg)}", file=sys.stderr)
        for index in command.children.values():
            walk(tree[index], depth + 1)

    walk(tree.root, 0)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_check(config_path: str | Path) -> int:
    """Validate *config_path* and render its command tree.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS`.  Invalid configurations raise
        :class:`~cmdtree.exceptions.ConfigError`, handled by the CLI
        error boundary.
    """
    tree = compile_tree(load_config(config_path))

    try:
        from rich.markup import escape
        from rich.tree import Tree
    except ModuleNotFoundError:
        _print_plain_tree(tree)
        print("Configuration is valid.", file=sys.stderr)
        return exit_codes.SUCCESS

    def heading(command: CompiledCommand) -> str:
        name, action = _command_label(command)
        return f"[bold]{escape(name)}[/bold]  [dim]{escape(action)}[/dim]"

    def fill(node: Tree, command: CompiledCommand) -> None:
        for arg in command.config.arguments:
            node.add(f"[cyan]{escape(_argument_label(arg))}[/cyan]")
        for index in command.children.values():
            child = tree[index]
            fill(node.add(heading(child)), child)

    root = Tree(heading(tree.root))
    fill(root, tree.root)

    console.print(root)
    console.print("[bold green]Configuration is valid.[/bold green]")
    return exit_codes.SUCCESS
