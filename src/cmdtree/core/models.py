"""Domain models for cmdtree.

The command-tree models are **frozen** dataclasses — immutable value
objects built once per run from the configuration file and never
mutated afterwards.  They carry zero I/O and no dependencies on
external packages.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdtree.core.compiler import CompiledCommand


# ---------------------------------------------------------------------------
# Declarative command tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArgumentSpec:
    """Declarative description of one argument of a command.

    An argument with neither :attr:`long` nor :attr:`short` is
    positional; positionals are matched in declaration order.
    """

    id: str
    """Stable key used to look up the matched value and to export it."""

    required: bool | None = None
    long: str | None = None
    """Long flag name without the leading dashes (``"output"``)."""

    short: str | None = None
    """Single-character short flag without the dash (``"o"``)."""

    value_name: str | None = None
    aliases: tuple[str, ...] = ()
    """Extra long spellings; only meaningful for flag arguments."""

    default_value: str | None = None
    env: str | None = None
    """Environment variable consulted when the argument is not given."""

    help: str | None = None
    long_help: str | None = None
    requires: str | None = None
    """Id of another argument that must be supplied alongside this one."""

    group: str | None = None
    """Mutually exclusive group name shared with sibling arguments."""

    last: bool | None = None
    """Catch-all positional bound from the token after ``--``."""

    @property
    def is_positional(self) -> bool:
        return not self.long and not self.short


@dataclass(frozen=True, slots=True)
class CommandNode:
    """One command level: metadata, arguments, subcommands and script.

    A node without :attr:`run` whose invocation names no subcommand is a
    "directory" node — the only valid outcome is displaying its help.
    """

    name: str | None = None
    """Explicit name; when unset the key it is nested under is used."""

    about: str | None = None
    version: str | None = None
    arguments: tuple[ArgumentSpec, ...] = ()
    subcommands: Mapping[str, CommandNode] = field(default_factory=dict)
    run: str | None = None
    """Shell command text executed when this node is the resolved leaf."""


# ---------------------------------------------------------------------------
# Match results
# ---------------------------------------------------------------------------

class ValueSource(enum.Enum):
    """Where a matched value came from."""

    COMMAND_LINE = "command_line"
    ENV = "env"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Values matched for one command level, keyed by argument id.

    :attr:`subcommand` holds the invoked subcommand name together with
    the match result scoped to it, or ``None`` at the deepest level.
    """

    values: Mapping[str, str] = field(default_factory=dict)
    sources: Mapping[str, ValueSource] = field(default_factory=dict)
    subcommand: tuple[str, MatchResult] | None = None

    def get_one(self, arg_id: str) -> str | None:
        """Return the value bound to *arg_id*, or ``None``."""
        value = self.values.get(arg_id)
        return value if isinstance(value, str) else None

    def value_source(self, arg_id: str) -> ValueSource | None:
        return self.sources.get(arg_id)

    def contains(self, arg_id: str) -> bool:
        return arg_id in self.values


@dataclass(frozen=True, slots=True)
class ResolvedInvocation:
    """The leaf selected for this run and the match result scoped to it."""

    command: CompiledCommand
    matches: MatchResult

    @property
    def config(self) -> CommandNode:
        return self.command.config

    @property
    def run(self) -> str | None:
        return self.command.config.run
