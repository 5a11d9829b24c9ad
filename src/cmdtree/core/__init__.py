"""Core / service layer — command-tree compilation, matching and dispatch.

Rules
-----
* No ``print()`` calls.
* No filesystem access and no direct process creation.
* No imports from ``cli`` or ``infra``.
* Only :class:`~cmdtree.exceptions.CmdtreeError` subclasses escape.
"""

from cmdtree.core.compiler import CommandTree, CompiledCommand, compile_tree
from cmdtree.core.dispatch_service import DispatchService
from cmdtree.core.exporter import to_env_record, to_json_record
from cmdtree.core.matcher import match
from cmdtree.core.models import (
    ArgumentSpec,
    CommandNode,
    MatchResult,
    ResolvedInvocation,
    ValueSource,
)
from cmdtree.core.protocols import ProcessRunner
from cmdtree.core.resolver import resolve

__all__: list[str] = [
    "ArgumentSpec",
    "CommandNode",
    "CommandTree",
    "CompiledCommand",
    "DispatchService",
    "MatchResult",
    "ProcessRunner",
    "ResolvedInvocation",
    "ValueSource",
    "compile_tree",
    "match",
    "resolve",
    "to_env_record",
    "to_json_record",
]
