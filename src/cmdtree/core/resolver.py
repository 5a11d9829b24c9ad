"""Resolver — finds the most specific command an invocation reached.

Walks the compiled arena and the nested match result in lockstep: as
long as the match result names an invoked subcommand that the current
command knows, descend into it.  Lookups are exact; there is no prefix
or fuzzy matching.

Resolution never fails.  If a name cannot be found (not possible for a
tree built by :func:`~cmdtree.core.compiler.compile_tree`), the current
command is returned as the leaf and the caller falls back to help.
"""

from __future__ import annotations

from cmdtree.core.compiler import CommandTree
from cmdtree.core.models import MatchResult, ResolvedInvocation


def resolve(
    tree: CommandTree,
    matches: MatchResult,
    index: int = 0,
) -> ResolvedInvocation:
    """Resolve *matches* against *tree*, starting at the command at *index*."""
    if matches.subcommand is None:
        return ResolvedInvocation(command=tree[index], matches=matches)

    name, submatches = matches.subcommand
    child = tree.child(index, name)
    if child is None:
        return ResolvedInvocation(command=tree[index], matches=matches)

    return resolve(tree, submatches, child.index)
