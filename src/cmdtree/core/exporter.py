"""Argument exporters — project matched values for the child process.

Only single string values are exported.  Arguments without a bound
value (not supplied, no environment fallback, no default) are omitted
rather than exported empty.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from cmdtree.core.models import ArgumentSpec, MatchResult


def to_env_record(
    arguments: Sequence[ArgumentSpec],
    matches: MatchResult,
) -> dict[str, str]:
    """Return ``{id: value}`` for every argument bound in *matches*."""
    record: dict[str, str] = {}
    for arg in arguments:
        value = matches.get_one(arg.id)
        if value is not None:
            record[arg.id] = value
    return record


def to_json_record(
    arguments: Sequence[ArgumentSpec],
    matches: MatchResult,
) -> str:
    """Return the same projection as :func:`to_env_record`, JSON-encoded."""
    return json.dumps(to_env_record(arguments, matches), ensure_ascii=False)
