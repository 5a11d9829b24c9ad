"""Infrastructure: shell completion scripts for a compiled command tree.

Completion text is generated by ``shtab`` directly from the compiled
``argparse`` parsers, so it always reflects the configuration file.
"""

from __future__ import annotations

import shtab

from cmdtree.core.compiler import CommandTree
from cmdtree.exceptions import CompletionError

SUPPORTED_SHELLS: tuple[str, ...] = tuple(shtab.SUPPORTED_SHELLS)


def generate(tree: CommandTree, shell: str) -> str:
    """Return the completion script for *tree* in the dialect of *shell*.

    Raises
    ------
    CompletionError
        When *shell* is unsupported or the root command has no name to
        complete.
    """
    if shell not in SUPPORTED_SHELLS:
        raise CompletionError(
            f"Unsupported shell '{shell}'.",
            hint=f"Choose one of: {', '.join(SUPPORTED_SHELLS)}.",
        )
    if not tree.root.name:
        raise CompletionError(
            "The root command has no name to register completions for.",
            hint="Set the top-level 'name' field in the config file.",
        )
    return shtab.complete(tree.root.parser, shell=shell)
