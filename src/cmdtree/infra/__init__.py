"""Infrastructure layer — external system integration.

This layer wraps all interaction with the filesystem (config files),
the operating system (child processes) and completion generation.
Every raw third-party exception must be caught here and re-raised as a
:class:`~cmdtree.exceptions.CmdtreeError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from cmdtree.infra.config_file import load as load_config
from cmdtree.infra.subprocess_runner import SubprocessRunner

__all__: list[str] = [
    "SubprocessRunner",
    "load_config",
]
