"""Custom exception hierarchy for cmdtree.

All exceptions that cross layer boundaries must inherit from
:class:`CmdtreeError`.  Raw third-party exceptions (``OSError``, TOML and
YAML decode errors, pydantic validation errors, ``argparse`` construction
errors) must NEVER propagate beyond the layer that calls the library —
they must be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
CmdtreeError
├── ConfigError
│   ├── ConfigFileError
│   └── CommandTreeError
├── ArgumentParseExit
├── DispatchError
│   ├── ProcessStartError
│   ├── ProcessKilledError
│   └── UnexpectedExitCodeError
└── CompletionError
"""

from __future__ import annotations


class CmdtreeError(Exception):
    """Base exception for all cmdtree errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration ---------------------------------------------------------

class ConfigError(CmdtreeError):
    """Raised when the command configuration cannot be used."""


class ConfigFileError(ConfigError):
    """Raised when the config file is unreadable or fails schema validation."""


class CommandTreeError(ConfigError):
    """Raised when a command tree is structurally invalid.

    Examples: duplicate argument ids within one command, a ``requires``
    reference to an unknown id, or flags the parser refuses to register.
    """


# --- Argument matching -----------------------------------------------------

class ArgumentParseExit(CmdtreeError):
    """Raised when argument matching ends without a match result.

    Covers ``--help`` and ``--version`` requests as well as usage errors.
    The parser has already written its output by the time this is raised;
    :attr:`status` is the exit code the run should finish with.
    """

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__((message or "").strip())
        self.status: int = status


# --- Dispatch --------------------------------------------------------------

class DispatchError(CmdtreeError):
    """Base class for failures while running a command's script."""


class ProcessStartError(DispatchError):
    """Raised when the shell process cannot be launched."""


class ProcessKilledError(DispatchError):
    """Raised when the script process is terminated by a signal."""


class UnexpectedExitCodeError(DispatchError):
    """Raised when the script exits with a code outside ``0..255``."""


# --- Completions -----------------------------------------------------------

class CompletionError(CmdtreeError):
    """Raised when a completion script cannot be generated."""
