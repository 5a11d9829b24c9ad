"""Core dispatch service — runs a resolved command's script.

This service delegates process creation to a
:class:`~cmdtree.core.protocols.ProcessRunner` injected at construction
time.  It is responsible for:

* Building the ``shell -c script`` command line.
* Recording the operational log events around the run.
* Translating the child's return code into this process's exit code.

Exit-code mapping
-----------------
A return code has exactly one of three outcomes:

* ``0..255`` — returned unchanged as the exit code.
* negative — the child was killed by a signal; :class:`ProcessKilledError`.
* anything else — :class:`UnexpectedExitCodeError`.
"""

from __future__ import annotations

import logging
import signal
import time
from collections.abc import Mapping

from cmdtree.core.protocols import ProcessRunner
from cmdtree.exceptions import ProcessKilledError, UnexpectedExitCodeError

logger = logging.getLogger(__name__)

MAX_EXIT_CODE: int = 255
"""Largest exit code a process can report."""

DEFAULT_SHELL: str = "sh"


class DispatchService:
    """Stateless service that executes scripts through a shell.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`ProcessRunner` protocol.
    """

    def __init__(self, runner: ProcessRunner) -> None:
        self._runner: ProcessRunner = runner

    # ------------------------------------------------------------------
    # Pure helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_argv(shell: str, script: str) -> list[str]:
        """Return the command line that runs *script* inline in *shell*."""
        return [shell, "-c", script]

    @staticmethod
    def exit_code_from_status(returncode: int) -> int:
        """Map a raw return code to an exit code.

        Raises
        ------
        ProcessKilledError
            When *returncode* is negative (terminated by a signal).
        UnexpectedExitCodeError
            When *returncode* does not fit in ``0..255``.
        """
        if returncode < 0:
            raise ProcessKilledError(
                f"Process killed by {_signal_name(-returncode)}.",
            )
        if returncode > MAX_EXIT_CODE:
            raise UnexpectedExitCodeError(
                f"Unexpected exit code {returncode}: "
                f"exit codes must be between 0 and {MAX_EXIT_CODE}.",
            )
        return returncode

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(
        self,
        shell: str,
        script: str,
        env: Mapping[str, str],
        *,
        command: str = "",
    ) -> int:
        """Run *script* with *shell*, exporting *env*, and return its exit code.

        Parameters
        ----------
        shell:
            Shell executable, invoked as ``shell -c script``.
        script:
            Script text from the resolved command's ``run`` field.
        env:
            Variables added to the child's environment.
        command:
            Command identity (space-joined path) used in log events.

        Raises
        ------
        ProcessStartError
            When the shell cannot be launched.
        ProcessKilledError
            When the script is terminated by a signal.
        UnexpectedExitCodeError
            When the script's exit code is out of range.
        """
        logger.info("Executing shell script for '%s': %s", command, script)
        logger.debug("Exported variables: %s", ", ".join(env) or "(none)")

        start = time.monotonic()
        returncode = self._runner.run(self.build_argv(shell, script), env)
        duration_ms = int((time.monotonic() - start) * 1000)

        exit_code = self.exit_code_from_status(returncode)
        logger.info(
            "Shell script finished with exit code %d in %d ms",
            exit_code,
            duration_ms,
        )
        return exit_code


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"
