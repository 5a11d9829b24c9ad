"""``subprocess``-backed implementation of :class:`~cmdtree.core.protocols.ProcessRunner`.

This module is the **only** place in the codebase that creates child
processes.  Launch failures are caught here and re-raised as
:class:`~cmdtree.exceptions.ProcessStartError`.

Rules
-----
* Standard streams are inherited, never captured or piped.
* The call blocks until the child terminates.
* The child is never cancelled.  A terminal Ctrl+C reaches it through
  the process group; cmdtree keeps waiting and reports its real status.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence

from cmdtree.exceptions import ProcessStartError


class SubprocessRunner:
    """Concrete :class:`ProcessRunner` backed by :class:`subprocess.Popen`.

    This class satisfies the :class:`~cmdtree.core.protocols.ProcessRunner`
    protocol structurally — no explicit inheritance required.
    """

    @staticmethod
    def _build_env(env: Mapping[str, str]) -> dict[str, str]:
        """Return the current environment with *env* layered on top."""
        return {**os.environ, **env}

    def run(self, argv: Sequence[str], env: Mapping[str, str]) -> int:
        """Run *argv* and return its raw return code.

        Raises
        ------
        ProcessStartError
            When the executable is missing, not executable, or the
            operating system rejects the environment.
        """
        try:
            process = subprocess.Popen(list(argv), env=self._build_env(env))
        except (OSError, ValueError) as exc:
            raise ProcessStartError(
                f"Process could not start: {exc}",
                hint=f"Check that '{argv[0]}' is installed and on PATH.",
            ) from exc

        # Ctrl+C belongs to the child; keep waiting for its exit status.
        while True:
            try:
                return process.wait()
            except KeyboardInterrupt:
                continue
