"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol


class ProcessRunner(Protocol):
    """Contract for child-process backends.

    Any object that implements :meth:`run` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required).
    """

    def run(self, argv: Sequence[str], env: Mapping[str, str]) -> int:
        """Run *argv* to completion and return its raw return code.

        *env* is added on top of the current process environment.  The
        child's standard streams are the caller's own streams.  A
        negative return code means the child was killed by the signal
        of that number.

        Raises
        ------
        ProcessStartError
            When the process cannot be launched.
        """
        ...  # pragma: no cover
