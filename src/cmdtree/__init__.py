"""cmdtree — declarative command-line runtime.

Compiles a nested command configuration into an argument parser,
resolves the invoked leaf command and runs its shell script with the
matched arguments exported as environment variables.
"""

from cmdtree.version import __version__

__all__: list[str] = ["__version__"]
