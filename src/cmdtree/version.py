"""Single source of the package version."""

__version__: str = "0.1.0"
