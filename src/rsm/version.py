"""Single source of the package version."""

__version__: str = "0.3.0"
