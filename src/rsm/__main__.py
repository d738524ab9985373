"""Allow ``python -m rsm`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m rsm`` behaves identically to the ``rsm`` console
script.
"""

from __future__ import annotations

from rsm.cli.app import cli

if __name__ == "__main__":
    cli()
