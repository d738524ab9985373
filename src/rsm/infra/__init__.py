"""Infrastructure layer: external system integration.

This layer wraps all interaction with the backend (via ``requests``),
the local config file and task input files.  Every raw third-party or
OS exception must be caught here and re-raised as a
:class:`~rsm.exceptions.RsmError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from rsm.infra.api_client import ApiClient
from rsm.infra.config_store import ConfigStore, default_config_path
from rsm.infra.input_resolver import resolve_task_body, select_lines

__all__: list[str] = [
    "ApiClient",
    "ConfigStore",
    "default_config_path",
    "resolve_task_body",
    "select_lines",
]
