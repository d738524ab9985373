"""rsm: command-line client for the RsMember reminder and todo service.

Built on ``requests``, Rich and questionary with a strict layered
architecture.
"""

from rsm.version import __version__

__all__: list[str] = ["__version__"]
