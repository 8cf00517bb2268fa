"""Console construction for CLI commands.

Centralises Rich configuration: colour output can be turned off with the
``--no-rich`` flag, which sets ``LIBRARYVIEW_NO_RICH`` so every command sees
the same choice.
"""

import os

from rich.console import Console

ENV_DISABLE_RICH = "LIBRARYVIEW_NO_RICH"


def rich_enabled() -> bool:
    return os.getenv(ENV_DISABLE_RICH, "0").lower() not in {"1", "true", "yes"}


def make_console(*, record: bool = False) -> Console:
    """Return a Console, plain (no colour, no terminal codes) when disabled."""
    if rich_enabled():
        return Console(record=record)
    return Console(record=record, color_system=None, force_terminal=False)
