"""Command-line interface for libraryview.

- app: The Typer application, registered as the ``libraryview`` console script.
- Commands live in commands.py; Rich rendering in renderer.py.
"""

from libraryview.cli.commands import app

__all__ = ["app"]
