"""Utility modules for libraryview."""

from libraryview.utils.config import get_server_url, resolve_setting, set_server_url
from libraryview.utils.debug import setup_logger

__all__ = ["get_server_url", "resolve_setting", "set_server_url", "setup_logger"]
