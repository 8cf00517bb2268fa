"""Client for the library REST API."""

from libraryview.api.library import LibraryApi
from libraryview.api.transport import HttpTransport, Transport

__all__ = ["HttpTransport", "LibraryApi", "Transport"]
