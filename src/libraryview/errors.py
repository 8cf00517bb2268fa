"""Error taxonomy for library API calls and workflows.

- TransportError: no envelope could be obtained (network, timeout, bad body).
- ApplicationError: an envelope arrived but its ``code`` signals failure.
- WorkflowStateError: an identify step was invoked from a state that does not
  allow it.

Partial batch failures are not exceptions; they are reported as data by
:class:`libraryview.core.refresh.BatchRefreshOutcome`.
"""


class LibraryViewError(Exception):
    """Base class for all libraryview errors."""


class TransportError(LibraryViewError):
    """Raised when a request fails before an envelope is available."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize with a description and the HTTP status, if any."""
        super().__init__(message)
        self.status_code = status_code


class ApplicationError(LibraryViewError):
    """Raised when the server answers with a non-success envelope code."""

    def __init__(self, code: int, message: str) -> None:
        """Initialize with the envelope code and its human-readable message."""
        super().__init__(f"[{code}] {message}")
        self.code = code
        self.message = message


class WorkflowStateError(LibraryViewError):
    """Raised when an operation is not valid in the current workflow state."""
