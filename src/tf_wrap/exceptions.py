"""Custom exception hierarchy for tf-wrap.

All exceptions that cross layer boundaries must inherit from
:class:`TfWrapError`.  Raw OS and subprocess exceptions must NEVER
propagate beyond the infrastructure layer — they must be caught and
re-raised as a typed subclass defined here.

Hierarchy
---------
TfWrapError
├── InvalidLocationError
├── MissingFileError
├── IncompleteSelectionError
├── CachePersistError
├── EnvironmentError
└── SpawnError
"""

from __future__ import annotations

from pathlib import Path


class TfWrapError(Exception):
    """Base exception for all tf-wrap errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    exit_code: int = 1
    """Process exit code used when this error reaches the CLI boundary."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Resolution ------------------------------------------------------------

class InvalidLocationError(TfWrapError):
    """Raised when the working directory is not a module directory."""


class IncompleteSelectionError(TfWrapError):
    """Raised when a required path segment has no value."""

    def __init__(self, segment: str, *, hint: str | None = None) -> None:
        super().__init__(f"Value for {segment!r} must be set", hint=hint)
        self.segment: str = segment


# --- Validation ------------------------------------------------------------

class MissingFileError(TfWrapError):
    """Raised when an expected backend-config or var-file is absent."""

    def __init__(self, path: Path, *, hint: str | None = None) -> None:
        super().__init__(f"Expected file not found: {path}", hint=hint)
        self.path: Path = path


# --- Persistence -----------------------------------------------------------

class CachePersistError(TfWrapError):
    """Raised when the selection cache cannot be written.

    Never fatal: the CLI reports it as a warning and still dispatches.
    """


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(TfWrapError):
    """Raised when a required runtime dependency is not available."""


class SpawnError(TfWrapError):
    """Raised when the wrapped binary cannot be located or started."""

    exit_code = 127
