"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.  Once
terraform has been spawned its own exit code is returned verbatim and
none of these apply.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Clean exit — command completed without error."""

GENERAL_ERROR: int = 1
"""A known TfWrapError was caught before dispatch. Message was displayed."""

UNEXPECTED_ERROR: int = 70
"""An unhandled exception escaped all known error boundaries (EX_SOFTWARE)."""

SPAWN_ERROR: int = 127
"""The wrapped binary could not be found or started.  Shell convention."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
