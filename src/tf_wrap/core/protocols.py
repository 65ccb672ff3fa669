"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — so tests can substitute an in-memory store and a
recording process runner.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from tf_wrap.core.models import CacheEntry


class SelectionStore(Protocol):
    """Contract for the per-repository selection cache.

    Any object that implements :meth:`load` and :meth:`save` with the
    correct signatures satisfies this protocol structurally (no explicit
    inheritance required).
    """

    def load(self, repo_key: str, module_key: str) -> CacheEntry | None:
        """Return the cached entry for *module_key* in *repo_key*.

        Must return ``None`` — never raise — when nothing is cached,
        so the very first run works with no prior state.
        """
        ...  # pragma: no cover

    def save(self, repo_key: str, module_key: str, entry: CacheEntry) -> None:
        """Store *entry*, replacing any previous entry for the same key.

        Raises
        ------
        CachePersistError
            When the backing location cannot be written.
        """
        ...  # pragma: no cover


class ProcessRunner(Protocol):
    """Contract for running an external command.

    Implementations run *command* with standard streams inherited from
    the current process, block until it exits, and return its exit code.
    """

    def run(self, command: Sequence[str]) -> int:
        """Run *command* (``command[0]`` is the executable).

        Raises
        ------
        SpawnError
            When the executable cannot be located or started.
        """
        ...  # pragma: no cover
