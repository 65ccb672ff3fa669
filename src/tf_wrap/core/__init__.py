"""Core / service layer — resolution, ordering and dispatch logic.

Rules
-----
* No ``print()`` calls.
* No filesystem writes; read-only existence checks only.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from tf_wrap.core.dispatcher import CommandDispatcher
from tf_wrap.core.models import (
    CacheEntry,
    ModulePaths,
    PathSegments,
    RepoContext,
    Subcommand,
)
from tf_wrap.core.protocols import ProcessRunner, SelectionStore
from tf_wrap.core.resolver import PathResolver

__all__: list[str] = [
    "CacheEntry",
    "CommandDispatcher",
    "ModulePaths",
    "PathResolver",
    "PathSegments",
    "ProcessRunner",
    "RepoContext",
    "SelectionStore",
    "Subcommand",
]
