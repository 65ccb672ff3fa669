"""Infrastructure layer — external system integration.

This layer wraps all interaction with the filesystem, git, and the
terraform binary.  Every raw OS exception must be caught here and
re-raised as a :class:`~tf_wrap.exceptions.TfWrapError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from tf_wrap.infra.cache_store import TomlSelectionStore
from tf_wrap.infra.git import detect_context, find_repo_root
from tf_wrap.infra.layout import list_environments, list_regions
from tf_wrap.infra.terraform_runner import (
    BinaryStatus,
    SubprocessRunner,
    detect_binary,
    require_binary,
)

__all__: list[str] = [
    "BinaryStatus",
    "SubprocessRunner",
    "TomlSelectionStore",
    "detect_binary",
    "detect_context",
    "find_repo_root",
    "list_environments",
    "list_regions",
    "require_binary",
]
