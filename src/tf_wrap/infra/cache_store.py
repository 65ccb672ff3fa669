"""TOML-backed implementation of :class:`~tf_wrap.core.protocols.SelectionStore`.

Layout
------
One file per repository inside the state directory.  The file name is
the repository root with ``/`` replaced by ``%``, e.g.
``%home%me%src%infra-repo.toml``.  Inside, each module is one entry of
the ``modules`` array, identified by its path relative to the
repository root::

    [[modules]]
    key = "infra/terraform/vpc"
    module = "vpc"
    environment = "staging"
    region = "us-east-1"
    infra_dir = "../.."

Module paths are stored as string values rather than table names, so
any character a directory name may hold round-trips unchanged.

Concurrency
-----------
There is no file locking.  Two invocations in the same repository can
race on the read-modify-write in :meth:`TomlSelectionStore.save`; the
last writer wins and the other module's update may be lost.  Acceptable
for an interactive single-user tool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import toml

from tf_wrap.core.models import CacheEntry, PathSegments
from tf_wrap.exceptions import CachePersistError

_MODULES_ARRAY: str = "modules"
_KEY_FIELD: str = "key"


def cache_filename(repo_key: str) -> str:
    """Return the cache file name used for the repository *repo_key*."""
    return repo_key.replace("/", "%").replace("\\", "%") + ".toml"


def _entry_to_table(module_key: str, entry: CacheEntry) -> dict[str, str]:
    table = {
        _KEY_FIELD: module_key,
        "module": entry.segments.module,
        "region": entry.segments.region,
        "infra_dir": entry.infra_dir,
    }
    # TOML has no null; an unset environment is simply omitted.
    if entry.segments.environment:
        table["environment"] = entry.segments.environment
    return table


def _table_to_entry(table: Any) -> CacheEntry | None:
    if not isinstance(table, dict):
        return None
    module = table.get("module")
    region = table.get("region")
    infra_dir = table.get("infra_dir")
    environment = table.get("environment")
    if not all(isinstance(v, str) for v in (module, region, infra_dir)):
        return None
    if environment is not None and not isinstance(environment, str):
        return None
    return CacheEntry(
        segments=PathSegments(environment=environment, region=region, module=module),
        infra_dir=infra_dir,
    )


def _module_tables(document: dict[str, Any]) -> list[dict[str, Any]]:
    """Return the well-formed entries of the ``modules`` array."""
    modules = document.get(_MODULES_ARRAY)
    if not isinstance(modules, list):
        return []
    return [
        table for table in modules
        if isinstance(table, dict) and isinstance(table.get(_KEY_FIELD), str)
    ]


class TomlSelectionStore:
    """Concrete :class:`SelectionStore` persisting to per-repository TOML files.

    This class satisfies the :class:`~tf_wrap.core.protocols.SelectionStore`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, state_dir: Path) -> None:
        self._state_dir: Path = state_dir

    def path_for(self, repo_key: str) -> Path:
        """Return the cache file backing *repo_key*."""
        return self._state_dir / cache_filename(repo_key)

    def _read_document(self, repo_key: str) -> dict[str, Any]:
        """Return the parsed file, or an empty document if unusable."""
        path = self.path_for(repo_key)
        try:
            with path.open("r", encoding="utf-8") as fh:
                document = toml.load(fh)
        except (OSError, toml.TomlDecodeError):
            return {}
        return document if isinstance(document, dict) else {}

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def load(self, repo_key: str, module_key: str) -> CacheEntry | None:
        """Return the cached entry, or ``None`` when absent or unreadable."""
        for table in _module_tables(self._read_document(repo_key)):
            if table[_KEY_FIELD] == module_key:
                return _table_to_entry(table)
        return None

    def save(self, repo_key: str, module_key: str, entry: CacheEntry) -> None:
        """Overwrite the entry for *module_key*, keeping other modules.

        Raises
        ------
        CachePersistError
            If the state directory or file cannot be written.
        """
        document = self._read_document(repo_key)
        modules = [
            table for table in _module_tables(document)
            if table[_KEY_FIELD] != module_key
        ]
        modules.append(_entry_to_table(module_key, entry))
        document[_MODULES_ARRAY] = modules

        path = self.path_for(repo_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as fh:
                toml.dump(document, fh)
        except OSError as exc:
            raise CachePersistError(
                f"Could not save selection to {path}: {exc.strerror or exc}",
                hint="Set TF_WRAP_STATE_DIR to a writable directory.",
            ) from exc
