"""Path resolver — answers "what would be used without interaction".

The resolver combines the working directory (which fixes the module
name) with the selection cache (which supplies the last confirmed
environment, region and infra dir).  It never prompts and never writes.
"""

from __future__ import annotations

from pathlib import Path

from tf_wrap.config import Settings
from tf_wrap.core.models import CacheEntry, PathSegments, RepoContext
from tf_wrap.core.protocols import SelectionStore
from tf_wrap.exceptions import InvalidLocationError


class PathResolver:
    """Resolve the default :class:`CacheEntry` for a module directory.

    Parameters
    ----------
    store:
        Any object satisfying the :class:`SelectionStore` protocol.
    settings:
        Supplies the defaults used when nothing is cached.
    """

    def __init__(self, store: SelectionStore, settings: Settings | None = None) -> None:
        self._store: SelectionStore = store
        self._settings: Settings = settings or Settings()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def default_entry(self, context: RepoContext) -> CacheEntry:
        """Return the entry used on a first run for *context*."""
        return CacheEntry(
            segments=PathSegments(
                environment=None,
                region=self._settings.default_region,
                module=self.module_name(context),
            ),
            infra_dir=self._settings.infra_dir,
        )

    def resolve(self, context: RepoContext) -> CacheEntry:
        """Return the cached entry for *context*, or the documented default.

        The module segment always comes from the working directory, even
        if a cached entry recorded something else.

        Raises
        ------
        InvalidLocationError
            If the working directory cannot be a module directory.
        """
        module = self.module_name(context)
        cached = self._store.load(context.key, context.module_key)
        if cached is None:
            return self.default_entry(context)

        return CacheEntry(
            segments=PathSegments(
                environment=cached.segments.environment,
                region=cached.segments.region,
                module=module,
            ),
            infra_dir=cached.infra_dir,
        )

    @staticmethod
    def module_name(context: RepoContext) -> str:
        """Return the module segment for *context*.

        Raises
        ------
        InvalidLocationError
            When the working directory is the filesystem root or is not
            inside the repository root.
        """
        module_dir = context.module_dir
        if module_dir == Path(module_dir.anchor) or not module_dir.name:
            raise InvalidLocationError(
                f"{module_dir} is not a module directory.",
                hint="Run tf-wrap from $INFRA_DIR/terraform/<module>.",
            )
        if not module_dir.is_relative_to(context.root):
            raise InvalidLocationError(
                f"{module_dir} is outside the repository at {context.root}.",
            )
        return module_dir.name

    @staticmethod
    def infra_path(context: RepoContext, entry: CacheEntry) -> Path:
        """Return the infra directory of *entry* as an absolute path.

        Raises
        ------
        InvalidLocationError
            When the directory does not exist, i.e. the working directory
            is not inside a recognisable infra tree.
        """
        path = (context.module_dir / entry.infra_dir).resolve()
        if not path.is_dir():
            raise InvalidLocationError(
                f"Infra directory not found: {path}",
                hint=(
                    f"Resolved from {entry.infra_dir!r} relative to "
                    f"{context.module_dir}. Set TF_WRAP_INFRA_DIR or run "
                    "'tf-wrap edit' to choose another."
                ),
            )
        return path
