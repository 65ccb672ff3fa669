"""Domain models for tf-wrap.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and trivial derivations.  They carry zero
I/O and zero dependencies on external packages.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


# ---------------------------------------------------------------------------
# Repository identity
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RepoContext:
    """Where tf-wrap was invoked from, relative to its repository."""

    root: Path
    """Absolute path of the repository root."""

    module_dir: Path
    """Absolute path of the working (module) directory."""

    @property
    def key(self) -> str:
        """Identity of the repository used as the cache key."""
        return str(self.root)

    @property
    def module_key(self) -> str:
        """Module directory relative to the root, in POSIX form."""
        return self.module_dir.relative_to(self.root).as_posix()

    @property
    def module_name(self) -> str:
        return self.module_dir.name


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PathSegments:
    """The (environment, region, module) triple locating a var directory."""

    environment: str | None
    """Environment name, or ``None`` when not chosen yet."""

    region: str
    """Region name (e.g. ``us-east-1``)."""

    module: str
    """Module name, always the working directory's final component."""

    @property
    def is_complete(self) -> bool:
        return bool(self.environment)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Last confirmed selection for one (repository, module) pair."""

    segments: PathSegments
    infra_dir: str
    """Infra directory, relative to the module directory or absolute."""


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class Subcommand(str, enum.Enum):
    """Terraform subcommands tf-wrap knows how to parameterise."""

    INIT = "init"
    PLAN = "plan"
    DESTROY = "destroy"


@dataclass(frozen=True, slots=True)
class ModulePaths:
    """Concrete filesystem locations derived from a selection."""

    module_path: Path
    """``$INFRA_DIR/$ENVIRONMENT/$REGION/$MODULE_NAME``."""

    backend_config: Path
    """``<module_path>/backend.tfvars`` — consumed by ``init``."""

    var_file: Path
    """``<module_path>/terraform.tfvars`` — consumed by ``plan``/``destroy``."""
