"""Infrastructure: discovery of known environments and regions.

Environments are the subdirectories of the infra dir; regions are the
subdirectories of an environment.  Missing or unreadable directories
simply yield no candidates.
"""

from __future__ import annotations

from pathlib import Path

from tf_wrap.core.choices import EXCLUDED_NAMES, order_choices


def list_subdirectories(path: Path) -> list[str]:
    """Return the names of the directories directly under *path*."""
    try:
        return [child.name for child in path.iterdir() if child.is_dir()]
    except OSError:
        return []


def list_environments(infra_path: Path, preferred: str | None = None) -> list[str]:
    """Return environment choices under *infra_path*, *preferred* first."""
    return order_choices(
        list_subdirectories(infra_path),
        preferred,
        excluded=EXCLUDED_NAMES,
    )


def list_regions(
    infra_path: Path,
    environment: str,
    preferred: str | None = None,
) -> list[str]:
    """Return region choices under ``infra_path/environment``."""
    return order_choices(list_subdirectories(infra_path / environment), preferred)
