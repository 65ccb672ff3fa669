"""Infrastructure: repository root discovery.

The repository root identifies which cache file a module's selection
lives in.  ``git rev-parse --show-toplevel`` is asked first; outside a
git checkout (or without git installed) the working directory itself
is treated as the root.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from tf_wrap.core.models import RepoContext


def find_repo_root(cwd: Path) -> Path | None:
    """Return the git top-level directory containing *cwd*, if any."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    top_level = result.stdout.strip()
    return Path(top_level).resolve() if top_level else None


def detect_context(cwd: Path) -> RepoContext:
    """Build the :class:`RepoContext` for an invocation from *cwd*."""
    module_dir = cwd.resolve()
    root = find_repo_root(module_dir) or module_dir
    return RepoContext(root=root, module_dir=module_dir)
