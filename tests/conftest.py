"""Shared pytest fixtures and configuration for the tf-wrap test suite.

Guidelines
----------
* terraform is never executed — a recording runner stands in for it.
* git is never asked — repository roots are patched to ``tmp_path``.
* The selection cache is in memory unless a test targets the TOML store.
* Tests must not depend on OS state or on a real terminal.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from tf_wrap.cli.console import console
from tf_wrap.core.models import CacheEntry
from tf_wrap.exceptions import CachePersistError


class InMemorySelectionStore:
    """Dict-backed :class:`SelectionStore` for tests."""

    def __init__(self) -> None:
        self.entries: dict[tuple[str, str], CacheEntry] = {}
        self.save_calls: int = 0

    def load(self, repo_key: str, module_key: str) -> CacheEntry | None:
        return self.entries.get((repo_key, module_key))

    def save(self, repo_key: str, module_key: str, entry: CacheEntry) -> None:
        self.save_calls += 1
        self.entries[(repo_key, module_key)] = entry


class FailingSelectionStore(InMemorySelectionStore):
    """Store whose writes always fail, as on a read-only disk."""

    def save(self, repo_key: str, module_key: str, entry: CacheEntry) -> None:
        self.save_calls += 1
        raise CachePersistError("Could not save selection: read-only file system")


class RecordingRunner:
    """:class:`ProcessRunner` that records commands instead of running them."""

    def __init__(self, exit_code: int = 0) -> None:
        self.exit_code: int = exit_code
        self.commands: list[list[str]] = []

    def run(self, command: Sequence[str]) -> int:
        self.commands.append(list(command))
        return self.exit_code


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep real settings and verbosity from leaking into tests."""
    for name in (
        "TF_WRAP_INFRA_DIR",
        "TF_WRAP_DEFAULT_REGION",
        "TF_WRAP_TERRAFORM_BIN",
        "XDG_STATE_HOME",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TF_WRAP_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setattr(console, "verbose", False)


@pytest.fixture
def store() -> InMemorySelectionStore:
    return InMemorySelectionStore()


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A repository with the conventional infra layout.

    ::

        repo/infra/terraform/vpc/                       (module sources)
        repo/infra/staging/us-east-1/vpc/{backend,terraform}.tfvars
        repo/infra/staging/eu-west-1/vpc/{backend,terraform}.tfvars
        repo/infra/prod/us-east-1/vpc/{backend,terraform}.tfvars
    """
    root = tmp_path / "repo"
    (root / "infra" / "terraform" / "vpc").mkdir(parents=True)
    for env, region in (
        ("staging", "us-east-1"),
        ("staging", "eu-west-1"),
        ("prod", "us-east-1"),
    ):
        module_path = root / "infra" / env / region / "vpc"
        module_path.mkdir(parents=True)
        (module_path / "backend.tfvars").write_text('bucket = "state"\n')
        (module_path / "terraform.tfvars").write_text('cidr = "10.0.0.0/16"\n')

    monkeypatch.setattr(
        "tf_wrap.infra.git.find_repo_root", lambda cwd: root.resolve(),
    )
    return root


@pytest.fixture
def module_dir(repo: Path) -> Path:
    return repo / "infra" / "terraform" / "vpc"
