"""Runtime settings loaded from environment variables.

Every knob has a default matching the conventional repository layout,
so tf-wrap works with no configuration at all.

Variables
---------
``TF_WRAP_INFRA_DIR``
    Infra directory relative to the module directory (default ``../..``).
``TF_WRAP_DEFAULT_REGION``
    Region used before anything is cached (default ``us-east-1``).
``TF_WRAP_STATE_DIR``
    Where per-repository cache files live.  Falls back to
    ``$XDG_STATE_HOME/tf-wrap`` and then ``~/.local/state/tf-wrap``.
``TF_WRAP_TERRAFORM_BIN``
    Name or path of the terraform executable (default ``terraform``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

APP_NAME: str = "tf-wrap"

DEFAULT_INFRA_DIR: str = "../.."
DEFAULT_REGION: str = "us-east-1"
DEFAULT_TERRAFORM_BIN: str = "terraform"


def get_state_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory holding per-repository cache files."""
    env = os.environ if environ is None else environ

    override = env.get("TF_WRAP_STATE_DIR")
    if override:
        return Path(override)

    xdg_state_home = env.get("XDG_STATE_HOME")
    if xdg_state_home:
        base = Path(xdg_state_home)
    else:
        base = Path.home() / ".local" / "state"

    return base / APP_NAME


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration for a single invocation."""

    infra_dir: str = DEFAULT_INFRA_DIR
    default_region: str = DEFAULT_REGION
    terraform_bin: str = DEFAULT_TERRAFORM_BIN
    state_dir: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            infra_dir=env.get("TF_WRAP_INFRA_DIR") or DEFAULT_INFRA_DIR,
            default_region=env.get("TF_WRAP_DEFAULT_REGION") or DEFAULT_REGION,
            terraform_bin=env.get("TF_WRAP_TERRAFORM_BIN") or DEFAULT_TERRAFORM_BIN,
            state_dir=get_state_dir(env),
        )
