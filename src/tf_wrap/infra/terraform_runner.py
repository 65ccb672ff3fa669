"""Infrastructure: terraform detection and process execution.

This module is the **only** place in the codebase that spawns the
wrapped binary.  It locates the executable on the system PATH, offers
platform-specific installation guidance when it is missing, and runs
it with the parent's standard streams.

Rules
-----
* Detection via :func:`shutil.which` before spawning.
* Streams are inherited, never captured, so terraform's prompts,
  colour output and progress work unchanged.
* No retries and no timeouts; the child is waited for, never killed.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
import signal
import subprocess
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from types import FrameType

from tf_wrap.exceptions import SpawnError


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class BinaryStatus:
    """Result of looking up an executable.

    Attributes
    ----------
    name : str
        The executable name or path that was looked up.
    found : bool
        Whether the executable was located.
    path : Path | None
        Absolute path to the binary, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing terraform on the current
        platform.  Empty when the binary is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_binary(name: str) -> BinaryStatus:
    """Look up *name* on the system PATH.

    Returns a :class:`BinaryStatus` regardless of whether the binary is
    present — the caller decides whether to abort.
    """
    result = shutil.which(name)

    if result is not None:
        return BinaryStatus(
            name=name,
            found=True,
            path=Path(result).resolve(),
            install_commands=(),
        )

    return BinaryStatus(
        name=name,
        found=False,
        path=None,
        install_commands=_platform_install_commands(),
    )


def require_binary(name: str) -> Path:
    """Locate *name* or raise :class:`SpawnError`."""
    status = detect_binary(name)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install terraform using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        hint_lines.append("Or point TF_WRAP_TERRAFORM_BIN at an existing binary.")
        raise SpawnError(
            f"{name} is not installed or not on PATH.",
            hint="\n".join(hint_lines),
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install Hashicorp.Terraform",
            "choco install terraform",
        )
    if system == "linux":
        return (
            "sudo apt install terraform",
            "sudo dnf install terraform",
            "tfenv install latest",
        )
    if system == "darwin":
        return ("brew install hashicorp/tap/terraform",)
    return ("Download terraform from https://developer.hashicorp.com/terraform/install",)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class SubprocessRunner:
    """Concrete :class:`ProcessRunner` backed by :mod:`subprocess`.

    This class satisfies the :class:`~tf_wrap.core.protocols.ProcessRunner`
    protocol structurally — no explicit inheritance required.
    """

    def run(self, command: Sequence[str]) -> int:
        """Run *command* with inherited streams and return its exit code.

        Raises
        ------
        SpawnError
            If the executable is missing or cannot be started.
        """
        if not command:
            raise SpawnError("No command to run.")
        executable = require_binary(command[0])
        with _interrupts_left_to_child():
            try:
                process = subprocess.Popen([str(executable), *command[1:]])
            except OSError as exc:
                raise SpawnError(
                    f"Could not start {command[0]}: {exc.strerror or exc}",
                ) from exc
            returncode = process.wait()
        return exit_status(returncode)


def exit_status(returncode: int) -> int:
    """Map a :mod:`subprocess` return code to a shell exit status.

    A child killed by signal N reports ``-N``; shells report ``128 + N``.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def _ignore_interrupt(signum: int, frame: FrameType | None) -> None:
    """SIGINT handler that does nothing; the child receives it too."""


@contextmanager
def _interrupts_left_to_child() -> Iterator[None]:
    """Ignore SIGINT in this process while the child runs.

    Ctrl+C reaches terraform through the process group, and terraform
    shuts down gracefully and releases its state lock.  Handlers can
    only be installed from the main thread; elsewhere this is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, _ignore_interrupt)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
