"""Core command dispatcher — builds and runs the terraform invocation.

This service delegates process execution to a
:class:`~tf_wrap.core.protocols.ProcessRunner` injected at construction
time.  It is responsible for:

* Interpolating the backend-config and var-file paths.
* Checking those files exist before anything is spawned.
* Building the exact terraform argument list.
* Returning the child's exit code unchanged.

Guarantees
----------
* No ``print()`` and no writes; the only filesystem access is the
  read-only existence check in :meth:`CommandDispatcher.validate`.
* No retries — a failing child is reported as-is.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from tf_wrap.config import DEFAULT_TERRAFORM_BIN
from tf_wrap.core.models import ModulePaths, PathSegments, Subcommand
from tf_wrap.core.protocols import ProcessRunner
from tf_wrap.exceptions import MissingFileError

BACKEND_CONFIG_NAME: str = "backend.tfvars"
VAR_FILE_NAME: str = "terraform.tfvars"
PLAN_OUT: str = "./plan.plan"


class CommandDispatcher:
    """Stateless service that drives a single terraform invocation.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`ProcessRunner` protocol.
    terraform_bin:
        Executable name or path placed at ``argv[0]``.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        terraform_bin: str = DEFAULT_TERRAFORM_BIN,
    ) -> None:
        self._runner: ProcessRunner = runner
        self._terraform_bin: str = terraform_bin

    # ------------------------------------------------------------------
    # Path and argument construction (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def build_paths(infra_path: Path, segments: PathSegments) -> ModulePaths:
        """Interpolate ``infra/<env>/<region>/<module>`` for *segments*.

        An unset environment is skipped, so layouts without an
        environment level (``infra/<region>/<module>``) still resolve.
        """
        module_path = infra_path
        if segments.environment:
            module_path = module_path / segments.environment
        module_path = module_path / segments.region / segments.module
        return ModulePaths(
            module_path=module_path,
            backend_config=module_path / BACKEND_CONFIG_NAME,
            var_file=module_path / VAR_FILE_NAME,
        )

    def build_command(
        self,
        subcommand: Subcommand,
        paths: ModulePaths,
        extra_args: Sequence[str] = (),
    ) -> list[str]:
        """Build the full argument list, passthrough arguments last.

        Rules
        -----
        * ``init`` gets the backend config and always reconfigures.
        * ``plan`` writes ``plan.plan`` so it can be applied manually.
        * ``destroy`` gets the var file only.
        """
        if subcommand is Subcommand.INIT:
            args = [
                "init",
                "-get=true",
                "-force-copy",
                f"-backend-config={paths.backend_config}",
                "-reconfigure",
            ]
        elif subcommand is Subcommand.PLAN:
            args = [
                "plan",
                f"-var-file={paths.var_file}",
                f"-out={PLAN_OUT}",
                "-lock-timeout=30s",
            ]
        else:
            args = ["destroy", f"-var-file={paths.var_file}"]
        return [self._terraform_bin, *args, *extra_args]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def required_file(subcommand: Subcommand, paths: ModulePaths) -> Path:
        """Return the file *subcommand* cannot run without."""
        if subcommand is Subcommand.INIT:
            return paths.backend_config
        return paths.var_file

    def validate(self, subcommand: Subcommand, paths: ModulePaths) -> None:
        """Ensure the module directory and its required file exist.

        Raises
        ------
        MissingFileError
            Naming the first expected path that is absent.
        """
        if not paths.module_path.is_dir():
            raise MissingFileError(
                paths.module_path,
                hint="Check the environment and region, or run 'tf-wrap edit'.",
            )
        required = self.required_file(subcommand, paths)
        if not required.is_file():
            raise MissingFileError(
                required,
                hint=f"'{subcommand.value}' needs {required.name} in {paths.module_path}.",
            )

    def dispatch(
        self,
        subcommand: Subcommand,
        paths: ModulePaths,
        extra_args: Sequence[str] = (),
        *,
        on_validated: Callable[[list[str]], None] | None = None,
    ) -> int:
        """Validate, then run terraform and return its exit code.

        *on_validated*, if given, receives the built command after the
        paths have been checked and before the runner is called.

        Raises
        ------
        MissingFileError
            Before spawning, if a required file is absent.
        SpawnError
            If the runner cannot start terraform.
        """
        self.validate(subcommand, paths)
        command = self.build_command(subcommand, paths, extra_args)
        if on_validated is not None:
            on_validated(command)
        return self._runner.run(command)
