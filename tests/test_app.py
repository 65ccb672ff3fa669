"""End-to-end tests of the CLI wiring (cli/app.py).

The selection cache is in memory, terraform is a recording runner, and
the interactive prompt is patched where a run would ask for input.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from conftest import FailingSelectionStore, InMemorySelectionStore, RecordingRunner

from tf_wrap.cli import exit_codes
from tf_wrap.cli import app as app_module
from tf_wrap.cli.app import cli, main, split_passthrough
from tf_wrap.cli.console import console
from tf_wrap.core.dispatcher import CommandDispatcher
from tf_wrap.core.models import CacheEntry, PathSegments
from tf_wrap.exceptions import (
    IncompleteSelectionError,
    InvalidLocationError,
    MissingFileError,
    SpawnError,
)

MODULE_KEY = "infra/terraform/vpc"


def _entry(environment: str | None = "staging", region: str = "us-east-1") -> CacheEntry:
    return CacheEntry(PathSegments(environment, region, "vpc"), "../..")


def _seed(store: InMemorySelectionStore, repo: Path, entry: CacheEntry) -> None:
    store.save(str(repo.resolve()), MODULE_KEY, entry)
    store.save_calls = 0


# ---------------------------------------------------------------------------
# Argument splitting
# ---------------------------------------------------------------------------

class TestSplitPassthrough:
    def test_terraform_flags_pass_through(self) -> None:
        own, rest = split_passthrough(["plan", "-i", "-target=module.a", "-input=false"])
        assert own == ["plan", "-i"]
        assert rest == ["-target=module.a", "-input=false"]

    def test_double_dash(self) -> None:
        own, rest = split_passthrough(["init", "--", "-i", "-upgrade"])
        assert own == ["init"]
        assert rest == ["-i", "-upgrade"]

    def test_positional_after_command(self) -> None:
        own, rest = split_passthrough(["plan", "extra"])
        assert own == ["plan"]
        assert rest == ["extra"]


# ---------------------------------------------------------------------------
# Non-interactive runs
# ---------------------------------------------------------------------------

class TestRunCommands:
    def test_init_uses_cached_selection(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())

        code = main(["init"], store=store, runner=runner, cwd=module_dir)

        assert code == exit_codes.SUCCESS
        backend = (repo / "infra" / "staging" / "us-east-1" / "vpc" / "backend.tfvars").resolve()
        assert runner.commands == [[
            "terraform", "init", "-get=true", "-force-copy",
            f"-backend-config={backend}", "-reconfigure",
        ]]

    def test_plan_forwards_extra_args(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry("prod"))

        main(["plan", "-target=module.a", "-var", "x=1"], store=store, runner=runner, cwd=module_dir)

        command = runner.commands[0]
        assert command[1] == "plan"
        assert command[-3:] == ["-target=module.a", "-var", "x=1"]
        assert "-out=./plan.plan" in command

    def test_destroy(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        main(["destroy"], store=store, runner=runner, cwd=module_dir)
        assert runner.commands[0][1] == "destroy"

    def test_idempotent_init(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())

        main(["init"], store=store, runner=runner, cwd=module_dir)
        main(["init"], store=store, runner=runner, cwd=module_dir)

        assert len(runner.commands) == 2
        assert runner.commands[0] == runner.commands[1]

    def test_unmodified_selection_is_persisted(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        main(["init"], store=store, runner=runner, cwd=module_dir)
        assert store.save_calls == 1

    def test_child_exit_code_propagates(
        self, store: InMemorySelectionStore, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        runner = RecordingRunner(exit_code=2)

        assert main(["plan"], store=store, runner=runner, cwd=module_dir) == 2

    def test_terraform_bin_from_env(
        self,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("TF_WRAP_TERRAFORM_BIN", "tofu")
        _seed(store, repo, _entry())
        main(["init"], store=store, runner=runner, cwd=module_dir)
        assert runner.commands[0][0] == "tofu"

    def test_paths_validated_once(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())

        with patch.object(
            CommandDispatcher, "validate", autospec=True, side_effect=CommandDispatcher.validate,
        ) as mock_validate:
            main(["plan"], store=store, runner=runner, cwd=module_dir)

        assert mock_validate.call_count == 1
        assert len(runner.commands) == 1

    def test_selection_saved_before_terraform_runs(
        self, repo: Path, module_dir: Path,
    ) -> None:
        store = InMemorySelectionStore()
        _seed(store, repo, _entry())
        saves_seen: list[int] = []

        class _Runner(RecordingRunner):
            def run(self, command: Sequence[str]) -> int:
                saves_seen.append(store.save_calls)
                return super().run(command)

        main(["init"], store=store, runner=_Runner(), cwd=module_dir)
        assert saves_seen == [1]


# ---------------------------------------------------------------------------
# Verbosity flag
# ---------------------------------------------------------------------------

class TestVerboseFlag:
    @pytest.mark.parametrize(
        "argv",
        [["-v", "init"], ["--verbose", "init"], ["init", "-v"], ["init", "--verbose"]],
    )
    def test_accepted_before_or_after_command(
        self,
        argv: list[str],
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())

        code = main(argv, store=store, runner=runner, cwd=module_dir)

        assert code == exit_codes.SUCCESS
        assert console.verbose is True
        assert runner.commands[0][1:2] == ["init"]
        assert "-v" not in runner.commands[0]

    def test_off_by_default(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        main(["init"], store=store, runner=runner, cwd=module_dir)
        assert console.verbose is False

    def test_leading_flag_on_show(
        self, store: InMemorySelectionStore, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        with patch("tf_wrap.cli.selection_prompt.display_selection"):
            assert main(["-v", "show"], store=store, cwd=module_dir) == exit_codes.SUCCESS
        assert console.verbose is True


# ---------------------------------------------------------------------------
# Failures before dispatch
# ---------------------------------------------------------------------------

class TestFailuresBeforeDispatch:
    def test_missing_var_file(
        self, store: InMemorySelectionStore, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())
        (repo / "infra" / "staging" / "us-east-1" / "vpc" / "terraform.tfvars").unlink()

        with pytest.raises(MissingFileError, match="terraform.tfvars"):
            main(["plan"], store=store, runner=runner, cwd=module_dir)
        assert runner.commands == []
        assert store.save_calls == 0

    def test_no_environment_without_terminal(
        self,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        module_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(app_module, "_stdin_is_interactive", lambda: False)

        with pytest.raises(IncompleteSelectionError, match="environment"):
            main(["init"], store=store, runner=runner, cwd=module_dir)
        assert runner.commands == []

    def test_infra_dir_missing(
        self,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("TF_WRAP_INFRA_DIR", "../../../../nowhere")
        monkeypatch.setattr(app_module, "_stdin_is_interactive", lambda: False)
        store.save(str(repo.resolve()), MODULE_KEY, CacheEntry(
            PathSegments("staging", "us-east-1", "vpc"), "../../../../nowhere",
        ))

        with pytest.raises(InvalidLocationError):
            main(["init"], store=store, runner=runner, cwd=module_dir)

    def test_cache_failure_is_only_a_warning(
        self, runner: RecordingRunner, repo: Path, module_dir: Path,
    ) -> None:
        store = FailingSelectionStore()
        store.entries[(str(repo.resolve()), MODULE_KEY)] = _entry()

        with patch.object(app_module.console, "warn") as mock_warn:
            code = main(["init"], store=store, runner=runner, cwd=module_dir)

        assert code == exit_codes.SUCCESS
        assert len(runner.commands) == 1
        mock_warn.assert_called_once()

    def test_edit_rejects_passthrough(
        self, store: InMemorySelectionStore, module_dir: Path,
    ) -> None:
        with pytest.raises(SystemExit):
            main(["edit", "-upgrade"], store=store, cwd=module_dir)


# ---------------------------------------------------------------------------
# Interactive runs
# ---------------------------------------------------------------------------

class TestInteractive:
    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_scenario_first_run_interactive_init(
        self,
        mock_prompt: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
    ) -> None:
        mock_prompt.return_value = _entry("staging", "us-east-1")

        code = main(["init", "-i"], store=store, runner=runner, cwd=module_dir)

        assert code == exit_codes.SUCCESS
        backend = (repo / "infra" / "staging" / "us-east-1" / "vpc" / "backend.tfvars").resolve()
        assert f"-backend-config={backend}" in runner.commands[0]
        loaded = store.load(str(repo.resolve()), MODULE_KEY)
        assert loaded is not None
        assert loaded.segments == PathSegments("staging", "us-east-1", "vpc")

    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_override_persists_for_next_run(
        self,
        mock_prompt: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry("staging", "us-east-1"))
        mock_prompt.return_value = _entry("prod", "us-east-1")

        main(["plan", "-i"], store=store, runner=runner, cwd=module_dir)
        main(["plan"], store=store, runner=runner, cwd=module_dir)

        mock_prompt.assert_called_once()
        assert all("/prod/" in cmd[2].replace("\\", "/") for cmd in runner.commands)

    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_prompt_receives_resolved_defaults(
        self,
        mock_prompt: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry("prod", "us-east-1"))
        mock_prompt.return_value = _entry("prod", "us-east-1")

        main(["init", "--interactive"], store=store, runner=runner, cwd=module_dir)

        current, context = mock_prompt.call_args.args
        assert current == _entry("prod", "us-east-1")
        assert context.module_key == MODULE_KEY

    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_missing_environment_prompts_on_terminal(
        self,
        mock_prompt: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        module_dir: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(app_module, "_stdin_is_interactive", lambda: True)
        mock_prompt.return_value = _entry("staging", "eu-west-1")

        assert main(["init"], store=store, runner=runner, cwd=module_dir) == exit_codes.SUCCESS
        mock_prompt.assert_called_once()

    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_cancelled_prompt_saves_nothing(
        self,
        mock_prompt: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        module_dir: Path,
    ) -> None:
        mock_prompt.side_effect = IncompleteSelectionError("environment")

        with pytest.raises(IncompleteSelectionError):
            main(["init", "-i"], store=store, runner=runner, cwd=module_dir)
        assert store.save_calls == 0
        assert runner.commands == []


# ---------------------------------------------------------------------------
# edit / show
# ---------------------------------------------------------------------------

class TestEditAndShow:
    @patch("tf_wrap.cli.selection_prompt.display_selection")
    @patch("tf_wrap.cli.selection_prompt.prompt_selection")
    def test_edit_saves_without_running(
        self,
        mock_prompt: MagicMock,
        _mock_display: MagicMock,
        store: InMemorySelectionStore,
        runner: RecordingRunner,
        repo: Path,
        module_dir: Path,
    ) -> None:
        mock_prompt.return_value = _entry("prod", "us-east-1")

        code = main(["edit"], store=store, runner=runner, cwd=module_dir)

        assert code == exit_codes.SUCCESS
        assert runner.commands == []
        assert store.load(str(repo.resolve()), MODULE_KEY) == _entry("prod", "us-east-1")

    @patch("tf_wrap.cli.selection_prompt.display_selection")
    def test_show_renders_paths(
        self,
        mock_display: MagicMock,
        store: InMemorySelectionStore,
        repo: Path,
        module_dir: Path,
    ) -> None:
        _seed(store, repo, _entry())

        assert main(["show"], store=store, cwd=module_dir) == exit_codes.SUCCESS

        entry, paths = mock_display.call_args.args
        assert entry == _entry()
        assert paths.var_file.is_file()
        assert store.save_calls == 0


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _run_cli(self, monkeypatch: pytest.MonkeyPatch, effect: object) -> int:
        monkeypatch.setattr(app_module, "main", MagicMock(side_effect=effect))
        with pytest.raises(SystemExit) as exc_info:
            cli()
        return int(exc_info.value.code)

    def test_known_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        code = self._run_cli(monkeypatch, MissingFileError(Path("x.tfvars")))
        assert code == exit_codes.GENERAL_ERROR

    def test_spawn_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        code = self._run_cli(monkeypatch, SpawnError("terraform is not installed"))
        assert code == exit_codes.SPAWN_ERROR

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run_cli(monkeypatch, KeyboardInterrupt()) == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run_cli(monkeypatch, RuntimeError("boom")) == exit_codes.UNEXPECTED_ERROR

    def test_child_code_is_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(app_module, "main", MagicMock(return_value=2))
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == 2
