"""CLI application entry point and command routing for tf-wrap.

This module is the **sole error boundary** for the entire application.
It catches :class:`~tf_wrap.exceptions.TfWrapError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — resolution and dispatch are delegated to
  the core services, with infrastructure adapters injected.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* Once terraform runs, its exit code is returned unchanged.
"""

from __future__ import annotations

import argparse
import shlex
import sys
from collections.abc import Sequence
from pathlib import Path

from tf_wrap.cli import exit_codes
from tf_wrap.cli.console import console
from tf_wrap.config import Settings, get_state_dir
from tf_wrap.core.models import CacheEntry, RepoContext, Subcommand
from tf_wrap.core.protocols import ProcessRunner, SelectionStore
from tf_wrap.exceptions import CachePersistError, IncompleteSelectionError, TfWrapError
from tf_wrap.version import __version__

_WRAPPER_FLAGS: frozenset[str] = frozenset(
    {"-i", "--interactive", "-v", "--verbose", "-V", "--version", "-h", "--help"}
)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Commands:
    * ``tf-wrap init|plan|destroy [-i] [terraform args...]``
    * ``tf-wrap edit``  — change the remembered selection only
    * ``tf-wrap show``  — print what would be used
    * ``tf-wrap --version``

    ``-v`` may come before or after the command.
    """
    parser = argparse.ArgumentParser(
        prog="tf-wrap",
        description=(
            "Run terraform with backend and var files from "
            "$INFRA_DIR/$ENVIRONMENT/$REGION/$MODULE_NAME."
        ),
        epilog="Unrecognised arguments (or anything after --) are passed to terraform.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show cache and path diagnostics.",
    )

    # Accepted after the command too; SUPPRESS keeps a top-level -v intact.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Show cache and path diagnostics.",
    )

    interactive = argparse.ArgumentParser(add_help=False)
    interactive.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Choose environment and region before running.",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.add_parser(
        Subcommand.INIT.value,
        parents=[common, interactive],
        help="terraform init with the module's backend.tfvars.",
    )
    subparsers.add_parser(
        Subcommand.PLAN.value,
        parents=[common, interactive],
        help="terraform plan with the module's terraform.tfvars.",
    )
    subparsers.add_parser(
        Subcommand.DESTROY.value,
        parents=[common, interactive],
        help="terraform destroy with the module's terraform.tfvars.",
    )
    subparsers.add_parser(
        "edit",
        parents=[common],
        help="Change the remembered selection without running terraform.",
    )
    subparsers.add_parser(
        "show",
        parents=[common],
        help="Show the selection and paths that would be used.",
    )
    return parser


def split_passthrough(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Separate tf-wrap's own tokens from arguments meant for terraform.

    Terraform flags are single-dash words (``-target=...``) that argparse
    would misread as bundled short options, so only exact wrapper flags
    and the command name are kept.  Everything after ``--`` is passed
    through untouched.
    """
    own: list[str] = []
    passthrough: list[str] = []
    command_seen = False
    for index, token in enumerate(argv):
        if token == "--":
            passthrough.extend(argv[index + 1:])
            break
        if token in _WRAPPER_FLAGS:
            own.append(token)
        elif not command_seen and not token.startswith("-"):
            own.append(token)
            command_seen = True
        else:
            passthrough.append(token)
    return own, passthrough


# ---------------------------------------------------------------------------
# Shared steps
# ---------------------------------------------------------------------------

def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def _persist(store: SelectionStore, context: RepoContext, entry: CacheEntry) -> None:
    """Save *entry*; a failure is reported but never aborts the run."""
    try:
        store.save(context.key, context.module_key, entry)
    except CachePersistError as exc:
        console.warn(str(exc), exc.hint)
        return
    console.debug(f"Saved selection for {context.module_key} in {context.key}")


def _select(
    entry: CacheEntry,
    context: RepoContext,
    *,
    interactive: bool,
) -> CacheEntry:
    """Run the prompt when asked to, or when no environment is known."""
    from tf_wrap.cli.selection_prompt import prompt_selection

    if interactive:
        return prompt_selection(entry, context)
    if entry.segments.is_complete:
        return entry
    if _stdin_is_interactive():
        console.print("[yellow]No environment selected yet for this module.[/yellow]")
        return prompt_selection(entry, context)
    raise IncompleteSelectionError(
        "environment",
        hint="Run 'tf-wrap edit' or pass -i from an interactive terminal.",
    )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_run(
    subcommand: Subcommand,
    interactive: bool,
    extra_args: Sequence[str],
    *,
    settings: Settings,
    store: SelectionStore,
    runner: ProcessRunner,
    context: RepoContext,
) -> int:
    """Resolve, optionally prompt, validate, persist, then run terraform.

    Flow:
    1. Resolve the cached (or default) selection.
    2. Prompt when ``-i`` was given or no environment is known.
    3. Compute and validate the backend/var file paths.
    4. Persist the selection (warning only on failure).
    5. Run terraform and return its exit code.
    """
    from tf_wrap.core.dispatcher import CommandDispatcher
    from tf_wrap.core.resolver import PathResolver

    resolver = PathResolver(store, settings)
    entry = _select(resolver.resolve(context), context, interactive=interactive)

    infra_path = resolver.infra_path(context, entry)
    console.debug(f"Infra dir resolved to {infra_path}")

    dispatcher = CommandDispatcher(runner, terraform_bin=settings.terraform_bin)
    paths = dispatcher.build_paths(infra_path, entry.segments)

    def before_run(command: list[str]) -> None:
        _persist(store, context, entry)
        console.print(f"[bold]{shlex.join(command)}[/bold]")

    return dispatcher.dispatch(subcommand, paths, extra_args, on_validated=before_run)


def _handle_edit(
    *,
    settings: Settings,
    store: SelectionStore,
    context: RepoContext,
) -> int:
    """Prompt for a new selection and remember it."""
    from tf_wrap.cli.selection_prompt import display_selection, prompt_selection
    from tf_wrap.core.resolver import PathResolver

    resolver = PathResolver(store, settings)
    entry = prompt_selection(resolver.resolve(context), context)
    _persist(store, context, entry)
    display_selection(entry, title="Saved selection")
    return exit_codes.SUCCESS


def _handle_show(
    *,
    settings: Settings,
    store: SelectionStore,
    context: RepoContext,
) -> int:
    """Render the non-interactive selection and the paths it yields."""
    from tf_wrap.cli.selection_prompt import display_selection
    from tf_wrap.core.dispatcher import CommandDispatcher
    from tf_wrap.core.resolver import PathResolver

    resolver = PathResolver(store, settings)
    entry = resolver.resolve(context)
    paths = CommandDispatcher.build_paths(
        resolver.infra_path(context, entry),
        entry.segments,
    )
    display_selection(entry, paths, title=f"{context.module_key} ({context.key})")
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    store: SelectionStore | None = None,
    runner: ProcessRunner | None = None,
    cwd: Path | None = None,
) -> int:
    """Run the tf-wrap CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    store, runner:
        Replacements for the TOML cache and the subprocess runner.
    cwd:
        Working directory to resolve from; defaults to the process's.

    Returns
    -------
    int
        OS process exit code — terraform's own once it has run.
    """
    parser = _build_parser()
    own, passthrough = split_passthrough(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(own)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    console.verbose = args.verbose

    from tf_wrap.infra.git import detect_context

    settings = Settings.from_env()
    if store is None:
        from tf_wrap.infra.cache_store import TomlSelectionStore

        store = TomlSelectionStore(settings.state_dir or get_state_dir())
        console.debug(f"Selection cache directory {settings.state_dir}")
    context = detect_context(cwd or Path.cwd())
    console.debug(f"Repository {context.key}, module {context.module_key}")

    if args.command in ("edit", "show"):
        if passthrough:
            parser.error(f"unrecognized arguments: {' '.join(passthrough)}")
        handler = _handle_edit if args.command == "edit" else _handle_show
        return handler(settings=settings, store=store, context=context)

    if runner is None:
        from tf_wrap.infra.terraform_runner import SubprocessRunner

        runner = SubprocessRunner()

    return _handle_run(
        Subcommand(args.command),
        args.interactive,
        passthrough,
        settings=settings,
        store=store,
        runner=runner,
        context=context,
    )


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except TfWrapError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
