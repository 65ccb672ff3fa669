"""Interactive environment/region selection UI for the CLI layer.

This module is responsible for:

* Rendering a Rich table showing the current selection and paths.
* Prompting for infra dir, environment and region via questionary.
* Returning the confirmed :class:`~tf_wrap.core.models.CacheEntry`.

All display-related logic lives here — directory discovery is
delegated to :mod:`tf_wrap.infra.layout`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tf_wrap.cli.console import console
from tf_wrap.core.models import CacheEntry, ModulePaths, PathSegments, RepoContext
from tf_wrap.core.resolver import PathResolver
from tf_wrap.exceptions import EnvironmentError, IncompleteSelectionError
from tf_wrap.infra.layout import list_environments, list_regions

OTHER_CHOICE: str = "\x00other"
"""Sentinel value of the "type another value" entry in select prompts."""

OTHER_LABEL: str = "Other…"


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for selection rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms — no I/O themselves)
# ---------------------------------------------------------------------------

def _format_segment(value: str | None) -> str:
    """Render a segment value or ``"(unset)"``."""
    return value if value else "(unset)"


def _format_exists(exists: bool) -> str:
    return "[green]yes[/green]" if exists else "[red]missing[/red]"


def _selection_rows(entry: CacheEntry) -> list[tuple[str, str]]:
    """Return (label, value) rows describing *entry*."""
    return [
        ("Infra dir", entry.infra_dir),
        ("Environment", _format_segment(entry.segments.environment)),
        ("Region", _format_segment(entry.segments.region)),
        ("Module", entry.segments.module),
    ]


# ---------------------------------------------------------------------------
# Rich table display
# ---------------------------------------------------------------------------

def display_selection(
    entry: CacheEntry,
    paths: ModulePaths | None = None,
    *,
    title: str = "Current selection",
) -> None:
    """Print a Rich table summarising *entry* and, optionally, its paths."""
    table_class = _import_rich_table()

    table = table_class(
        title=title,
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Segment", justify="left", style="bold", min_width=12)
    table.add_column("Value", justify="left", min_width=20)
    table.add_column("Exists", justify="center", min_width=8)

    for label, value in _selection_rows(entry):
        table.add_row(label, value, "")

    if paths is not None:
        for label, path in (
            ("Module path", paths.module_path),
            ("Backend", paths.backend_config),
            ("Var file", paths.var_file),
        ):
            exists = path.is_dir() if path == paths.module_path else path.is_file()
            table.add_row(label, str(path), _format_exists(exists))

    console.print()
    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Individual prompts
# ---------------------------------------------------------------------------

def _ask_text(questionary: Any, message: str, segment: str, default: str = "") -> str:
    """Ask for free text; cancellation or an empty answer is an error."""
    answer: str | None = questionary.text(message, default=default).ask()
    if answer is None or not answer.strip():
        raise IncompleteSelectionError(
            segment,
            hint=f"Type a value for {segment}, then press Enter.",
        )
    return answer.strip()


def _ask_choice(
    questionary: Any,
    message: str,
    segment: str,
    options: Sequence[str],
) -> str:
    """Ask the user to pick from *options*, with an "Other…" escape hatch.

    With no options at all the user goes straight to free text.
    """
    if not options:
        return _ask_text(questionary, f"{message}:", segment)

    choices = [questionary.Choice(title=option, value=option) for option in options]
    choices.append(questionary.Choice(title=OTHER_LABEL, value=OTHER_CHOICE))

    selected: str | None = questionary.select(
        f"Select {segment}:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()  # Returns None on Ctrl+C / Esc

    if selected is None:
        raise IncompleteSelectionError(
            segment,
            hint="Use arrow keys to pick a value, then press Enter.",
        )
    if selected == OTHER_CHOICE:
        return _ask_text(questionary, f"{message}:", segment, default=options[0])
    return selected


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_selection(current: CacheEntry, context: RepoContext) -> CacheEntry:
    """Display *current* and prompt the user for a new selection.

    Parameters
    ----------
    current:
        The entry that would be used without interaction; its values are
        offered as defaults.
    context:
        The invocation context, used to resolve the infra dir.

    Returns
    -------
    CacheEntry
        The confirmed selection.  The module segment is never changed.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C during selection.
    IncompleteSelectionError
        If the user cancels a prompt or leaves a value empty.
    InvalidLocationError
        If the chosen infra dir does not exist.
    """
    questionary = _import_questionary()

    display_selection(current)

    infra_dir = _ask_text(questionary, "Infra dir:", "infra_dir", default=current.infra_dir)
    candidate = CacheEntry(segments=current.segments, infra_dir=infra_dir)
    infra_path = PathResolver.infra_path(context, candidate)

    environment = _ask_choice(
        questionary,
        "Environment",
        "environment",
        list_environments(infra_path, current.segments.environment),
    )
    region = _ask_choice(
        questionary,
        "Region",
        "region",
        list_regions(infra_path, environment, current.segments.region),
    )

    return CacheEntry(
        segments=PathSegments(
            environment=environment,
            region=region,
            module=current.segments.module,
        ),
        infra_dir=infra_dir,
    )
