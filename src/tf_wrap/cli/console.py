"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.

It is also the only diagnostic channel: warnings and ``--verbose``
detail go through :data:`console` to stderr, keeping stdout free for
terraform itself.
"""

from __future__ import annotations

import sys
from typing import Any

from tf_wrap.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def __init__(self) -> None:
		self.verbose: bool = False

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)

	def warn(self, message: str, hint: str | None = None) -> None:
		"""Render a non-fatal problem."""
		self.print(f"[bold yellow]Warning:[/bold yellow] {message}")
		if hint:
			self.print(f"[yellow]Hint:[/yellow] {hint}")

	def debug(self, message: str) -> None:
		"""Render *message* only when ``--verbose`` was given."""
		if self.verbose:
			self.print(f"[dim]{message}[/dim]")


console = _ConsoleProxy()
