"""Pure ordering logic for the interactive environment/region choices.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic.

Pipeline order (enforced by :func:`order_choices`):

1. **Filter** — drop hidden and excluded directory names.
2. **Sort** — alphabetical, so the list is stable across runs.
3. **Promote** — the previously used value moves to the front.
4. **Deduplicate** — first occurrence wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

EXCLUDED_NAMES: frozenset[str] = frozenset({"terraform"})
"""Directory names under the infra dir that are never environments."""


def filter_candidates(
    names: Iterable[str],
    *,
    excluded: frozenset[str] = frozenset(),
) -> list[str]:
    """Drop empty, hidden (dot-prefixed) and *excluded* names."""
    return [
        name
        for name in names
        if name and not name.startswith(".") and name not in excluded
    ]


def deduplicate(names: Sequence[str]) -> list[str]:
    """Remove repeated names, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            result.append(name)
    return result


def order_choices(
    candidates: Iterable[str],
    preferred: str | None = None,
    *,
    excluded: frozenset[str] = frozenset(),
) -> list[str]:
    """Return prompt choices with *preferred* first, the rest sorted.

    *preferred* is kept even when it is not among *candidates* — a
    cached value whose directory was removed is still offered.
    """
    ordered = sorted(filter_candidates(candidates, excluded=excluded))
    if preferred:
        ordered.insert(0, preferred)
    return deduplicate(ordered)
