"""Feed filter normalisation.

A filter set mixes one *direction* selection (``all``, ``long``, ``short``,
or both ``long`` and ``short``) with optional *scope* tags
(``subscribed``, ``followed``).
"""

from __future__ import annotations

from collections.abc import Iterable

from signalfeed.core.constants import (
    ALL_FILTERS,
    FILTER_ALL,
    FILTER_LONG,
    FILTER_SHORT,
    SCOPE_FILTERS,
)

SPECIFIC_DIRECTIONS = frozenset({FILTER_LONG, FILTER_SHORT})


def parse_filters(tags: Iterable[str]) -> frozenset[str]:
    """Lower-case and validate *tags*; raise ``ValueError`` on unknown ones."""
    parsed = frozenset(str(t).strip().lower() for t in tags)
    unknown = parsed - ALL_FILTERS
    if unknown:
        raise ValueError(f"Unknown filter tags: {sorted(unknown)}")
    return parsed


def normalize_filters(
    selected: Iterable[str],
    previous: Iterable[str] = (),
) -> frozenset[str]:
    """Resolve ``all`` against specific directions.

    * ``all`` newly selected (absent from *previous*) wins: every specific
      direction is dropped.
    * otherwise any specific direction removes ``all``.
    * an empty result becomes ``{"all"}``.

    Scope tags pass through untouched.
    """
    tags = set(parse_filters(selected))
    before = parse_filters(previous)

    if FILTER_ALL in tags and tags & SPECIFIC_DIRECTIONS:
        if FILTER_ALL not in before:
            tags -= SPECIFIC_DIRECTIONS
        else:
            tags.discard(FILTER_ALL)

    if not tags:
        tags = {FILTER_ALL}
    return frozenset(tags)


def toggle_filter(current: Iterable[str], tag: str) -> frozenset[str]:
    """Chip-style toggle of *tag* on *current*, then normalise."""
    before = parse_filters(current)
    (tag,) = parse_filters([tag])
    if tag in before:
        selected = before - {tag}
    else:
        selected = before | {tag}
    return normalize_filters(selected, before)


def directions_of(filters: Iterable[str]) -> frozenset[str]:
    """The specific directions requested (empty means "all")."""
    return frozenset(filters) & SPECIFIC_DIRECTIONS


def scopes_of(filters: Iterable[str]) -> frozenset[str]:
    return frozenset(filters) & SCOPE_FILTERS
