"""Page merging helpers: every function returns a list with unique ids."""

from __future__ import annotations

from collections.abc import Collection, Iterable

from signalfeed.models.signal import Signal


def dedupe(signals: Iterable[Signal]) -> list[Signal]:
    """Drop repeated ids.  Position of first sighting, value of last."""
    by_id: dict[str, Signal] = {}
    for s in signals:
        by_id[s.id] = s
    return list(by_id.values())


def merge_by_id(*batches: Iterable[Signal]) -> list[Signal]:
    """Union of *batches* keyed by id (last write wins), newest first.

    The sort is stable, so equal timestamps keep their merged order and
    the result does not depend on which concurrent fetch finished first
    beyond the last-write-wins choice.
    """
    merged = dedupe(s for batch in batches for s in batch)
    merged.sort(key=lambda s: s.signal_time, reverse=True)
    return merged


def append_unseen(existing: list[Signal], incoming: Iterable[Signal]) -> tuple[list[Signal], int]:
    """Append signals whose id is not in *existing*; return (list, added)."""
    seen = {s.id for s in existing}
    out = list(existing)
    added = 0
    for s in incoming:
        if s.id in seen:
            continue
        seen.add(s.id)
        out.append(s)
        added += 1
    return out, added


def filter_by_traders(signals: Iterable[Signal], trader_ids: Collection[str]) -> list[Signal]:
    return [s for s in signals if s.trader_id in trader_ids]
