"""Per-screen feed state.

A single :class:`LoadState` value says which kind of load (initial,
refresh, load-more) is running, so at most one is in progress.  The
``initial_loading``/``refreshing``/``loading_more`` flags are views of it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from signalfeed.core.constants import DEFAULT_PAGE_SIZE, FILTER_ALL
from signalfeed.models.signal import Signal


class LoadState(Enum):
    """Lifecycle of the feed's data."""

    IDLE = "idle"
    INITIAL_LOADING = "initial_loading"
    REFRESHING = "refreshing"
    LOADING_MORE = "loading_more"
    LOADED = "loaded"
    ERROR = "error"

    @property
    def is_loading(self) -> bool:
        return self in _LOADING_STATES


_LOADING_STATES = frozenset(
    {LoadState.INITIAL_LOADING, LoadState.REFRESHING, LoadState.LOADING_MORE}
)


@dataclass
class FeedState:
    """Working set owned by one controller; discarded on close."""

    signals: list[Signal] = field(default_factory=list)
    filters: frozenset[str] = frozenset({FILTER_ALL})
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    has_more: bool = True
    load_state: LoadState = LoadState.IDLE
    last_error: BaseException | None = None

    @property
    def initial_loading(self) -> bool:
        return self.load_state is LoadState.INITIAL_LOADING

    @property
    def refreshing(self) -> bool:
        return self.load_state is LoadState.REFRESHING

    @property
    def loading_more(self) -> bool:
        return self.load_state is LoadState.LOADING_MORE

    @property
    def signal_ids(self) -> set[str]:
        return {s.id for s in self.signals}

    def to_dict(self) -> dict[str, object]:
        """Summary for logging and debugging (signals by id only)."""
        return {
            "signals": [s.id for s in self.signals],
            "filters": sorted(self.filters),
            "page": self.page,
            "page_size": self.page_size,
            "has_more": self.has_more,
            "load_state": self.load_state.value,
            "last_error": repr(self.last_error) if self.last_error else "",
        }
