"""Signal feed controller: paginated, filtered, de-duplicated signal list.

One controller backs one screen.  It owns the :class:`FeedState`, talks to
a :class:`SignalDataSource`, and publishes changes on an :class:`EventBus`.

Every data-source call runs in a worker thread (``asyncio.to_thread``) so
the event loop stays responsive; the long+short fan-out and the scope-id
lookups run concurrently.  Loads carry a generation number: a reset
(filter change, refresh) supersedes loads started before it, and their
results are dropped instead of being merged into the new list.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from signalfeed.core.backend_client import SignalDataSource
from signalfeed.core.config import FeedConfig
from signalfeed.core.constants import (
    DIRECTION_LONG,
    DIRECTION_SHORT,
    FILTER_FOLLOWED,
    FILTER_SUBSCRIBED,
)
from signalfeed.core.events import (
    EventBus,
    FeedLoadFailed,
    FeedUpdated,
    LoadStateChanged,
    NoticeDismissed,
    NoticeShown,
)
from signalfeed.core.exceptions import ConfigError
from signalfeed.feed.filters import directions_of, normalize_filters, scopes_of
from signalfeed.feed.merge import append_unseen, dedupe, filter_by_traders, merge_by_id
from signalfeed.feed.state import FeedState, LoadState
from signalfeed.models.signal import Signal
from signalfeed.models.stats import PlatformStats

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SignalFeedController:
    """Feed logic for the signal tab.

    Parameters
    ----------
    source:
        Where signals and the user's trader relationships come from.
    config:
        Page size and notice duration.  Defaults to :class:`FeedConfig()`.
    bus:
        Event bus for the rendering layer.  A private one is created when
        omitted; reach it through :attr:`bus`.
    filters:
        Initial filter tags.  Defaults to ``config.default_filters``.
    """

    def __init__(
        self,
        source: SignalDataSource,
        config: FeedConfig | None = None,
        bus: EventBus | None = None,
        filters: Iterable[str] | None = None,
    ) -> None:
        self._source = source
        self._config = config or FeedConfig()
        if self._config.page_size < 1:
            raise ConfigError(f"page_size must be >= 1, got {self._config.page_size}")
        self._bus = bus or EventBus()
        initial = normalize_filters(
            filters if filters is not None else self._config.default_filters
        )
        self.state = FeedState(filters=initial, page_size=self._config.page_size)
        self.notice: str | None = None
        self.stats: PlatformStats = PlatformStats.zero()
        self._generation = 0
        self._tasks: set[asyncio.Task[Any]] = set()
        self._notice_handle: asyncio.TimerHandle | None = None
        self._closed = False

    # -- read-only views ------------------------------------------------------

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def signals(self) -> list[Signal]:
        return list(self.state.signals)

    @property
    def filters(self) -> frozenset[str]:
        return self.state.filters

    @property
    def has_more(self) -> bool:
        return self.state.has_more

    @property
    def load_state(self) -> LoadState:
        return self.state.load_state

    @property
    def closed(self) -> bool:
        return self._closed

    # -- lifetime -------------------------------------------------------------

    async def __aenter__(self) -> SignalFeedController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Tear down: cancel in-flight loads and the notice timer.

        No state changes happen after this returns.
        """
        if self._closed:
            return
        self._closed = True
        current = _current_task()
        for task in list(self._tasks):
            if task is not current:
                task.cancel()
        self._tasks.clear()
        if self._notice_handle is not None:
            self._notice_handle.cancel()
            self._notice_handle = None
        logger.debug("Feed controller closed")

    # -- operations -----------------------------------------------------------

    async def start(self) -> bool:
        """First load when the screen mounts."""
        return await self.load_signals(reset=True)

    async def set_filters(self, new_filters: Iterable[str]) -> frozenset[str]:
        """Apply *new_filters* (normalised against the active set) and reload.

        The reload happens even when the set did not change.
        """
        normalized = normalize_filters(new_filters, self.state.filters)
        logger.info("Filters %s -> %s", sorted(self.state.filters), sorted(normalized))
        self.state.filters = normalized
        await self.load_signals(reset=True)
        return normalized

    async def load_signals(self, reset: bool, is_refreshing: bool = False) -> bool:
        """Fetch a page.  Returns ``True`` if the feed was updated.

        ``reset`` reloads from page 1 and replaces the list; otherwise the
        next cumulative page is requested and only unseen ids are appended.
        Fetch errors never propagate: they move the feed to
        :attr:`LoadState.ERROR` with the list untouched.
        """
        if self._closed:
            logger.debug("load_signals ignored: controller closed")
            return False
        task = _current_task()
        if task is not None:
            self._tasks.add(task)
        try:
            return await self._load(reset, is_refreshing)
        finally:
            if task is not None:
                self._tasks.discard(task)

    async def on_refresh(self) -> bool:
        """Pull-to-refresh: reload page 1 and flash a confirmation notice."""
        ok = await self.load_signals(reset=True, is_refreshing=True)
        if ok and not self._closed:
            self._show_notice(f"Loaded {len(self.state.signals)} signals")
        return ok

    async def on_load_more(self) -> bool:
        """Infinite-scroll hook; no-op while loading or when exhausted."""
        if self._closed or self.state.load_state.is_loading or not self.state.has_more:
            logger.debug(
                "load more skipped (state=%s, has_more=%s)",
                self.state.load_state.value,
                self.state.has_more,
            )
            return False
        return await self.load_signals(reset=False)

    async def load_platform_stats(self) -> PlatformStats:
        """Refresh the header counters; zeros when the backend fails."""
        try:
            stats = await self._call(self._source.fetch_platform_stats)
        except Exception as exc:
            logger.warning("Platform stats unavailable: %s", exc)
            stats = PlatformStats.zero()
        if not self._closed:
            self.stats = stats
        return stats

    # -- load pipeline --------------------------------------------------------

    async def _load(self, reset: bool, is_refreshing: bool) -> bool:
        if reset:
            self._generation += 1
            # Cursor restarts even if this fetch fails; the list stays as is.
            self.state.page = 0
            self.state.has_more = True
            target_page = 1
            self._set_load_state(
                LoadState.REFRESHING if is_refreshing else LoadState.INITIAL_LOADING
            )
        else:
            target_page = self.state.page + 1
            self._set_load_state(LoadState.LOADING_MORE)

        generation = self._generation
        filters = self.state.filters
        limit = self.state.page_size * target_page

        try:
            fetched, returned = await self._fetch(filters, limit)
        except Exception as exc:
            if self._superseded(generation):
                logger.debug("Ignoring failure of superseded load: %s", exc)
                return False
            logger.error(
                "Signal load failed (reset=%s, page=%d): %s",
                reset,
                target_page,
                exc,
                exc_info=True,
            )
            self.state.last_error = exc
            self._set_load_state(LoadState.ERROR)
            self._bus.publish(
                FeedLoadFailed(message=str(exc), exc_type=type(exc).__name__, reset=reset)
            )
            return False

        if self._superseded(generation):
            logger.debug("Dropping %d signals from superseded load", len(fetched))
            return False

        if reset:
            self.state.signals = fetched
            added = len(fetched)
        else:
            self.state.signals, added = append_unseen(self.state.signals, fetched)
        self.state.page = target_page
        self.state.has_more = returned >= limit
        self.state.last_error = None
        self._set_load_state(LoadState.LOADED)

        logger.info(
            "Loaded page %d: %d signals (+%d), has_more=%s",
            target_page,
            len(self.state.signals),
            added,
            self.state.has_more,
        )
        self._bus.publish(
            FeedUpdated(
                count=len(self.state.signals),
                added=added,
                has_more=self.state.has_more,
                reset=reset,
            )
        )
        return True

    async def _fetch(self, filters: frozenset[str], limit: int) -> tuple[list[Signal], int]:
        """Return (signals to show, unique count the source returned).

        The returned count is taken before scope filtering, so it reflects
        whether the source has more rows, not how many survived the filter.
        """
        directions = directions_of(filters)
        scopes = scopes_of(filters)
        user_id = self._source.current_user_id() if scopes else None

        if len(directions) == 2:
            signals_job = self._fetch_both_directions(limit)
        elif directions:
            (direction,) = directions
            signals_job = self._call(self._source.fetch_signals_by_direction, direction, limit)
        else:
            signals_job = self._call(self._source.fetch_active_signals, limit)

        allowed: set[str] | None = None
        if scopes and user_id:
            signals, allowed = await asyncio.gather(
                signals_job, self._fetch_scope_ids(scopes, user_id)
            )
        else:
            if scopes:
                logger.info("Scope filter %s ignored: no signed-in user", sorted(scopes))
            signals = await signals_job

        unique = dedupe(signals)
        returned = len(unique)
        if allowed is not None:
            unique = filter_by_traders(unique, allowed)
        return unique, returned

    async def _fetch_both_directions(self, limit: int) -> list[Signal]:
        longs, shorts = await asyncio.gather(
            self._call(self._source.fetch_signals_by_direction, DIRECTION_LONG, limit),
            self._call(self._source.fetch_signals_by_direction, DIRECTION_SHORT, limit),
        )
        return merge_by_id(longs, shorts)

    async def _fetch_scope_ids(self, scopes: frozenset[str], user_id: str) -> set[str]:
        """Union of trader ids across the active scopes."""
        jobs = []
        if FILTER_SUBSCRIBED in scopes:
            jobs.append(self._call(self._source.fetch_subscribed_trader_ids, user_id))
        if FILTER_FOLLOWED in scopes:
            jobs.append(self._call(self._source.fetch_followed_trader_ids, user_id))
        results = await asyncio.gather(*jobs)
        return {trader_id for ids in results for trader_id in ids}

    @staticmethod
    async def _call(func: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(func, *args)

    # -- state helpers --------------------------------------------------------

    def _superseded(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def _set_load_state(self, new: LoadState) -> None:
        previous = self.state.load_state
        self.state.load_state = new
        if previous is not new:
            self._bus.publish(LoadStateChanged(previous=previous, current=new))

    def _show_notice(self, message: str) -> None:
        if self._notice_handle is not None:
            self._notice_handle.cancel()
        duration = self._config.refresh_notice_seconds
        self.notice = message
        self._bus.publish(NoticeShown(message=message, duration_seconds=duration))
        loop = asyncio.get_running_loop()
        self._notice_handle = loop.call_later(duration, self._dismiss_notice, message)

    def _dismiss_notice(self, message: str) -> None:
        self._notice_handle = None
        if self._closed or self.notice != message:
            return
        self.notice = None
        self._bus.publish(NoticeDismissed(message=message))


def _current_task() -> asyncio.Task[Any] | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
