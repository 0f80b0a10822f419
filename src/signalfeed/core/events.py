"""In-process event system for the feed's rendering layer.

The controller publishes what changed; list views, spinners and the toast
subscribe without holding a reference to the controller.

Usage::

    bus = EventBus()
    bus.subscribe(FeedUpdated, render_list)
    bus.subscribe(NoticeShown, show_toast)
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Type

from signalfeed.feed.state import LoadState

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Event types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadStateChanged:
    """Emitted on every load-state transition."""

    previous: LoadState
    current: LoadState


@dataclass(frozen=True)
class FeedUpdated:
    """Emitted after a successful load replaced or extended the list."""

    count: int
    added: int
    has_more: bool
    reset: bool


@dataclass(frozen=True)
class FeedLoadFailed:
    """Emitted when a load failed; the list was left unchanged."""

    message: str
    exc_type: str
    reset: bool


@dataclass(frozen=True)
class NoticeShown:
    """A transient confirmation message, e.g. after pull-to-refresh."""

    message: str
    duration_seconds: float


@dataclass(frozen=True)
class NoticeDismissed:
    """The transient message timed out or the screen closed."""

    message: str


# Type alias for event handlers
EventHandler = Callable[[Any], None]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """In-process pub/sub event bus.

    Thread-safe.  Handlers run synchronously on the publishing thread,
    which for the feed controller is the event-loop thread.
    """

    def __init__(self) -> None:
        self._handlers: dict[Type, list[EventHandler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Register *handler* to be called when *event_type* is published."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type, handler: EventHandler) -> None:
        """Remove *handler* from *event_type* subscribers."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def publish(self, event: object) -> None:
        """Dispatch *event* to all registered handlers for its type.

        Handlers are called in registration order. If a handler raises,
        the exception is logged and remaining handlers still execute.
        """
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Event handler %s failed for %s",
                    getattr(handler, "__name__", repr(handler)),
                    type(event).__name__,
                )

    def clear(self) -> None:
        """Remove all subscriptions."""
        with self._lock:
            self._handlers.clear()

    def has_subscribers(self, event_type: Type) -> bool:
        """Return ``True`` if *event_type* has at least one subscriber."""
        with self._lock:
            return bool(self._handlers.get(event_type))
