"""Shared pytest fixtures for SignalFeed tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from signalfeed.core.backend_client import SignalDataSource
from signalfeed.core.config import FeedConfig
from signalfeed.models.signal import Signal
from signalfeed.models.stats import PlatformStats

BASE_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def build_signal(
    signal_id: str,
    trader_id: str = "t1",
    direction: str = "long",
    minutes_ago: int = 0,
    **kwargs: Any,
) -> Signal:
    """A signal issued *minutes_ago* before ``BASE_TIME``."""
    fields: dict[str, Any] = {
        "currency": "BTC/USDT",
        "entry_price": "100",
        "stop_loss": "90" if direction == "long" else "110",
        "take_profit": "120" if direction == "long" else "80",
    }
    fields.update(kwargs)
    return Signal(
        id=signal_id,
        trader_id=trader_id,
        direction=direction,
        signal_time=BASE_TIME - timedelta(minutes=minutes_ago),
        **fields,
    )


class FakeSignalSource(SignalDataSource):
    """Deterministic in-memory source that records every call.

    Signals are served newest first, truncated to ``max_count``, the way
    the backend orders and limits them.
    """

    def __init__(
        self,
        signals: Iterable[Signal] = (),
        user_id: str | None = None,
        subscribed: Iterable[str] = (),
        followed: Iterable[str] = (),
        fail: BaseException | None = None,
        stats: PlatformStats | None = None,
    ) -> None:
        self.signals = list(signals)
        self.user_id = user_id
        self.subscribed = list(subscribed)
        self.followed = list(followed)
        self.fail = fail
        self.stats = stats
        self.calls: list[tuple[Any, ...]] = []

    def _serve(self, signals: list[Signal], max_count: int) -> list[Signal]:
        if self.fail is not None:
            raise self.fail
        ordered = sorted(signals, key=lambda s: s.signal_time, reverse=True)
        return ordered[:max_count]

    def fetch_active_signals(self, max_count: int) -> list[Signal]:
        self.calls.append(("active", max_count))
        return self._serve([s for s in self.signals if s.is_active], max_count)

    def fetch_signals_by_direction(self, direction: str, max_count: int) -> list[Signal]:
        self.calls.append(("direction", direction, max_count))
        matching = [s for s in self.signals if s.is_active and s.direction == direction]
        return self._serve(matching, max_count)

    def fetch_subscribed_trader_ids(self, user_id: str) -> list[str]:
        self.calls.append(("subscribed", user_id))
        return list(self.subscribed)

    def fetch_followed_trader_ids(self, user_id: str) -> list[str]:
        self.calls.append(("followed", user_id))
        return list(self.followed)

    def current_user_id(self) -> str | None:
        return self.user_id

    def fetch_platform_stats(self) -> PlatformStats:
        self.calls.append(("stats",))
        if self.fail is not None:
            raise self.fail
        return self.stats or PlatformStats.zero()

    @property
    def fetch_calls(self) -> list[tuple[Any, ...]]:
        """Only the signal fetches (active/direction)."""
        return [c for c in self.calls if c[0] in ("active", "direction")]


@pytest.fixture
def make_signal() -> Callable[..., Signal]:
    """Return the :func:`build_signal` factory."""
    return build_signal


@pytest.fixture
def make_source() -> Callable[..., FakeSignalSource]:
    """Return a factory for :class:`FakeSignalSource`."""
    return FakeSignalSource


@pytest.fixture
def small_config() -> FeedConfig:
    """Page size 20 and a short notice so timer tests stay fast."""
    return FeedConfig(page_size=20, refresh_notice_seconds=0.05)


@pytest.fixture
def sample_settings_dict() -> dict[str, Any]:
    """Return a raw feed_settings.json-style dict for testing config loading."""
    return {
        "page_size": 30,
        "refresh_notice_seconds": 2.0,
        "request_timeout": 5,
        "max_retries": 2,
        "calls_per_second": 4.0,
        "default_filters": ["long", "subscribed"],
    }


@pytest.fixture
def settings_file(tmp_path: Path, sample_settings_dict: dict[str, Any]) -> Path:
    """Write a sample feed_settings.json and return its path."""
    p = tmp_path / "feed_settings.json"
    p.write_text(json.dumps(sample_settings_dict, indent=2), encoding="utf-8")
    return p
