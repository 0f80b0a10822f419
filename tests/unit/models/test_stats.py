"""Tests for signalfeed.models.stats."""

from __future__ import annotations

import pytest

from signalfeed.models.stats import PlatformStats


class TestFromRpc:
    def test_object_payload(self) -> None:
        stats = PlatformStats.from_rpc(
            {
                "today_signal_count": 12,
                "long_signal_count": 9,
                "short_signal_count": 3,
                "active_trader_count": 4,
                "trading_pair_count": 6,
            }
        )
        assert stats == PlatformStats(12, 9, 3, 4, 6)

    def test_single_row_list_unwrapped(self) -> None:
        stats = PlatformStats.from_rpc([{"today_signal_count": "5"}])
        assert stats.today_signal_count == 5
        assert stats.long_signal_count == 0

    @pytest.mark.parametrize("payload", [None, [], "oops", 3])
    def test_unusable_payload_is_zero(self, payload: object) -> None:
        assert PlatformStats.from_rpc(payload) == PlatformStats.zero()

    def test_bad_and_negative_values(self) -> None:
        stats = PlatformStats.from_rpc({"today_signal_count": -4, "long_signal_count": "x"})
        assert stats.today_signal_count == 0
        assert stats.long_signal_count == 0


class TestLongShare:
    def test_share(self) -> None:
        assert PlatformStats(long_signal_count=3, short_signal_count=1).long_share == 0.75

    def test_no_signals(self) -> None:
        assert PlatformStats.zero().long_share == 0.0
