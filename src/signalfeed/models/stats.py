"""Platform-wide statistics shown above the signal feed."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PlatformStats:
    """Counters returned by the ``get_platform_stats`` remote function."""

    today_signal_count: int = 0
    long_signal_count: int = 0
    short_signal_count: int = 0
    active_trader_count: int = 0
    trading_pair_count: int = 0

    @classmethod
    def zero(cls) -> PlatformStats:
        return cls()

    @classmethod
    def from_rpc(cls, payload: Any) -> PlatformStats:
        """Build from the RPC JSON object; missing or bad fields count as 0.

        Some backends wrap a single-row result in a list, so a one-element
        list is unwrapped first.
        """
        if isinstance(payload, list) and payload:
            payload = payload[0]
        if not isinstance(payload, Mapping):
            return cls.zero()
        return cls(
            today_signal_count=_count(payload, "today_signal_count"),
            long_signal_count=_count(payload, "long_signal_count"),
            short_signal_count=_count(payload, "short_signal_count"),
            active_trader_count=_count(payload, "active_trader_count"),
            trading_pair_count=_count(payload, "trading_pair_count"),
        )

    @property
    def long_share(self) -> float:
        """Fraction of directional signals that are long (0.0 when none)."""
        total = self.long_signal_count + self.short_signal_count
        return self.long_signal_count / total if total else 0.0


def _count(data: Mapping[str, Any], key: str) -> int:
    try:
        return max(0, int(data.get(key) or 0))
    except (TypeError, ValueError):
        return 0
