"""Domain data models for SignalFeed.

Re-exports all model classes for convenient imports::

    from signalfeed.models import Signal, TraderSummary, PlatformStats
"""

from signalfeed.models.access import MetricsAccess, metrics_access_state
from signalfeed.models.signal import Signal, format_signal_time
from signalfeed.models.stats import PlatformStats
from signalfeed.models.trader import TraderSummary
from signalfeed.models.types import Direction, FilterTag, SignalId, TraderId, UserId

__all__ = [
    "Direction",
    "FilterTag",
    "MetricsAccess",
    "PlatformStats",
    "Signal",
    "SignalId",
    "TraderId",
    "TraderSummary",
    "UserId",
    "format_signal_time",
    "metrics_access_state",
]
