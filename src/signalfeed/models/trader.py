"""Trader summary embedded in signal rows and returned by trader queries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from signalfeed.models.timestamps import parse_timestamp


@dataclass(frozen=True, slots=True)
class TraderSummary:
    """The trader card data shown next to each signal.

    The backend returns it either nested (``{"trader": {...}}`` from a
    table query with an embedded relation), flattened with a ``trader_``
    prefix (from the ``get_signals_with_traders`` style functions), or as a
    full row of the traders table.  Full rows may carry ``bio`` instead of
    ``description``, plus ``created_at``.
    """

    id: str
    name: str = ""
    description: str = ""
    avatar_url: str = ""
    signal_count: int = 0
    is_online: bool = False
    followers_count: int = 0
    win_rate: float = 0.0
    created_at: datetime | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], prefix: str = "") -> TraderSummary | None:
        """Build from *data*; keys are looked up as ``prefix + name``.

        Returns ``None`` when no trader id can be found.
        """
        trader_id = data.get(f"{prefix}id")
        if not trader_id:
            return None
        description = data.get(f"{prefix}description") or data.get(f"{prefix}bio")
        return cls(
            id=str(trader_id),
            name=str(data.get(f"{prefix}name") or ""),
            description=str(description or ""),
            avatar_url=str(data.get(f"{prefix}avatar_url") or ""),
            signal_count=_to_int(data.get(f"{prefix}signal_count")),
            is_online=bool(data.get(f"{prefix}is_online")),
            followers_count=_to_int(data.get(f"{prefix}followers_count")),
            win_rate=_to_float(data.get(f"{prefix}win_rate")),
            created_at=parse_timestamp(data.get(f"{prefix}created_at")),
        )


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0
