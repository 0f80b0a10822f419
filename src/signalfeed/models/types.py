"""Domain-specific type aliases for SignalFeed.

These aliases document intent at call sites without introducing runtime cost.
"""

from __future__ import annotations

from typing import Optional, TypeAlias

# Backend primary key of a signal (UUID string).
SignalId: TypeAlias = str

# Backend primary key of a trader (UUID string).
TraderId: TypeAlias = str

# Auth provider user id (UUID string).
UserId: TypeAlias = str

# ``"long"`` or ``"short"``.
Direction: TypeAlias = str

# A feed filter tag: ``"all"``, ``"long"``, ``"short"``, ``"subscribed"``, ``"followed"``.
FilterTag: TypeAlias = str

# A decimal price kept as the backend's string, or ``None`` when not provided.
PriceText: TypeAlias = Optional[str]
