"""Trading signal data model.

A :class:`Signal` is one trading recommendation issued by a trader:
instrument, direction, entry/stop/target prices and leverage.  Signals are
created by the backend and are read-only on the client.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from signalfeed.core.constants import (
    DIRECTION_LONG,
    DIRECTIONS,
    PRICE_PLACEHOLDERS,
    SIGNAL_STATUSES,
    STATUS_ACTIVE,
)
from signalfeed.core.exceptions import InvalidSignalError
from signalfeed.models.timestamps import parse_timestamp
from signalfeed.models.trader import TraderSummary

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_RATIO_QUANT = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class Signal:
    """A single trading recommendation.

    Parameters
    ----------
    id:
        Backend identifier, unique and stable across pages.
    trader_id:
        Identifier of the issuing trader.
    currency:
        Instrument / pair, e.g. ``"BTC/USDT"``.
    direction:
        ``"long"`` or ``"short"``.
    entry_price, stop_loss, take_profit:
        Decimal prices as the backend's strings, ``None`` when not provided.
    leverage:
        Leverage multiplier string such as ``"10x"``, or ``None``.
    status:
        ``"active"``, ``"closed"`` or ``"cancelled"``.
    signal_time:
        When the signal was issued (timezone-aware).  Feeds are ordered by
        this value, newest first.
    trader:
        Embedded trader card data, when the backend returned it.
    """

    id: str
    trader_id: str
    currency: str
    direction: str
    entry_price: str | None = None
    stop_loss: str | None = None
    take_profit: str | None = None
    leverage: str | None = None
    status: str = STATUS_ACTIVE
    signal_type: str | None = None
    signal_time: datetime = EPOCH
    created_at: datetime | None = None
    trader: TraderSummary | None = None

    # -- parsing --------------------------------------------------------------

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Signal:
        """Build a signal from a backend row.

        Accepts both the embedded shape (``"trader": {...}``) and the
        flattened ``trader_*`` shape.  Raises :class:`InvalidSignalError`
        when the id, trader id or direction is missing or invalid.
        """
        signal_id = row.get("id")
        if not signal_id:
            raise InvalidSignalError(f"signal row has no id: {dict(row)!r}")

        trader: TraderSummary | None = None
        nested = row.get("trader")
        if isinstance(nested, Mapping):
            trader = TraderSummary.from_mapping(nested)
        elif row.get("trader_name") is not None:
            trader = TraderSummary.from_mapping(row, prefix="trader_")

        trader_id = row.get("trader_id") or (trader.id if trader else "")
        if not trader_id:
            raise InvalidSignalError(f"signal {signal_id} has no trader id")

        direction = str(row.get("direction") or "").strip().lower()
        if direction not in DIRECTIONS:
            raise InvalidSignalError(f"signal {signal_id} has invalid direction {direction!r}")

        created_at = parse_timestamp(row.get("created_at"))
        signal_time = parse_timestamp(row.get("signal_time")) or created_at or EPOCH

        return cls(
            id=str(signal_id),
            trader_id=str(trader_id),
            currency=str(row.get("currency") or "").strip(),
            direction=direction,
            entry_price=clean_price(row.get("entry_price")),
            stop_loss=clean_price(row.get("stop_loss")),
            take_profit=clean_price(row.get("take_profit")),
            leverage=clean_price(row.get("leverage")),
            status=str(row.get("status") or STATUS_ACTIVE).strip().lower(),
            signal_type=(str(row["signal_type"]) if row.get("signal_type") else None),
            signal_time=signal_time,
            created_at=created_at,
            trader=trader,
        )

    # -- convenience ----------------------------------------------------------

    @property
    def is_long(self) -> bool:
        return self.direction == DIRECTION_LONG

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def profit_loss_ratio(self) -> Decimal | None:
        """Reward-to-risk ratio from entry, take-profit and stop-loss.

        Long: ``(tp - entry) / (entry - sl)``; short: ``(entry - tp) / (sl - entry)``.
        Returns ``None`` when a price is missing or unparsable, or when the
        risk leg is not positive.
        """
        entry = to_decimal(self.entry_price)
        tp = to_decimal(self.take_profit)
        sl = to_decimal(self.stop_loss)
        if entry is None or tp is None or sl is None:
            return None
        if self.is_long:
            profit, loss = tp - entry, entry - sl
        else:
            profit, loss = entry - tp, sl - entry
        if loss <= 0:
            return None
        return profit / loss

    def format_ratio(self) -> str:
        """``"2.00:1"``, or ``"-"`` when no ratio can be computed."""
        ratio = self.profit_loss_ratio()
        if ratio is None:
            return "-"
        return f"{ratio.quantize(_RATIO_QUANT, rounding=ROUND_HALF_UP)}:1"

    # -- validation -----------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty means valid)."""
        errors: list[str] = []
        if not self.id:
            errors.append("id must not be empty.")
        if not self.trader_id:
            errors.append("trader_id must not be empty.")
        if not self.currency:
            errors.append("currency must not be empty.")
        if self.direction not in DIRECTIONS:
            errors.append(f"direction={self.direction!r} must be one of {DIRECTIONS}.")
        if self.status not in SIGNAL_STATUSES:
            errors.append(f"status={self.status!r} must be one of {SIGNAL_STATUSES}.")
        for name in ("entry_price", "stop_loss", "take_profit"):
            value = getattr(self, name)
            if value is not None and to_decimal(value) is None:
                errors.append(f"{name}={value!r} is not a number.")
        if self.signal_time.tzinfo is None:
            errors.append("signal_time must be timezone-aware.")
        return errors


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def clean_price(value: Any) -> str | None:
    """Normalise a price-like field; placeholders become ``None``."""
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in PRICE_PLACEHOLDERS:
        return None
    return text


def to_decimal(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        result = Decimal(value.replace(",", ""))
    except (InvalidOperation, AttributeError):
        return None
    return result if result.is_finite() else None


def format_signal_time(value: datetime, tz: tzinfo | None = None) -> str:
    """``YYYY-MM-DD HH:MM:SS`` in *tz* (local time when ``None``)."""
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")
