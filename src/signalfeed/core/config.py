"""Validated feed configuration loaded from ``feed_settings.json``."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from signalfeed.core.constants import (
    ALL_FILTERS,
    DEFAULT_CALLS_PER_SECOND,
    DEFAULT_FILTERS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REFRESH_NOTICE_SECONDS,
    DEFAULT_REQUEST_TIMEOUT,
    MAX_PAGE_SIZE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedConfig:
    """Immutable snapshot of the feed configuration.

    Build from a ``feed_settings.json`` file via :meth:`from_file`, or
    construct directly for testing.
    """

    page_size: int = DEFAULT_PAGE_SIZE
    refresh_notice_seconds: float = DEFAULT_REFRESH_NOTICE_SECONDS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    calls_per_second: float = DEFAULT_CALLS_PER_SECOND
    default_filters: list[str] = field(default_factory=lambda: list(DEFAULT_FILTERS))

    # -- factory ----------------------------------------------------------

    @classmethod
    def from_file(cls, path: Path) -> FeedConfig:
        """Load from a ``feed_settings.json`` file with validation.

        Missing or unparseable values fall back to defaults.  Validation
        warnings are logged but never raise.
        """
        try:
            raw = path.read_text(encoding="utf-8")
            data: dict[str, Any] = json.loads(raw) or {}
            if not isinstance(data, dict):
                data = {}
        except (OSError, json.JSONDecodeError, TypeError) as exc:
            logger.warning("Could not read config from %s: %s", path, exc)
            data = {}

        cfg = cls(
            page_size=_clamp(
                _safe_int(data.get("page_size"), DEFAULT_PAGE_SIZE), 1, MAX_PAGE_SIZE
            ),
            refresh_notice_seconds=_safe_float(
                data.get("refresh_notice_seconds"), DEFAULT_REFRESH_NOTICE_SECONDS
            ),
            request_timeout=_safe_float(data.get("request_timeout"), DEFAULT_REQUEST_TIMEOUT),
            max_retries=max(0, _safe_int(data.get("max_retries"), DEFAULT_MAX_RETRIES)),
            calls_per_second=_safe_float(
                data.get("calls_per_second"), DEFAULT_CALLS_PER_SECOND
            ),
            default_filters=_parse_filters(data),
        )

        for err in cfg.validate():
            logger.warning("Config validation: %s", err)

        return cfg

    # -- validation -------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of human-readable validation warnings (empty = OK)."""
        errors: list[str] = []
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            errors.append(f"page_size={self.page_size} outside 1-{MAX_PAGE_SIZE} range.")
        if self.refresh_notice_seconds < 0:
            errors.append(
                f"refresh_notice_seconds={self.refresh_notice_seconds} must be >= 0."
            )
        if self.request_timeout <= 0:
            errors.append(f"request_timeout={self.request_timeout} must be > 0.")
        if self.max_retries < 0:
            errors.append(f"max_retries={self.max_retries} must be >= 0.")
        if self.calls_per_second <= 0:
            errors.append(f"calls_per_second={self.calls_per_second} must be > 0.")
        unknown = [f for f in self.default_filters if f not in ALL_FILTERS]
        if unknown:
            errors.append(f"default_filters has unknown tags: {', '.join(unknown)}.")
        return errors


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_filters(data: dict[str, Any]) -> list[str]:
    raw = data.get("default_filters")
    if not isinstance(raw, list) or not raw:
        return list(DEFAULT_FILTERS)
    tags = [str(t).strip().lower() for t in raw if str(t).strip()]
    known = [t for t in tags if t in ALL_FILTERS]
    if len(known) != len(tags):
        logger.warning("Ignoring unknown default filters: %s", sorted(set(tags) - ALL_FILTERS))
    return known if known else list(DEFAULT_FILTERS)


def _safe_int(value: Any, default: int) -> int:
    try:
        return int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default


def _safe_float(value: Any, default: float) -> float:
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return default


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))
