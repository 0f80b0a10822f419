"""Abstract signal data source with a hosted-backend (REST) implementation.

The feed controller depends only on :class:`SignalDataSource`, so it can be
tested with deterministic in-memory data.  :class:`SupabaseDataSource`
talks to the backend's auto-generated REST layer and remote procedures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import requests

from signalfeed.core.config import FeedConfig
from signalfeed.core.constants import (
    DEFAULT_CALLS_PER_SECOND,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DIRECTIONS,
    REST_PATH,
    RPC_PLATFORM_STATS,
    STATUS_ACTIVE,
    TABLE_FOLLOWS,
    TABLE_SIGNALS,
    TABLE_SUBSCRIPTIONS,
    TABLE_TRADERS,
    TRADER_EMBED_COLUMNS,
)
from signalfeed.core.credentials import BackendCredentials, UserSession
from signalfeed.core.exceptions import (
    AuthError,
    BackendError,
    BackendUnavailableError,
    ConfigError,
    InvalidSignalError,
    MalformedResponseError,
    RateLimitError,
)
from signalfeed.core.retry import RateLimiter, retry
from signalfeed.models.signal import Signal
from signalfeed.models.stats import PlatformStats
from signalfeed.models.trader import TraderSummary

logger = logging.getLogger(__name__)


class SignalDataSource(ABC):
    """Abstract source of signals and of the user's trader relationships."""

    @abstractmethod
    def fetch_active_signals(self, max_count: int) -> list[Signal]:
        """Return up to *max_count* active signals, newest first."""

    @abstractmethod
    def fetch_signals_by_direction(self, direction: str, max_count: int) -> list[Signal]:
        """Return up to *max_count* active *direction* signals, newest first."""

    @abstractmethod
    def fetch_subscribed_trader_ids(self, user_id: str) -> list[str]:
        """Return ids of traders *user_id* subscribes to."""

    @abstractmethod
    def fetch_followed_trader_ids(self, user_id: str) -> list[str]:
        """Return ids of traders *user_id* follows."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Return the signed-in user's id, or ``None`` when anonymous."""

    def fetch_platform_stats(self) -> PlatformStats:
        """Platform counters.  Sources without stats report zeros."""
        return PlatformStats.zero()

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def parse_signals(rows: Any) -> list[Signal]:
        """Convert backend rows into signals, skipping malformed rows."""
        if not isinstance(rows, list):
            raise MalformedResponseError(f"expected a list of signal rows, got {type(rows).__name__}")
        signals: list[Signal] = []
        for row in rows:
            if not isinstance(row, dict):
                logger.debug("Skipping non-object signal row %r", row)
                continue
            try:
                signals.append(Signal.from_row(row))
            except InvalidSignalError as exc:
                logger.debug("Skipping malformed signal row: %s", exc)
        return signals


# ---------------------------------------------------------------------------
# Hosted backend implementation
# ---------------------------------------------------------------------------


class SupabaseDataSource(SignalDataSource):
    """Reads signals through the backend's REST layer with ``requests``.

    Requests are rate limited and transient failures (network, 5xx, 429)
    are retried with bounded backoff.  Every failure surfaces as a
    :class:`~signalfeed.core.exceptions.BackendError` subclass.
    """

    def __init__(
        self,
        credentials: BackendCredentials,
        session: UserSession | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        calls_per_second: float = DEFAULT_CALLS_PER_SECOND,
        http: requests.Session | None = None,
    ) -> None:
        if not credentials.is_valid:
            raise ConfigError("Backend URL or anon key is missing")
        self._credentials = credentials
        self._session = session or UserSession()
        self._timeout = timeout
        self._max_retries = max_retries
        self._rate_limiter = RateLimiter(calls_per_second)
        self._http = http or requests.Session()
        self._base_url = f"{credentials.url.rstrip('/')}{REST_PATH}"

    @classmethod
    def from_config(
        cls,
        config: FeedConfig,
        credentials: BackendCredentials,
        session: UserSession | None = None,
    ) -> SupabaseDataSource:
        return cls(
            credentials,
            session=session,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            calls_per_second=config.calls_per_second,
        )

    def close(self) -> None:
        self._http.close()

    # -- SignalDataSource -----------------------------------------------------

    def current_user_id(self) -> str | None:
        return self._session.user_id

    @retry()
    def fetch_active_signals(self, max_count: int) -> list[Signal]:
        params = self._signal_query(max_count)
        return self.parse_signals(self._get(TABLE_SIGNALS, params))

    @retry()
    def fetch_signals_by_direction(self, direction: str, max_count: int) -> list[Signal]:
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")
        params = self._signal_query(max_count)
        params["direction"] = f"eq.{direction}"
        return self.parse_signals(self._get(TABLE_SIGNALS, params))

    @retry()
    def fetch_subscribed_trader_ids(self, user_id: str) -> list[str]:
        return self._trader_ids(TABLE_SUBSCRIPTIONS, user_id)

    @retry()
    def fetch_followed_trader_ids(self, user_id: str) -> list[str]:
        return self._trader_ids(TABLE_FOLLOWS, user_id)

    @retry()
    def fetch_platform_stats(self) -> PlatformStats:
        payload = self._request("POST", f"rpc/{RPC_PLATFORM_STATS}", json={})
        return PlatformStats.from_rpc(payload)

    # -- extra queries --------------------------------------------------------

    @retry()
    def fetch_signals_by_currency(self, currency: str, max_count: int) -> list[Signal]:
        """Active signals for one instrument, newest first."""
        params = self._signal_query(max_count, inner_join=False)
        params["currency"] = f"eq.{currency}"
        return self.parse_signals(self._get(TABLE_SIGNALS, params))

    @retry()
    def fetch_signals_by_trader(self, trader_id: str, max_count: int) -> list[Signal]:
        """All signals of one trader regardless of status, newest first."""
        params = self._signal_query(max_count, inner_join=False, status=None)
        params["trader_id"] = f"eq.{trader_id}"
        return self.parse_signals(self._get(TABLE_SIGNALS, params))

    @retry()
    def fetch_signals_with_filters(
        self,
        direction: str | None = None,
        currency: str | None = None,
        status: str | None = None,
        max_count: int = 20,
    ) -> list[Signal]:
        """Signals matching every given filter, newest first.

        ``status`` defaults to active.  Signals whose trader row is missing
        are still returned.
        """
        params = self._signal_query(max_count, inner_join=False, status=status or STATUS_ACTIVE)
        if direction:
            if direction not in DIRECTIONS:
                raise ValueError(f"Unknown direction: {direction!r}")
            params["direction"] = f"eq.{direction}"
        if currency:
            params["currency"] = f"eq.{currency}"
        return self.parse_signals(self._get(TABLE_SIGNALS, params))

    @retry()
    def fetch_traders(self, max_count: int | None = None) -> list[TraderSummary]:
        """All traders, most recently created first."""
        params = {"select": "*", "order": "created_at.desc"}
        if max_count is not None:
            if max_count <= 0:
                raise ValueError(f"max_count must be positive, got {max_count}")
            params["limit"] = str(max_count)
        return self._parse_traders(self._get(TABLE_TRADERS, params))

    @retry()
    def fetch_trader_by_id(self, trader_id: str) -> TraderSummary | None:
        """One trader, or ``None`` when no row has *trader_id*."""
        params = {"select": "*", "id": f"eq.{trader_id}", "limit": "1"}
        traders = self._parse_traders(self._get(TABLE_TRADERS, params))
        return traders[0] if traders else None

    # -- HTTP -----------------------------------------------------------------

    def _signal_query(
        self,
        max_count: int,
        inner_join: bool = True,
        status: str | None = STATUS_ACTIVE,
    ) -> dict[str, str]:
        if max_count <= 0:
            raise ValueError(f"max_count must be positive, got {max_count}")
        relation = "traders!inner" if inner_join else "traders"
        params = {
            "select": f"*,trader:{relation}({','.join(TRADER_EMBED_COLUMNS)})",
            "order": "signal_time.desc",
            "limit": str(max_count),
        }
        if status:
            params["status"] = f"eq.{status}"
        return params

    def _trader_ids(self, table: str, user_id: str) -> list[str]:
        rows = self._get(table, {"select": "trader_id", "user_id": f"eq.{user_id}"})
        if not isinstance(rows, list):
            raise MalformedResponseError(f"{table}: expected a list, got {type(rows).__name__}")
        return _unique(str(r["trader_id"]) for r in rows if isinstance(r, dict) and r.get("trader_id"))

    @staticmethod
    def _parse_traders(rows: Any) -> list[TraderSummary]:
        if not isinstance(rows, list):
            raise MalformedResponseError(
                f"{TABLE_TRADERS}: expected a list, got {type(rows).__name__}"
            )
        traders: list[TraderSummary] = []
        for row in rows:
            trader = TraderSummary.from_mapping(row) if isinstance(row, dict) else None
            if trader is None:
                logger.debug("Skipping trader row without id: %r", row)
                continue
            traders.append(trader)
        return traders

    def _headers(self) -> dict[str, str]:
        token = self._session.access_token or self._credentials.anon_key
        return {
            "apikey": self._credentials.anon_key,
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    def _get(self, path: str, params: dict[str, str]) -> Any:
        return self._request("GET", path, params=params)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        self._rate_limiter.acquire()
        url = f"{self._base_url}/{path}"
        try:
            resp = self._http.request(
                method, url, headers=self._headers(), timeout=self._timeout, **kwargs
            )
        except (requests.Timeout, requests.ConnectionError) as exc:
            raise BackendUnavailableError(f"{method} {path}: {exc}") from exc
        except requests.RequestException as exc:
            raise BackendError(f"{method} {path}: {exc}") from exc

        status = resp.status_code
        if status >= 400:
            detail = _error_detail(resp)
            message = f"{method} {path} returned {status}: {detail}"
            if status == 429:
                raise RateLimitError(message, status_code=status)
            if status in (401, 403):
                raise AuthError(message, status_code=status)
            if status >= 500:
                raise BackendUnavailableError(message, status_code=status)
            raise BackendError(message, status_code=status)

        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"{method} {path}: response is not JSON") from exc


def _error_detail(resp: Any) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)


def _unique(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out
