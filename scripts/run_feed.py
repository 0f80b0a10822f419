#!/usr/bin/env python3
"""Entry point that loads the signal feed and prints it.

Usage::

    python scripts/run_feed.py
    python scripts/run_feed.py --filter long --filter subscribed --pages 3
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print the trading signal feed.")
    parser.add_argument(
        "--filter",
        action="append",
        dest="filters",
        default=None,
        choices=("all", "long", "short", "subscribed", "followed"),
        help="Filter tag (repeatable).",
    )
    parser.add_argument(
        "--pages", type=int, default=1, help="Pages to load (1 + load-more calls)."
    )
    parser.add_argument("--stats", action="store_true", help="Also print platform stats.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, base_dir: Path) -> int:
    from signalfeed.core.backend_client import SupabaseDataSource
    from signalfeed.core.config import FeedConfig
    from signalfeed.core.constants import SETTINGS_FILENAME
    from signalfeed.core.credentials import BackendCredentials, UserSession
    from signalfeed.core.exceptions import ConfigError
    from signalfeed.feed.controller import SignalFeedController
    from signalfeed.feed.state import LoadState
    from signalfeed.models.signal import format_signal_time

    config = FeedConfig.from_file(base_dir / SETTINGS_FILENAME)
    try:
        source = SupabaseDataSource.from_config(
            config, BackendCredentials.load(base_dir), UserSession.from_env()
        )
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        async with SignalFeedController(source, config, filters=args.filters) as feed:
            await feed.start()
            for _ in range(max(0, args.pages - 1)):
                if not await feed.on_load_more():
                    break
            if args.stats:
                stats = await feed.load_platform_stats()
                print(
                    f"today={stats.today_signal_count} long={stats.long_signal_count} "
                    f"short={stats.short_signal_count} traders={stats.active_trader_count} "
                    f"pairs={stats.trading_pair_count}"
                )
            for s in feed.signals:
                trader = s.trader.name if s.trader else s.trader_id
                print(
                    f"{format_signal_time(s.signal_time)}  {s.currency:<12} {s.direction:<5} "
                    f"entry={s.entry_price or '-'} sl={s.stop_loss or '-'} "
                    f"tp={s.take_profit or '-'} rr={s.format_ratio()}  {trader}"
                )
            if feed.load_state is LoadState.ERROR:
                print(f"error: {feed.state.last_error}", file=sys.stderr)
                return 1
    finally:
        source.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    from signalfeed.core.logging_setup import setup_logger

    args = _parse_args(argv)
    base_dir = Path.cwd()
    setup_logger("signalfeed", level=args.log_level)
    return asyncio.run(_run(args, base_dir))


if __name__ == "__main__":
    sys.exit(main())
