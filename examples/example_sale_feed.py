"""Example: Live Skinport sale feed with normalized events.

This script demonstrates the realtime pipeline:

    Skinport.init_socket() → SaleFeedAdapter → consumer callback

Each ``saleFeed`` batch is logged with its type, size and receive
latency. Channel state transitions are reported through the observer
hook.

Prerequisites:
    1. Install dependencies: ``pip install -e .``
    2. Optionally put ``SKINPORT_CLIENT_ID`` / ``SKINPORT_CLIENT_SECRET``
       in ``.env``. The sale feed itself does not require them.

Usage:
    python -m examples.example_sale_feed
    python -m examples.example_sale_feed --currency USD --locale de

Press Ctrl+C to stop.
"""

import argparse
import asyncio
import logging
import os
import time

from dotenv import load_dotenv

from core.errors import ChannelConnectionError
from core.events import SaleFeedEvent
from infra.channel import ChannelState
from infra.sale_feed_adapter import SaleFeedAdapter, SaleFeedAdapterConfig
from infra.skinport_client import Skinport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger: logging.Logger = logging.getLogger(__name__)


def on_channel_state(state: ChannelState, error: BaseException | None) -> None:
    if error is not None:
        logger.warning("Channel is %s (%s)", state.value, error)
    else:
        logger.info("Channel is %s", state.value)


async def run(args: argparse.Namespace) -> None:
    """Connect, join the feed and log events until interrupted."""
    skinport: Skinport = Skinport(
        client_id=os.environ.get("SKINPORT_CLIENT_ID") or None,
        client_secret=os.environ.get("SKINPORT_CLIENT_SECRET") or None,
    )
    skinport.set_channel_observer(on_channel_state)

    total_events: int = 0

    def on_event(event: SaleFeedEvent) -> None:
        nonlocal total_events
        total_events += 1
        latency_us: float = max(time.time_ns() - event.recv_ts, 0) / 1_000
        logger.info(
            "[%s] %d item(s) epoch=%d latency=%.0fus (#%d)",
            event.event_type.value,
            len(event.sales),
            event.connection_epoch,
            latency_us,
            total_events,
        )

    async with skinport:
        try:
            await skinport.init_socket()
        except ChannelConnectionError:
            logger.exception("Failed to connect to Skinport socket")
            return

        adapter: SaleFeedAdapter = SaleFeedAdapter(
            config=SaleFeedAdapterConfig(
                appid=args.appid,
                currency=args.currency,
                locale=args.locale,
            ),
            socket=skinport.socket,
            on_event=on_event,
        )
        await adapter.start()

        try:
            while True:
                await asyncio.sleep(args.stats_interval)
                logger.info("Adapter stats: %s", adapter.stats())
        finally:
            await adapter.stop()
            logger.info("Total events processed: %d", total_events)


def main() -> None:
    """Parse arguments and run the sale feed example."""
    load_dotenv()

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Live Skinport sale feed",
    )
    parser.add_argument(
        "--appid",
        type=int,
        default=730,
        help="Game app ID (default: 730)",
    )
    parser.add_argument(
        "--currency",
        type=str,
        default="EUR",
        help="Pricing currency (default: EUR)",
    )
    parser.add_argument(
        "--locale",
        type=str,
        default="en",
        help="Result locale (default: en)",
    )
    parser.add_argument(
        "--stats-interval",
        type=float,
        default=30.0,
        help="Seconds between stats log lines (default: 30)",
    )
    args: argparse.Namespace = parser.parse_args()

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Shutting down (received KeyboardInterrupt)...")


if __name__ == "__main__":
    main()
