"""Integration smoke test: verify the realtime channel connects to Skinport.

Usage:
    python scripts/test_socket_connection.py
    python scripts/test_socket_connection.py --listen 60

Exit codes:
    0 - Connected and received at least 1 saleFeed event
    1 - Connection failed or no events within the listen window
"""

import argparse
import asyncio
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger: logging.Logger = logging.getLogger(__name__)


async def check(listen_seconds: float) -> int:
    """Connect, join the feed and count events.

    Returns:
        Exit code: 0 on success, 1 on failure.
    """
    from core.errors import ChannelConnectionError
    from infra.skinport_client import Skinport

    received_count: int = 0

    def on_sale_feed(data: dict) -> None:
        nonlocal received_count
        received_count += 1
        logger.info(
            "saleFeed #%d: %s (%d sales)",
            received_count,
            data.get("eventType"),
            len(data.get("sales", [])),
        )

    async with Skinport() as skinport:
        try:
            logger.info("Connecting to Skinport socket...")
            await asyncio.wait_for(skinport.init_socket(), timeout=15.0)
        except (ChannelConnectionError, asyncio.TimeoutError):
            logger.exception("Connection test failed")
            return 1

        skinport.socket.on("saleFeed", on_sale_feed)
        await skinport.socket.join_sale_feed(appid=730, currency="EUR", locale="en")

        logger.info("Listening for events (%.0f seconds)...", listen_seconds)
        await asyncio.sleep(listen_seconds)
        logger.info("Socket stats: %s", skinport.socket.stats())

    passed: bool = received_count > 0
    logger.info(
        "Test %s - received %d events",
        "PASSED" if passed else "FAILED",
        received_count,
    )
    return 0 if passed else 1


def main() -> int:
    parser: argparse.ArgumentParser = argparse.ArgumentParser()
    parser.add_argument("--listen", type=float, default=30.0)
    args: argparse.Namespace = parser.parse_args()
    try:
        return asyncio.run(check(args.listen))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 1


if __name__ == "__main__":
    sys.exit(main())
