"""Example: Query the Skinport REST API.

Fetches the item list, sales history for one item, out-of-stock items
and, when credentials are configured, the latest account transactions.

Prerequisites:
    1. Install dependencies: ``pip install -e .``
    2. For transactions, set ``SKINPORT_CLIENT_ID`` and
       ``SKINPORT_CLIENT_SECRET`` in ``.env``.

Usage:
    python -m examples.example_market_data
    python -m examples.example_market_data --item "AK-47 | Redline (Field-Tested)"

Keep the public endpoints' rate limit in mind (8 requests per 5
minutes). Responses are cached server-side for 5 minutes.
"""

import argparse
import asyncio
import logging
import os

from dotenv import load_dotenv

from core.errors import RequestError
from core.options import (
    ItemsOptions,
    OutOfStockOptions,
    SalesHistoryOptions,
    TransactionsOptions,
)
from infra.skinport_client import Skinport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger: logging.Logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Run all queries. Returns a process exit code."""
    client_id: str | None = os.environ.get("SKINPORT_CLIENT_ID") or None
    client_secret: str | None = os.environ.get("SKINPORT_CLIENT_SECRET") or None

    async with Skinport(client_id, client_secret) as skinport:
        try:
            items = await skinport.get_items(
                ItemsOptions(app_id=args.appid, currency=args.currency),
            )
            logger.info("Items: %d listed", len(items))

            history = await skinport.get_sales_history(
                SalesHistoryOptions(
                    market_hash_name=args.item,
                    app_id=args.appid,
                    currency=args.currency,
                ),
            )
            for entry in history:
                logger.info(
                    "%s: 7d avg=%s volume=%d",
                    entry["market_hash_name"],
                    entry["last_7_days"]["avg"],
                    entry["last_7_days"]["volume"],
                )

            out_of_stock = await skinport.get_out_of_stock(
                OutOfStockOptions(app_id=args.appid, currency=args.currency),
            )
            logger.info("Out of stock: %d items", len(out_of_stock))

            if client_id and client_secret:
                transactions = await skinport.get_transactions(
                    TransactionsOptions(page=1, limit=10, order="desc"),
                )
                logger.info(
                    "Transactions: page %d/%d, %d shown",
                    transactions["pagination"]["page"],
                    transactions["pagination"]["pages"],
                    len(transactions["data"]),
                )
            else:
                logger.info("No credentials, skipping transactions")
        except RequestError as exc:
            logger.error(
                "Request failed (status=%d): %s",
                exc.status_code,
                exc.response_body or exc,
            )
            return 1
    return 0


def main() -> int:
    """Parse arguments and run the REST example."""
    load_dotenv()

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Skinport REST API example",
    )
    parser.add_argument("--appid", type=int, default=730)
    parser.add_argument("--currency", type=str, default="EUR")
    parser.add_argument(
        "--item",
        type=str,
        default="AK-47 | Redline (Field-Tested)",
        help="market_hash_name for the sales history query",
    )
    args: argparse.Namespace = parser.parse_args()
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
