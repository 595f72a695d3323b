"""Response shapes of the Skinport REST API.

These are ``TypedDict`` declarations of the decoded JSON bodies. The
gateway returns bodies unchanged, so these types describe the data
without copying or validating it.
"""

from typing import Literal, TypedDict


# ---------------------------------------------------------------------------
# /items
# ---------------------------------------------------------------------------


class Item(TypedDict):
    market_hash_name: str
    currency: str
    suggested_price: float | None
    item_page: str
    market_page: str
    min_price: float | None
    max_price: float | None
    mean_price: float | None
    median_price: float | None
    quantity: int
    created_at: int
    updated_at: int


ItemsResponse = list[Item]


# ---------------------------------------------------------------------------
# /sales/history
# ---------------------------------------------------------------------------


class PriceStats(TypedDict):
    """Aggregated sale prices over one time window."""

    min: float | None
    max: float | None
    avg: float | None
    median: float | None
    volume: int


class SaleHistory(TypedDict):
    market_hash_name: str
    version: str | None
    currency: str
    item_page: str
    market_page: str
    last_24_hours: PriceStats
    last_7_days: PriceStats
    last_30_days: PriceStats
    last_90_days: PriceStats


SalesHistoryResponse = list[SaleHistory]


# ---------------------------------------------------------------------------
# /sales/out-of-stock
# ---------------------------------------------------------------------------


class OutOfStockItem(TypedDict):
    market_hash_name: str
    version: str | None
    currency: str
    suggested_price: float
    avg_sale_price: float
    sales_last_90d: int


OutOfStockResponse = list[OutOfStockItem]


# ---------------------------------------------------------------------------
# /account/transactions
# ---------------------------------------------------------------------------


class Pagination(TypedDict):
    page: int
    pages: int
    limit: int
    order: Literal["desc", "asc"]


class TransactionItem(TypedDict):
    sale_id: int
    market_hash_name: str
    seller_country: str
    buyer_country: str


class Transaction(TypedDict):
    id: int
    type: Literal["credit", "withdraw", "purchase"]
    sub_type: str | None
    # Skinport does not document the full set of status values.
    status: str
    amount: float
    fee: float | None
    currency: str
    items: list[TransactionItem] | None
    created_at: str
    updated_at: str


class TransactionsResponse(TypedDict):
    pagination: Pagination
    data: list[Transaction]
