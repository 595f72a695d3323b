"""Core domain layer for the Skinport client.

This package provides the error hierarchy, the typed realtime event
contract, query option records and REST response shapes. Option records
and normalized events are Pydantic-based with frozen configuration for
immutability.
"""

from core.errors import (
    AuthenticationError,
    ChannelConnectionError,
    ChannelNotInitializedError,
    RateLimitError,
    RequestError,
    SkinportError,
)
from core.events import (
    SALE_FEED,
    SALE_FEED_JOIN,
    SaleFeedData,
    SaleFeedEvent,
    SaleFeedEventType,
    SaleFeedJoinData,
)
from core.options import (
    ItemsOptions,
    OutOfStockOptions,
    SalesHistoryOptions,
    TransactionsOptions,
)

__all__: list[str] = [
    "AuthenticationError",
    "ChannelConnectionError",
    "ChannelNotInitializedError",
    "ItemsOptions",
    "OutOfStockOptions",
    "RateLimitError",
    "RequestError",
    "SALE_FEED",
    "SALE_FEED_JOIN",
    "SaleFeedData",
    "SaleFeedEvent",
    "SaleFeedEventType",
    "SaleFeedJoinData",
    "SalesHistoryOptions",
    "SkinportError",
    "TransactionsOptions",
]
