"""Event contract and normalized event models for the Skinport sale feed.

The realtime channel speaks Socket.IO. Two event names make up the
contract:

    - ``saleFeed`` (server → client): a batch of listings or sales.
    - ``saleFeedJoin`` (client → server): subscribe to the feed for one
      game, currency and locale.

Payload shapes are declared as ``TypedDict`` so that type checkers can
verify handlers and emissions against the contract. Nothing here is
enforced at runtime: the socket facade passes payloads through as-is.

The individual sale records are not documented by Skinport, so they are
modelled as opaque ``dict`` objects rather than with invented fields.

:class:`SaleFeedEvent` is the normalized, immutable form produced by
``infra.sale_feed_adapter.SaleFeedAdapter``. It carries the same dual
timestamps as every other feed event:

    - ``recv_ts``: ``time.time_ns()`` wall clock, for correlation with
      external timestamps.
    - ``recv_mono_ns``: ``time.perf_counter_ns()`` monotonic, for
      latency measurement.

Example:
    >>> from core.events import SaleFeedEvent, SaleFeedEventType
    >>> event = SaleFeedEvent(
    ...     event_type=SaleFeedEventType.SOLD,
    ...     sales=({"marketHashName": "AK-47 | Redline (Field-Tested)"},),
    ...     recv_ts=1739500000000000000,
    ...     recv_mono_ns=123456789,
    ... )
    >>> event.is_sale()
    True
    >>> event.connection_epoch
    0
"""

from enum import Enum
from typing import Any, Callable, Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Event names
# ---------------------------------------------------------------------------

SALE_FEED: Literal["saleFeed"] = "saleFeed"
"""Server-pushed event carrying listed/sold items."""

SALE_FEED_JOIN: Literal["saleFeedJoin"] = "saleFeedJoin"
"""Client-emitted event requesting a sale feed subscription."""

SaleFeedEventName = Literal["saleFeed"]
SaleFeedJoinEventName = Literal["saleFeedJoin"]


# ---------------------------------------------------------------------------
# Supported values
# ---------------------------------------------------------------------------

SUPPORTED_CURRENCIES: frozenset[str] = frozenset(
    {
        "AUD", "BRL", "CAD", "CHF", "CNY", "CZK", "DKK", "EUR",
        "GBP", "HRK", "NOK", "PLN", "RUB", "SEK", "TRY", "USD",
    }
)
"""Currencies accepted by the REST API and the sale feed."""

SUPPORTED_LOCALES: frozenset[str] = frozenset(
    {"en", "de", "ru", "fr", "zh", "nl", "fi", "es", "tr"}
)
"""Locales accepted by ``saleFeedJoin``."""

DEFAULT_APP_ID: int = 730
"""Counter-Strike app ID, the marketplace default."""

DEFAULT_CURRENCY: str = "EUR"
DEFAULT_LOCALE: str = "en"


# ---------------------------------------------------------------------------
# Wire payloads (static contract only)
# ---------------------------------------------------------------------------


class SaleFeedData(TypedDict):
    """Payload of the ``saleFeed`` server event."""

    eventType: Literal["listed", "sold"]
    sales: list[dict[str, Any]]


class SaleFeedJoinData(TypedDict):
    """Payload of the ``saleFeedJoin`` client emission."""

    appid: int
    currency: str
    locale: str


SaleFeedHandler = Callable[[SaleFeedData], Any]
"""Handler signature for ``saleFeed``. May be a plain function or a coroutine."""


class ServerToClientEvents(TypedDict):
    """Payload shape of each event the server pushes, keyed by name."""

    saleFeed: SaleFeedData


class ClientToServerEvents(TypedDict):
    """Payload shape of each event the client emits, keyed by name."""

    saleFeedJoin: SaleFeedJoinData


# ---------------------------------------------------------------------------
# Normalized events
# ---------------------------------------------------------------------------


class SaleFeedEventType(str, Enum):
    """Kind of sale feed batch.

    Attributes:
        LISTED: New items were listed on the marketplace.
        SOLD: Items were sold.
    """

    LISTED = "listed"
    SOLD = "sold"


class SaleFeedEvent(BaseModel):
    """Normalized ``saleFeed`` batch.

    Attributes:
        event_type: Whether the batch contains listings or sales.
        sales: Sale records exactly as received. Opaque.
        recv_ts: Wall-clock receive timestamp (``time.time_ns()``).
        recv_mono_ns: Monotonic receive timestamp
            (``time.perf_counter_ns()``).
        connection_epoch: Feed join counter. 0 = initial join.
            Increments each time the feed is re-joined after a reconnect.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    event_type: SaleFeedEventType = Field(description="'listed' or 'sold'")
    sales: tuple[dict[str, Any], ...] = Field(
        default=(),
        description="Sale records as received (opaque)",
    )
    recv_ts: int = Field(
        ge=0,
        description="Wall-clock receive timestamp (time.time_ns())",
    )
    recv_mono_ns: int = Field(
        ge=0,
        description="Monotonic receive timestamp (time.perf_counter_ns())",
    )
    connection_epoch: int = Field(
        default=0,
        ge=0,
        description="Feed join counter. 0 = initial join.",
    )

    def is_listing(self) -> bool:
        """Whether this batch announces new listings."""
        return self.event_type == SaleFeedEventType.LISTED

    def is_sale(self) -> bool:
        """Whether this batch announces completed sales."""
        return self.event_type == SaleFeedEventType.SOLD
