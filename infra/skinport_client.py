"""Single entry point to the Skinport REST API and realtime channel.

:class:`Skinport` composes the two transports:

    - a :class:`~infra.http_gateway.RequestGateway`, created eagerly at
      construction with the authorization header frozen into it
    - an :class:`~infra.channel.EventChannelManager`, whose socket is
      only created by the first ``ensure_connected()`` / ``init_socket()``

Marketplace operations are stateless pass-throughs: each forwards its
option record verbatim as query parameters and returns the decoded body.
Rate limits and cache windows are documented per method. They are
enforced by Skinport, not by this client.

Example::

    async with Skinport(client_id, client_secret) as skinport:
        items = await skinport.get_items(ItemsOptions(app_id=730))

        await skinport.init_socket()
        skinport.socket.on("saleFeed", print)
        await skinport.socket.join_sale_feed(appid=730, currency="EUR")
"""

import logging
from types import TracebackType

from core.options import (
    ItemsOptions,
    OutOfStockOptions,
    SalesHistoryOptions,
    TransactionsOptions,
)
from core.responses import (
    ItemsResponse,
    OutOfStockResponse,
    SalesHistoryResponse,
    TransactionsResponse,
)
from infra.channel import ChannelObserver, ChannelState, EventChannelManager
from infra.http_gateway import RequestGateway, build_authorization_header
from infra.skinport_socket import SkinportSocket

logger: logging.Logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

_ITEMS_PATH: str = "/items"
_SALES_HISTORY_PATH: str = "/sales/history"
_OUT_OF_STOCK_PATH: str = "/sales/out-of-stock"
_TRANSACTIONS_PATH: str = "/account/transactions"


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class Skinport:
    """Skinport API client.

    Credentials are optional. Without both of them only the public
    endpoints (items, sales history, out of stock) are usable. They are
    fixed for the lifetime of the instance.

    Args:
        client_id: Skinport API client ID.
        client_secret: Skinport API client secret.
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> None:
        self._client_id: str | None = client_id
        self._client_secret: str | None = client_secret

        self._api: RequestGateway = RequestGateway(
            authorization=build_authorization_header(client_id, client_secret),
        )
        self._channel: EventChannelManager = EventChannelManager()

        logger.debug(
            "Skinport client created (authenticated=%s)",
            self._api.authenticated,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "Skinport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the socket, if any, and the HTTP connection pool.

        The connection pool is released even if closing the socket fails.
        """
        try:
            await self._channel.close()
        finally:
            await self._api.aclose()

    # ------------------------------------------------------------------
    # Realtime channel
    # ------------------------------------------------------------------

    async def init_socket(self) -> None:
        """Connect the realtime socket. Alias of :meth:`ensure_connected`."""
        await self.ensure_connected()

    async def ensure_connected(self) -> None:
        """Connect the realtime socket if it is not connected yet.

        Safe to call repeatedly and concurrently. At most one socket is
        ever created for this client.

        Raises:
            ChannelConnectionError: If the handshake fails.
        """
        await self._channel.ensure_connected()

    @property
    def socket(self) -> SkinportSocket:
        """The realtime socket.

        Supported events:
            - ``saleFeed`` (receive): ``{"eventType": "listed" | "sold",
              "sales": [...]}``.
            - ``saleFeedJoin`` (emit): ``{"appid": int, "currency": str,
              "locale": str}``. Currencies: AUD, BRL, CAD, CHF, CNY, CZK,
              DKK, EUR, GBP, HRK, NOK, PLN, RUB, SEK, TRY, USD. Locales:
              en, de, ru, fr, zh, nl, fi, es, tr.

        Raises:
            ChannelNotInitializedError: If :meth:`init_socket` has never
                been called.
        """
        return self._channel.socket

    @property
    def channel_state(self) -> ChannelState:
        """Current realtime channel state."""
        return self._channel.state

    def set_channel_observer(self, observer: ChannelObserver | None) -> None:
        """Report channel state transitions to ``observer(state, error)``."""
        self._channel.set_observer(observer)

    # ------------------------------------------------------------------
    # Marketplace operations
    # ------------------------------------------------------------------

    async def get_items(
        self,
        options: ItemsOptions | None = None,
    ) -> ItemsResponse:
        """List items available on the marketplace with their metadata.

        Authorization: not required.
        Rate limit: 8 requests per 5 minutes. Cache: 5 minutes.

        Args:
            options: ``app_id`` (default 730), ``currency`` (default
                EUR), ``tradable`` (default false).

        Raises:
            RequestError: If the request fails.
        """
        return await self._api.get(_ITEMS_PATH, _params(options))

    async def get_sales_history(
        self,
        options: SalesHistoryOptions | None = None,
    ) -> SalesHistoryResponse:
        """Aggregated sale prices for specific items.

        Authorization: not required.
        Rate limit: 8 requests per 5 minutes. Cache: 5 minutes.

        Args:
            options: ``market_hash_name`` (comma-delimited), ``app_id``
                (default 730), ``currency`` (default EUR).

        Raises:
            RequestError: If the request fails.
        """
        return await self._api.get(_SALES_HISTORY_PATH, _params(options))

    async def get_out_of_stock(
        self,
        options: OutOfStockOptions | None = None,
    ) -> OutOfStockResponse:
        """Items currently out of stock on Skinport.

        Authorization: not required.
        Cache: 1 hour.

        Args:
            options: ``app_id`` (default 730), ``currency`` (default EUR).

        Raises:
            RequestError: If the request fails.
        """
        return await self._api.get(_OUT_OF_STOCK_PATH, _params(options))

    async def get_transactions(
        self,
        options: TransactionsOptions | None = None,
    ) -> TransactionsResponse:
        """Paginated account transactions.

        Authorization: required.

        Args:
            options: ``page`` (default 1), ``limit`` 1-100 (default
                100), ``order`` asc/desc (default desc).

        Raises:
            AuthenticationError: If credentials are missing or rejected.
            RequestError: If the request fails.
        """
        if not self._api.authenticated:
            logger.warning("get_transactions called without credentials")
        return await self._api.get(_TRANSACTIONS_PATH, _params(options))


def _params(
    options: ItemsOptions
    | SalesHistoryOptions
    | OutOfStockOptions
    | TransactionsOptions
    | None,
) -> dict[str, object]:
    return options.to_params() if options is not None else {}
