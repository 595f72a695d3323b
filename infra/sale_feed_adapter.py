"""Sale feed adapter for the Skinport realtime channel.

Sits between the socket (:class:`~infra.skinport_socket.SkinportSocket`)
and the consumer. It joins the sale feed, normalizes every ``saleFeed``
payload into an immutable :class:`~core.events.SaleFeedEvent` and
forwards it through a callback.

Error isolation:
    Parse errors and callback errors are counted in separate counters.
    A malformed payload does NOT increment ``callback_errors``, and a
    failing consumer callback does NOT increment ``parse_errors``.

Logging safety:
    Error logging is rate-limited. The first 10 errors of each type are
    logged with full stack traces, afterwards every 1000th.

Reconnects:
    Socket.IO does not replay room membership after a reconnect, so the
    adapter re-emits ``saleFeedJoin`` on every transport ``connect``
    after the first and bumps ``connection_epoch``. Consumers can detect
    reconnects by comparing ``event.connection_epoch``.

Example::

    events = []
    adapter = SaleFeedAdapter(
        config=SaleFeedAdapterConfig(appid=730, currency="EUR"),
        socket=skinport.socket,
        on_event=events.append,
    )
    await adapter.start()
"""

import logging
import time
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.events import (
    DEFAULT_APP_ID,
    DEFAULT_CURRENCY,
    DEFAULT_LOCALE,
    SALE_FEED,
    SUPPORTED_CURRENCIES,
    SUPPORTED_LOCALES,
    SaleFeedEvent,
    SaleFeedEventType,
)
from infra.skinport_socket import SkinportSocket

logger: logging.Logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

EventCallback = Callable[[SaleFeedEvent], None]
"""Callback signature for event consumers: ``(event) -> None``.

Runs inline in the event loop. Must not block.
"""

# ---------------------------------------------------------------------------
# Rate-limited logging thresholds
# ---------------------------------------------------------------------------

_LOG_FIRST_N: int = 10
"""Log full stack trace for the first N errors of each type."""

_LOG_EVERY_N: int = 1000
"""After the first N errors, log every Nth occurrence."""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class SaleFeedAdapterConfig(BaseModel):
    """Sale feed subscription parameters.

    Attributes:
        appid: The app ID for the inventory's game. Default 730.
        currency: Pricing currency. Default ``"EUR"``.
        locale: Result locale. Default ``"en"``.

    Example:
        >>> SaleFeedAdapterConfig(currency="usd").currency
        'USD'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    appid: int = Field(default=DEFAULT_APP_ID, gt=0, description="Game app ID")
    currency: str = Field(default=DEFAULT_CURRENCY, description="Pricing currency")
    locale: str = Field(default=DEFAULT_LOCALE, description="Result locale")

    @field_validator("currency")
    @classmethod
    def _validate_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {v}")
        return v

    @field_validator("locale")
    @classmethod
    def _validate_locale(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in SUPPORTED_LOCALES:
            raise ValueError(f"Unsupported locale: {v}")
        return v


# ---------------------------------------------------------------------------
# Adapter
# ---------------------------------------------------------------------------


class SaleFeedAdapter:
    """Normalizes ``saleFeed`` payloads into :class:`SaleFeedEvent`.

    Args:
        config: Feed subscription parameters.
        socket: Socket obtained from ``Skinport.socket``.
        on_event: Callback invoked with each normalized event.
    """

    def __init__(
        self,
        config: SaleFeedAdapterConfig,
        socket: SkinportSocket,
        on_event: EventCallback,
    ) -> None:
        self._config: SaleFeedAdapterConfig = config
        self._socket: SkinportSocket = socket
        self._on_event: EventCallback = on_event

        self._started: bool = False
        self._connection_epoch: int = 0

        self._events_parsed: int = 0
        self._parse_errors: int = 0
        self._callback_errors: int = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def connection_epoch(self) -> int:
        """Number of re-joins since :meth:`start`."""
        return self._connection_epoch

    async def start(self) -> None:
        """Register handlers and join the sale feed.

        Calling it again is a no-op.
        """
        if self._started:
            logger.debug("SaleFeedAdapter already started, skipping")
            return
        self._started = True

        self._socket.on(SALE_FEED, self._on_message)
        self._socket.on("connect", self._on_reconnect)
        await self._join()

    async def stop(self) -> None:
        """Remove the adapter's handlers. The socket stays connected."""
        if not self._started:
            return
        self._started = False
        self._socket.off(SALE_FEED, self._on_message)
        self._socket.off("connect", self._on_reconnect)
        logger.info("SaleFeedAdapter stopped")

    async def rejoin(self) -> None:
        """Re-emit ``saleFeedJoin`` and start a new connection epoch."""
        self._connection_epoch += 1
        await self._join()

    def stats(self) -> dict[str, object]:
        """Return adapter statistics.

        Returns:
            Dictionary with subscription parameters, epoch and counters.
        """
        return {
            "appid": self._config.appid,
            "currency": self._config.currency,
            "locale": self._config.locale,
            "started": self._started,
            "connection_epoch": self._connection_epoch,
            "events_parsed": self._events_parsed,
            "parse_errors": self._parse_errors,
            "callback_errors": self._callback_errors,
        }

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _join(self) -> None:
        await self._socket.join_sale_feed(
            appid=self._config.appid,
            currency=self._config.currency,
            locale=self._config.locale,
        )

    async def _on_reconnect(self, *args: Any) -> None:
        """Replay the feed join after a transport-level reconnect."""
        logger.info("Socket reconnected, re-joining sale feed")
        await self.rejoin()

    def _on_message(self, payload: Any) -> None:
        """Parse one ``saleFeed`` payload and forward the event.

        A payload increments exactly one of ``_events_parsed``,
        ``_parse_errors`` or ``_callback_errors``.

        Args:
            payload: Raw decoded ``saleFeed`` payload.
        """
        recv_ts: int = time.time_ns()
        recv_mono_ns: int = time.perf_counter_ns()

        # Phase 1: normalize (isolated)
        try:
            event: SaleFeedEvent = self._parse(
                payload=payload,
                recv_ts=recv_ts,
                recv_mono_ns=recv_mono_ns,
                connection_epoch=self._connection_epoch,
            )
        except Exception:
            self._parse_errors += 1
            self._log_parse_error()
            return

        # Phase 2: forward (isolated)
        try:
            self._on_event(event)
        except Exception:
            self._callback_errors += 1
            self._log_callback_error()
            return

        self._events_parsed += 1

    @staticmethod
    def _parse(
        payload: Any,
        recv_ts: int,
        recv_mono_ns: int,
        connection_epoch: int,
    ) -> SaleFeedEvent:
        """Build a :class:`SaleFeedEvent` from a raw payload.

        Raises:
            TypeError: If the payload is not a mapping or ``sales`` is
                not a list.
            KeyError: If ``eventType`` is missing.
            ValueError: If ``eventType`` is not ``listed``/``sold``.
        """
        if not isinstance(payload, dict):
            raise TypeError(f"saleFeed payload must be a dict, got {type(payload)!r}")
        sales: Any = payload.get("sales", [])
        if not isinstance(sales, list):
            raise TypeError(f"saleFeed sales must be a list, got {type(sales)!r}")
        return SaleFeedEvent(
            event_type=SaleFeedEventType(payload["eventType"]),
            sales=tuple(sales),
            recv_ts=recv_ts,
            recv_mono_ns=recv_mono_ns,
            connection_epoch=connection_epoch,
        )

    # ------------------------------------------------------------------
    # Rate-Limited Logging
    # ------------------------------------------------------------------

    def _log_parse_error(self) -> None:
        count: int = self._parse_errors
        if count <= _LOG_FIRST_N:
            logger.exception(
                "Failed to parse saleFeed payload (%d/%d)",
                count,
                _LOG_FIRST_N,
            )
        elif count % _LOG_EVERY_N == 0:
            logger.error("Parse errors ongoing: %d total", count)

    def _log_callback_error(self) -> None:
        count: int = self._callback_errors
        if count <= _LOG_FIRST_N:
            logger.exception(
                "Sale feed callback error (%d/%d)",
                count,
                _LOG_FIRST_N,
            )
        elif count % _LOG_EVERY_N == 0:
            logger.error("Callback errors ongoing: %d total", count)
