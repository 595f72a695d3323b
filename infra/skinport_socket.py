"""Typed Socket.IO facade for the Skinport realtime channel.

Wraps a single ``socketio.AsyncClient`` configured the way the Skinport
realtime endpoint expects it:

    - websocket transport only (no long-polling upgrade)
    - msgpack serializer (binary-efficient frames)
    - TLS endpoint
    - transport-level reconnection enabled

Typed contract:
    ``on()`` and ``emit()`` are annotated against the contract maps in
    :mod:`core.events` (``ServerToClientEvents`` and
    ``ClientToServerEvents``), so a type checker rejects a ``saleFeed``
    handler with the wrong signature or a ``saleFeedJoin`` payload with
    missing keys. Payloads are NOT validated at runtime; whatever an
    untyped caller passes goes to the transport unchanged. Event names
    outside the maps are accepted and logged at debug level.

Handler registry:
    ``socketio.AsyncClient`` keeps one handler per event. This facade
    keeps a list per event instead (source of truth) and registers a
    single dispatcher with the transport, so several consumers can
    listen to ``saleFeed`` or ``connect`` at once. Handlers may be plain
    functions or coroutines. Each handler call is isolated: an exception
    is logged and counted, and the remaining handlers still run.

Example::

    socket = SkinportSocket()
    socket.on("saleFeed", lambda data: print(data["eventType"]))
    await socket.connect()
    await socket.emit("saleFeedJoin", {"appid": 730, "currency": "EUR", "locale": "en"})
"""

import inspect
import logging
from typing import Any, Callable, Literal, overload

import socketio

from core.events import (
    DEFAULT_APP_ID,
    DEFAULT_CURRENCY,
    DEFAULT_LOCALE,
    SALE_FEED_JOIN,
    ClientToServerEvents,
    SaleFeedEventName,
    SaleFeedHandler,
    SaleFeedJoinData,
    SaleFeedJoinEventName,
    ServerToClientEvents,
)

logger: logging.Logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

SOCKET_URL: str = "https://skinport.com"
"""Realtime endpoint. Upgraded to ``wss://`` by the websocket transport."""

_TRANSPORTS: list[str] = ["websocket"]

LifecycleEventName = Literal["connect", "disconnect", "connect_error"]
"""Local Socket.IO events fired by the transport itself."""

_SERVER_EVENTS: frozenset[str] = frozenset(ServerToClientEvents.__annotations__)
_CLIENT_EVENTS: frozenset[str] = frozenset(ClientToServerEvents.__annotations__)
_LIFECYCLE_EVENTS: frozenset[str] = frozenset({"connect", "disconnect", "connect_error"})

Handler = Callable[..., Any]


# ---------------------------------------------------------------------------
# Socket facade
# ---------------------------------------------------------------------------


class SkinportSocket:
    """Typed wrapper around one ``socketio.AsyncClient``.

    Args:
        client: Pre-built Socket.IO client. ``None`` (default) creates one
            with reconnection enabled and the msgpack serializer.
    """

    def __init__(self, client: socketio.AsyncClient | None = None) -> None:
        self._sio: socketio.AsyncClient = (
            client
            if client is not None
            else socketio.AsyncClient(
                reconnection=True,
                serializer="msgpack",
                handle_sigint=False,
            )
        )

        # Event name -> handlers (source of truth)
        self._handlers: dict[str, list[Handler]] = {}

        self._events_received: int = 0
        self._handler_errors: int = 0

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        """Whether the transport currently holds a live connection."""
        return bool(self._sio.connected)

    async def connect(self) -> None:
        """Perform the Socket.IO handshake with the realtime endpoint.

        Raises:
            socketio.exceptions.ConnectionError: If the handshake fails.
        """
        logger.debug("Opening Socket.IO connection to %s", SOCKET_URL)
        await self._sio.connect(SOCKET_URL, transports=_TRANSPORTS)

    async def disconnect(self) -> None:
        """Close the connection and stop transport-level reconnection."""
        await self._sio.disconnect()

    # ------------------------------------------------------------------
    # Receiving
    # ------------------------------------------------------------------

    @overload
    def on(
        self,
        event: SaleFeedEventName,
        handler: SaleFeedHandler,
    ) -> None: ...

    @overload
    def on(self, event: LifecycleEventName, handler: Handler) -> None: ...

    def on(self, event: str, handler: Handler) -> None:
        """Register a handler for a server-pushed or lifecycle event.

        Several handlers may be registered for the same event. They run
        in registration order.

        Args:
            event: Event name (``"saleFeed"``, ``"connect"``,
                ``"disconnect"`` or ``"connect_error"``).
            handler: Function or coroutine function receiving the event
                arguments.
        """
        if event not in self._handlers:
            if event not in _SERVER_EVENTS and event not in _LIFECYCLE_EVENTS:
                logger.debug("Registering handler for %s, outside the event contract", event)
            self._handlers[event] = []
            self._sio.on(event, self._make_dispatcher(event))
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler | None = None) -> None:
        """Remove one handler, or every handler when ``handler`` is ``None``.

        Args:
            event: Event name.
            handler: Handler previously passed to :meth:`on`.
        """
        handlers: list[Handler] | None = self._handlers.get(event)
        if handlers is None:
            return
        if handler is None:
            handlers.clear()
        elif handler in handlers:
            handlers.remove(handler)

    def handlers(self, event: str) -> tuple[Handler, ...]:
        """Handlers currently registered for ``event``."""
        return tuple(self._handlers.get(event, ()))

    # ------------------------------------------------------------------
    # Emitting
    # ------------------------------------------------------------------

    async def emit(
        self,
        event: SaleFeedJoinEventName,
        data: SaleFeedJoinData,
    ) -> None:
        """Emit a client event. ``data`` is passed through unvalidated."""
        if event not in _CLIENT_EVENTS:
            logger.debug("Emitting %s, outside the event contract", event)
        await self._sio.emit(event, data)

    async def join_sale_feed(
        self,
        appid: int = DEFAULT_APP_ID,
        currency: str = DEFAULT_CURRENCY,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        """Join the sale feed for one game, currency and locale.

        Args:
            appid: The app ID for the inventory's game.
            currency: Pricing currency (e.g. ``"EUR"``).
            locale: Result locale (e.g. ``"en"``).
        """
        payload: SaleFeedJoinData = {
            "appid": appid,
            "currency": currency,
            "locale": locale,
        }
        await self.emit(SALE_FEED_JOIN, payload)
        logger.info(
            "Joined sale feed (appid=%d, currency=%s, locale=%s)",
            appid,
            currency,
            locale,
        )

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def stats(self) -> dict[str, object]:
        """Return socket statistics.

        Returns:
            Dictionary with connection flag, registered events and
            counters.
        """
        return {
            "connected": self.connected,
            "events": sorted(self._handlers),
            "events_received": self._events_received,
            "handler_errors": self._handler_errors,
        }

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _make_dispatcher(self, event: str) -> Callable[..., Any]:
        """Build the single transport-level handler for ``event``."""

        async def dispatch(*args: Any) -> None:
            await self._dispatch(event, *args)

        return dispatch

    async def _dispatch(self, event: str, *args: Any) -> None:
        """Fan an incoming event out to every registered handler."""
        self._events_received += 1
        for handler in list(self._handlers.get(event, ())):
            try:
                result: Any = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._handler_errors += 1
                logger.exception("Handler error for event %s", event)
