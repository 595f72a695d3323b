"""Lifecycle manager for the Skinport realtime event channel.

Owns at most one :class:`~infra.skinport_socket.SkinportSocket` per
client and drives it through an explicit state machine::

    UNINITIALIZED ──ensure_connected()──▶ CONNECTING ──handshake ok──▶ CONNECTED
                                              │
                                              └──handshake error──▶ FAILED
    FAILED ──ensure_connected()──▶ CONNECTING   (same socket object)

Connection semantics:
    - ``ensure_connected()`` on CONNECTED returns immediately.
    - Calls made while a handshake is in flight all await that one
      attempt (the pending task is cached), so overlapping early calls
      neither race nor open a second transport connection.
    - After a failed handshake the socket object is kept, and the next
      ``ensure_connected()`` retries the handshake on it. A second
      socket object is never created.
    - Once CONNECTED, drops and reconnects are handled by the transport's
      own reconnection policy. This manager does not observe or expose
      them.

Guarded access:
    :attr:`EventChannelManager.socket` raises
    :class:`~core.errors.ChannelNotInitializedError` while UNINITIALIZED.
    It never blocks or waits for CONNECTED.

Observability:
    Every state transition is logged and, if set, reported to an
    injectable observer ``(state, error) -> None``. The manager never
    writes to stdout.

Concurrency:
    Single-threaded asyncio. State is mutated only from the event loop
    running the manager, so no locks are taken.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable

from core.errors import ChannelConnectionError, ChannelNotInitializedError
from infra.skinport_socket import SkinportSocket

logger: logging.Logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

ChannelObserver = Callable[["ChannelState", "BaseException | None"], None]
"""Observer signature: ``(new_state, error) -> None``."""

SocketFactory = Callable[[], SkinportSocket]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ChannelState(str, Enum):
    """Connection state machine for :class:`EventChannelManager`.

    States:
        UNINITIALIZED: No socket object exists.
        CONNECTING: Socket object exists, handshake in flight.
        CONNECTED: Handshake succeeded at least once.
        FAILED: Last handshake attempt errored. The socket object is
            kept for the next attempt.
    """

    UNINITIALIZED = "UNINITIALIZED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    FAILED = "FAILED"


# ---------------------------------------------------------------------------
# Lifecycle manager
# ---------------------------------------------------------------------------


class EventChannelManager:
    """Lazily creates and connects the single realtime socket.

    Args:
        socket_factory: Callable building the socket on first use.
            Defaults to :class:`SkinportSocket`.
        observer: Optional state transition observer.

    Example::

        manager = EventChannelManager()
        await manager.ensure_connected()
        manager.socket.on("saleFeed", handle_sale_feed)
        await manager.socket.join_sale_feed(appid=730)
    """

    def __init__(
        self,
        socket_factory: SocketFactory = SkinportSocket,
        observer: ChannelObserver | None = None,
    ) -> None:
        self._socket_factory: SocketFactory = socket_factory
        self._observer: ChannelObserver | None = observer

        self._socket: SkinportSocket | None = None
        self._state: ChannelState = ChannelState.UNINITIALIZED
        self._handshake: asyncio.Task[None] | None = None

        self._connect_attempts: int = 0
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> ChannelState:
        """Current channel state."""
        return self._state

    @property
    def socket(self) -> SkinportSocket:
        """The channel socket.

        Raises:
            ChannelNotInitializedError: If ``ensure_connected()`` has
                never been called.
        """
        if self._state == ChannelState.UNINITIALIZED or self._socket is None:
            raise ChannelNotInitializedError(
                "Socket not initialized. Call `ensure_connected()` first."
            )
        return self._socket

    @property
    def last_error(self) -> BaseException | None:
        """Error of the most recent failed handshake, if any."""
        return self._last_error

    def set_observer(self, observer: ChannelObserver | None) -> None:
        """Install (or remove, with ``None``) the state transition observer."""
        self._observer = observer

    async def ensure_connected(self) -> None:
        """Connect the channel if it is not connected yet.

        Idempotent. Concurrent callers share one handshake attempt and
        all receive its outcome.

        Raises:
            ChannelConnectionError: If the handshake fails or :meth:`close`
                interrupts it.
        """
        if self._state == ChannelState.CONNECTED:
            return

        if self._handshake is None:
            if self._socket is None:
                self._socket = self._socket_factory()
            self._transition(ChannelState.CONNECTING)
            self._handshake = asyncio.ensure_future(
                self._run_handshake(self._socket),
            )
        else:
            logger.debug("Handshake already in flight, awaiting it")

        handshake: asyncio.Task[None] = self._handshake
        try:
            await asyncio.shield(handshake)
        except asyncio.CancelledError:
            # Handshake cancelled by close(); this caller was not cancelled.
            if handshake.cancelled():
                raise ChannelConnectionError(
                    "Channel closed during handshake"
                ) from None
            raise

    async def close(self) -> None:
        """Disconnect the socket and release it.

        Called when the owning client shuts down. Returns the manager to
        UNINITIALIZED.
        """
        handshake: asyncio.Task[None] | None = self._handshake
        if handshake is not None and not handshake.done():
            handshake.cancel()
            await asyncio.gather(handshake, return_exceptions=True)

        socket: SkinportSocket | None = self._socket
        self._socket = None
        self._handshake = None
        if socket is not None:
            await socket.disconnect()
            self._transition(ChannelState.UNINITIALIZED)

    def stats(self) -> dict[str, object]:
        """Return channel statistics."""
        return {
            "state": self._state.value,
            "connected": self._socket is not None and self._socket.connected,
            "connect_attempts": self._connect_attempts,
            "last_error": repr(self._last_error) if self._last_error else "",
        }

    # ------------------------------------------------------------------
    # Handshake
    # ------------------------------------------------------------------

    async def _run_handshake(self, socket: SkinportSocket) -> None:
        """Perform one handshake attempt and record its outcome."""
        self._connect_attempts += 1
        try:
            await socket.connect()
        except asyncio.CancelledError as exc:
            self._last_error = exc
            self._transition(ChannelState.FAILED, exc)
            raise
        except Exception as exc:
            self._last_error = exc
            self._transition(ChannelState.FAILED, exc)
            raise ChannelConnectionError(
                f"Failed to connect to Skinport socket: {exc}"
            ) from exc
        else:
            self._last_error = None
            self._transition(ChannelState.CONNECTED)
        finally:
            if self._handshake is asyncio.current_task():
                self._handshake = None

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def _transition(
        self,
        state: ChannelState,
        error: BaseException | None = None,
    ) -> None:
        """Move to ``state``, log it and notify the observer."""
        previous: ChannelState = self._state
        self._state = state

        if error is None:
            logger.info("Channel %s -> %s", previous.value, state.value)
        else:
            logger.error(
                "Channel %s -> %s: %s",
                previous.value,
                state.value,
                error,
            )

        if self._observer is not None:
            try:
                self._observer(state, error)
            except Exception:
                logger.exception("Channel observer error")
