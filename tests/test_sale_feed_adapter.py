"""Unit tests for infra.sale_feed_adapter module.

The socket is mocked, so tests drive ``_on_message`` directly with raw
payloads. Tests verify normalization, error isolation, rate-limited
logging, feed joining/re-joining and stats.
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import ValidationError

from core.events import SALE_FEED, SaleFeedEvent, SaleFeedEventType
from infra.sale_feed_adapter import (
    _LOG_EVERY_N,
    _LOG_FIRST_N,
    SaleFeedAdapter,
    SaleFeedAdapterConfig,
)
from infra.skinport_socket import SkinportSocket


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_payload(event_type: str = "sold", count: int = 2) -> dict[str, Any]:
    """Create a raw saleFeed payload with ``count`` sale records."""
    return {
        "eventType": event_type,
        "sales": [
            {"saleId": 1000 + i, "marketHashName": f"Item {i}", "salePrice": 150 + i}
            for i in range(count)
        ],
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_socket() -> MagicMock:
    """Return a mocked SkinportSocket."""
    socket = MagicMock(spec=SkinportSocket)
    socket.join_sale_feed = AsyncMock()
    return socket


@pytest.fixture()
def events() -> list:
    """Return a list to collect events via callback."""
    return []


@pytest.fixture()
def adapter(mock_socket: MagicMock, events: list) -> SaleFeedAdapter:
    """Return a SaleFeedAdapter with default config and list callback."""
    return SaleFeedAdapter(
        config=SaleFeedAdapterConfig(),
        socket=mock_socket,
        on_event=events.append,
    )


# ---------------------------------------------------------------------------
# Configuration Tests
# ---------------------------------------------------------------------------


class TestSaleFeedAdapterConfig:
    """Tests for SaleFeedAdapterConfig Pydantic model."""

    def test_defaults(self) -> None:
        config: SaleFeedAdapterConfig = SaleFeedAdapterConfig()
        assert config.appid == 730
        assert config.currency == "EUR"
        assert config.locale == "en"

    def test_normalizes_case(self) -> None:
        config: SaleFeedAdapterConfig = SaleFeedAdapterConfig(currency="usd", locale="DE")
        assert config.currency == "USD"
        assert config.locale == "de"

    def test_unsupported_currency(self) -> None:
        with pytest.raises(ValidationError):
            SaleFeedAdapterConfig(currency="XYZ")

    def test_unsupported_locale(self) -> None:
        with pytest.raises(ValidationError):
            SaleFeedAdapterConfig(locale="jp")

    def test_appid_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SaleFeedAdapterConfig(appid=0)

    def test_frozen(self) -> None:
        config: SaleFeedAdapterConfig = SaleFeedAdapterConfig()
        with pytest.raises(ValidationError):
            config.appid = 570  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Start / Stop Tests
# ---------------------------------------------------------------------------


class TestStartStop:
    """Tests for handler registration and feed joining."""

    @pytest.mark.asyncio
    async def test_start_registers_and_joins(
        self,
        adapter: SaleFeedAdapter,
        mock_socket: MagicMock,
    ) -> None:
        await adapter.start()

        mock_socket.on.assert_any_call(SALE_FEED, adapter._on_message)
        mock_socket.on.assert_any_call("connect", adapter._on_reconnect)
        mock_socket.join_sale_feed.assert_awaited_once_with(
            appid=730,
            currency="EUR",
            locale="en",
        )

    @pytest.mark.asyncio
    async def test_start_is_idempotent(
        self,
        adapter: SaleFeedAdapter,
        mock_socket: MagicMock,
    ) -> None:
        await adapter.start()
        await adapter.start()

        assert mock_socket.join_sale_feed.await_count == 1
        assert mock_socket.on.call_count == 2

    @pytest.mark.asyncio
    async def test_custom_subscription(self, mock_socket: MagicMock) -> None:
        adapter: SaleFeedAdapter = SaleFeedAdapter(
            config=SaleFeedAdapterConfig(appid=570, currency="GBP", locale="fr"),
            socket=mock_socket,
            on_event=lambda event: None,
        )
        await adapter.start()

        mock_socket.join_sale_feed.assert_awaited_once_with(
            appid=570,
            currency="GBP",
            locale="fr",
        )

    @pytest.mark.asyncio
    async def test_stop_removes_handlers(
        self,
        adapter: SaleFeedAdapter,
        mock_socket: MagicMock,
    ) -> None:
        await adapter.start()
        await adapter.stop()

        mock_socket.off.assert_any_call(SALE_FEED, adapter._on_message)
        mock_socket.off.assert_any_call("connect", adapter._on_reconnect)
        assert adapter.stats()["started"] is False

    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(
        self,
        adapter: SaleFeedAdapter,
        mock_socket: MagicMock,
    ) -> None:
        await adapter.stop()
        mock_socket.off.assert_not_called()


# ---------------------------------------------------------------------------
# Reconnect Tests
# ---------------------------------------------------------------------------


class TestRejoin:
    """Tests for connection epoch and feed replay."""

    @pytest.mark.asyncio
    async def test_reconnect_rejoins_and_bumps_epoch(
        self,
        adapter: SaleFeedAdapter,
        mock_socket: MagicMock,
        events: list,
    ) -> None:
        await adapter.start()
        await adapter._on_reconnect()

        assert adapter.connection_epoch == 1
        assert mock_socket.join_sale_feed.await_count == 2

        adapter._on_message(_make_payload())
        assert events[-1].connection_epoch == 1

    @pytest.mark.asyncio
    async def test_events_before_reconnect_have_epoch_zero(
        self,
        adapter: SaleFeedAdapter,
        events: list,
    ) -> None:
        await adapter.start()
        adapter._on_message(_make_payload())
        assert events[0].connection_epoch == 0


# ---------------------------------------------------------------------------
# Normalization Tests
# ---------------------------------------------------------------------------


class TestNormalization:
    """Tests for saleFeed payload → SaleFeedEvent."""

    def test_sold_payload(self, adapter: SaleFeedAdapter, events: list) -> None:
        payload: dict[str, Any] = _make_payload("sold", count=3)
        adapter._on_message(payload)

        assert len(events) == 1
        event: SaleFeedEvent = events[0]
        assert event.event_type is SaleFeedEventType.SOLD
        assert list(event.sales) == payload["sales"]
        assert event.recv_ts > 0
        assert event.recv_mono_ns > 0

    def test_listed_payload(self, adapter: SaleFeedAdapter, events: list) -> None:
        adapter._on_message(_make_payload("listed", count=1))
        assert events[0].is_listing() is True

    def test_missing_sales_defaults_empty(
        self,
        adapter: SaleFeedAdapter,
        events: list,
    ) -> None:
        adapter._on_message({"eventType": "listed"})
        assert events[0].sales == ()


# ---------------------------------------------------------------------------
# Error Isolation Tests
# ---------------------------------------------------------------------------


class TestErrorIsolation:
    """Parse errors and callback errors are counted separately."""

    @pytest.mark.parametrize(
        "payload",
        [
            "not-a-dict",
            {"sales": []},
            {"eventType": "cancelled", "sales": []},
            {"eventType": "sold", "sales": "nope"},
        ],
    )
    def test_parse_errors(
        self,
        adapter: SaleFeedAdapter,
        events: list,
        payload: Any,
    ) -> None:
        adapter._on_message(payload)

        stats = adapter.stats()
        assert events == []
        assert stats["parse_errors"] == 1
        assert stats["callback_errors"] == 0
        assert stats["events_parsed"] == 0

    def test_callback_error(self, mock_socket: MagicMock) -> None:
        def broken(event: SaleFeedEvent) -> None:
            raise RuntimeError("consumer failure")

        adapter: SaleFeedAdapter = SaleFeedAdapter(
            config=SaleFeedAdapterConfig(),
            socket=mock_socket,
            on_event=broken,
        )
        adapter._on_message(_make_payload())

        stats = adapter.stats()
        assert stats["callback_errors"] == 1
        assert stats["parse_errors"] == 0
        assert stats["events_parsed"] == 0

    def test_success_counted(self, adapter: SaleFeedAdapter) -> None:
        for _ in range(5):
            adapter._on_message(_make_payload())
        assert adapter.stats()["events_parsed"] == 5

    def test_adapter_continues_after_error(
        self,
        adapter: SaleFeedAdapter,
        events: list,
    ) -> None:
        adapter._on_message("garbage")
        adapter._on_message(_make_payload())
        assert len(events) == 1


# ---------------------------------------------------------------------------
# Rate-Limited Logging Tests
# ---------------------------------------------------------------------------


class TestRateLimitedLogging:
    """First N errors log tracebacks, then every Nth."""

    def test_first_n_parse_errors_logged_with_trace(
        self,
        adapter: SaleFeedAdapter,
    ) -> None:
        with patch("infra.sale_feed_adapter.logger") as mock_logger:
            for _ in range(_LOG_FIRST_N):
                adapter._on_message("garbage")
        assert mock_logger.exception.call_count == _LOG_FIRST_N
        mock_logger.error.assert_not_called()

    def test_parse_errors_after_first_n_throttled(
        self,
        adapter: SaleFeedAdapter,
    ) -> None:
        with patch("infra.sale_feed_adapter.logger") as mock_logger:
            for _ in range(_LOG_EVERY_N):
                adapter._on_message("garbage")
        assert mock_logger.exception.call_count == _LOG_FIRST_N
        assert mock_logger.error.call_count == 1

    def test_callback_errors_throttled(self, mock_socket: MagicMock) -> None:
        def broken(event: SaleFeedEvent) -> None:
            raise RuntimeError("consumer failure")

        adapter: SaleFeedAdapter = SaleFeedAdapter(
            config=SaleFeedAdapterConfig(),
            socket=mock_socket,
            on_event=broken,
        )
        with patch("infra.sale_feed_adapter.logger") as mock_logger:
            for _ in range(_LOG_EVERY_N):
                adapter._on_message(_make_payload(count=0))
        assert mock_logger.exception.call_count == _LOG_FIRST_N
        assert mock_logger.error.call_count == 1


# ---------------------------------------------------------------------------
# Stats Tests
# ---------------------------------------------------------------------------


class TestStats:
    def test_initial_stats(self, adapter: SaleFeedAdapter) -> None:
        assert adapter.stats() == {
            "appid": 730,
            "currency": "EUR",
            "locale": "en",
            "started": False,
            "connection_epoch": 0,
            "events_parsed": 0,
            "parse_errors": 0,
            "callback_errors": 0,
        }
