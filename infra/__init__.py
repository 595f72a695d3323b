"""Infrastructure layer for the Skinport client.

This package provides the transports (HTTP gateway, Socket.IO channel),
the channel lifecycle manager, the sale feed adapter and the
:class:`Skinport` entry point composing them.
"""

from infra.channel import ChannelState, EventChannelManager
from infra.http_gateway import RequestGateway, build_authorization_header
from infra.sale_feed_adapter import SaleFeedAdapter, SaleFeedAdapterConfig
from infra.skinport_client import Skinport
from infra.skinport_socket import SkinportSocket

__all__: list[str] = [
    "ChannelState",
    "EventChannelManager",
    "RequestGateway",
    "SaleFeedAdapter",
    "SaleFeedAdapterConfig",
    "Skinport",
    "SkinportSocket",
    "build_authorization_header",
]
