"""Structured error hierarchy for the Skinport client.

All client errors inherit from :class:`SkinportError`, so callers can
catch everything in one place while still reacting to specific failure
modes (bad credentials, rate limiting, socket handshake failures).

Error kinds:
    - :class:`RequestError`: non-2xx HTTP response or transport failure
      during a gateway ``get``. ``status_code`` is ``0`` when no response
      was received.
    - :class:`ChannelConnectionError`: the Socket.IO handshake failed.
    - :class:`ChannelNotInitializedError`: the socket accessor was used
      before ``ensure_connected()`` was ever called.

None of these are recovered internally. They always propagate to the
caller.
"""


class SkinportError(Exception):
    """Base exception for all Skinport client errors.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code, ``0`` if not applicable.
        response_body: Raw response body (truncated), ``""`` if not
            applicable.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code: int = status_code
        self.response_body: str = response_body


class RequestError(SkinportError):
    """HTTP request failed (non-2xx status or network error)."""


class AuthenticationError(RequestError):
    """Credentials missing or rejected (401/403)."""


class RateLimitError(RequestError):
    """Rate limit exceeded (429)."""


class ChannelConnectionError(SkinportError):
    """Socket.IO handshake with the realtime endpoint failed."""


class ChannelNotInitializedError(SkinportError):
    """Socket accessed before ``ensure_connected()`` was called."""
