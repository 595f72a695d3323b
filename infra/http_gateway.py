"""Authenticated HTTP gateway for the Skinport REST API.

This module owns everything between a marketplace operation and the
network: building the ``Authorization`` header from optional client
credentials, binding it to a single ``httpx.AsyncClient`` rooted at the
API base URL, and mapping failures onto :mod:`core.errors`.

Header semantics:
    The authorization header is computed exactly once, when the gateway
    is created, and is never mutated afterwards. Without a complete
    ``(client_id, client_secret)`` pair the header is omitted entirely
    and requests go out unauthenticated.

Error semantics:
    One network call per ``get``. No retry, no caching, no rate
    limiting. A non-2xx response raises :class:`RequestError` (or a
    more specific subclass) carrying the status code and a truncated
    body. A transport failure raises :class:`RequestError` with
    ``status_code=0``.

    Requests never time out inside the gateway. Callers must impose any
    timeout themselves, e.g. with ``asyncio.wait_for``.

Example:
    >>> gateway = RequestGateway(
    ...     authorization=build_authorization_header("id", "secret"),
    ... )
    >>> items = await gateway.get("/items", {"app_id": 730})
    >>> await gateway.aclose()
"""

import base64
import logging
from typing import Any, Mapping

import httpx

from core.errors import AuthenticationError, RateLimitError, RequestError

logger: logging.Logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Endpoint & headers
# ---------------------------------------------------------------------------

API_BASE_URL: str = "https://api.skinport.com/v1"
"""Fixed REST base endpoint. Paths are appended verbatim."""

_STATIC_HEADERS: dict[str, str] = {
    "Accept-Encoding": "br",
    "Content-Type": "application/json",
}
"""Headers sent on every request regardless of credentials."""

_MAX_BODY_CHARS: int = 500
"""Response bodies attached to errors are truncated to this length."""


# ---------------------------------------------------------------------------
# Credential header
# ---------------------------------------------------------------------------


def build_authorization_header(
    client_id: str | None,
    client_secret: str | None,
) -> str | None:
    """Build a Basic ``Authorization`` header value.

    Args:
        client_id: Skinport API client ID, or ``None``.
        client_secret: Skinport API client secret, or ``None``.

    Returns:
        ``"Basic <base64(client_id:client_secret)>"`` when both values
        are non-empty, otherwise ``None`` (no header is sent).

    Example:
        >>> build_authorization_header("id", "secret")
        'Basic aWQ6c2VjcmV0'
        >>> build_authorization_header("id", None) is None
        True
    """
    if not client_id or not client_secret:
        return None
    token: str = base64.b64encode(
        f"{client_id}:{client_secret}".encode("utf-8"),
    ).decode("ascii")
    return f"Basic {token}"


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class RequestGateway:
    """Configured HTTP client bound to the Skinport base endpoint.

    Exposes a single primitive, :meth:`get`, used by every marketplace
    operation. Configuration is immutable after construction, so
    concurrent ``get`` calls need no synchronization. They complete in
    any order.

    Args:
        authorization: Pre-built ``Authorization`` header value, or
            ``None`` to send requests without one.
    """

    def __init__(
        self,
        authorization: str | None = None,
    ) -> None:
        headers: dict[str, str] = dict(_STATIC_HEADERS)
        if authorization is not None:
            headers["Authorization"] = authorization

        self._authenticated: bool = authorization is not None
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=API_BASE_URL,
            headers=headers,
            timeout=None,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def base_url(self) -> str:
        """The fixed REST base endpoint."""
        return API_BASE_URL

    @property
    def authenticated(self) -> bool:
        """Whether requests carry an ``Authorization`` header."""
        return self._authenticated

    async def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Issue ``GET <base><path>?<params>`` and return the decoded body.

        Args:
            path: Endpoint path beginning with ``/`` (e.g. ``"/items"``).
            params: Query parameters, serialized verbatim.

        Returns:
            The JSON-decoded response body, unchanged.

        Raises:
            AuthenticationError: On 401 or 403.
            RateLimitError: On 429.
            RequestError: On any other non-2xx status, on a transport
                failure, or if the body is not valid JSON.
        """
        try:
            response: httpx.Response = await self._client.get(
                path,
                params=dict(params) if params else None,
            )
        except httpx.HTTPError as exc:
            logger.warning("Transport error on GET %s: %s", path, exc)
            raise RequestError(f"HTTP error on GET {path}: {exc}") from exc

        if not response.is_success:
            self._raise_for_status(response=response, path=path)

        try:
            return response.json()
        except ValueError as exc:
            raise RequestError(
                f"GET {path} returned a non-JSON body",
                status_code=response.status_code,
                response_body=response.text[:_MAX_BODY_CHARS],
            ) from exc

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool. Idempotent."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        """Map a non-2xx response onto a :class:`RequestError` subtype."""
        code: int = response.status_code
        body: str = response.text[:_MAX_BODY_CHARS]
        message: str = f"GET {path} -> {code}: {body}"
        logger.debug("Request failed: %s", message)

        if code in (401, 403):
            raise AuthenticationError(message, status_code=code, response_body=body)
        if code == 429:
            raise RateLimitError(message, status_code=code, response_body=body)
        raise RequestError(message, status_code=code, response_body=body)
