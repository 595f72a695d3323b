"""Query option records for the Skinport REST operations.

Each record maps one-to-one onto the query string of a single endpoint.
Fields left as ``None`` are omitted from the request, so the server
applies its documented defaults (``app_id=730``, ``currency="EUR"``,
``tradable=false``, ``page=1``, ``limit=100``, ``order="desc"``).

All records are frozen Pydantic models with ``extra="forbid"``: a typo
in a field name fails at construction instead of being silently sent
as an unknown query parameter.

Example:
    >>> from core.options import TransactionsOptions
    >>> TransactionsOptions(page=1, limit=100, order="desc").to_params()
    {'page': 1, 'limit': 100, 'order': 'desc'}
    >>> TransactionsOptions().to_params()
    {}
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


QueryParams = dict[str, Any]
"""Query parameter mapping passed verbatim to the request gateway."""


class _QueryOptions(BaseModel):
    """Base class for option records. Immutable after construction."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_params(self) -> QueryParams:
        """Return the query parameters, skipping unset fields."""
        return self.model_dump(exclude_none=True)


class ItemsOptions(_QueryOptions):
    """Options for ``GET /items``.

    Attributes:
        app_id: The app ID for the inventory's game (server default 730).
        currency: Pricing currency (server default ``"EUR"``).
        tradable: Only return tradable items (server default ``False``).
    """

    app_id: int | None = Field(default=None, description="Game app ID")
    currency: str | None = Field(default=None, description="Pricing currency")
    tradable: bool | None = Field(
        default=None,
        description="Only return tradable items",
    )


class SalesHistoryOptions(_QueryOptions):
    """Options for ``GET /sales/history``.

    Attributes:
        market_hash_name: Item names, comma-delimited.
        app_id: The app ID for the inventory's game (server default 730).
        currency: Pricing currency (server default ``"EUR"``).
    """

    market_hash_name: str | None = Field(
        default=None,
        description="Item names, comma-delimited",
    )
    app_id: int | None = Field(default=None, description="Game app ID")
    currency: str | None = Field(default=None, description="Pricing currency")


class OutOfStockOptions(_QueryOptions):
    """Options for ``GET /sales/out-of-stock``."""

    app_id: int | None = Field(default=None, description="Game app ID")
    currency: str | None = Field(default=None, description="Pricing currency")


class TransactionsOptions(_QueryOptions):
    """Options for ``GET /account/transactions``.

    Attributes:
        page: Pagination page (server default 1).
        limit: Results per page, 1 to 100 (server default 100).
        order: ``"asc"`` or ``"desc"`` (server default ``"desc"``).
    """

    page: int | None = Field(default=None, ge=1, description="Pagination page")
    limit: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="Results per page (1-100)",
    )
    order: Literal["asc", "desc"] | None = Field(
        default=None,
        description="Sort order",
    )
