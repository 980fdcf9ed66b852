"""Paginated fetching of remote collections."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .protocols import CollectionClient


def paginate(client: CollectionClient, path: str, **params: Any) -> Iterator[list[dict[str, Any]]]:
    """Yield the item batches of a collection, following ``next`` links.

    Query parameters are only sent with the first request: each ``next``
    URL already embeds them. The stream ends when a page carries no
    ``next`` link. Errors from the client propagate; nothing is retried.
    """
    page = client.get(path, **params)
    yield page.items

    while page.next_url:
        page = client.get(page.next_url)
        yield page.items
