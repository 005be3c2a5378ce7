from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, Optional

import httpx
from notion_client import APIResponseError, Client
from notion_client.errors import HTTPResponseError, RequestTimeoutError

from ..errors import ConnectivityError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

_CLIENT_ERRORS = (APIResponseError, HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


class NotionService:
    """
    The four Notion API calls a live source needs.

    Every call is its own HTTP request bounded by the client's timeout_ms;
    nothing here retries. SDK and transport failures come back as
    ConnectivityError naming the database or block involved.
    """

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_api_key(cls, api_key: str, *, timeout_s: int = 30) -> "NotionService":
        return cls(Client(auth=api_key, timeout_ms=timeout_s * 1000))

    def _call(self, what: str, fn: Callable[..., Dict[str, Any]], **kwargs: Any) -> Dict[str, Any]:
        try:
            return fn(**kwargs)
        except _CLIENT_ERRORS as e:
            raise ConnectivityError(f"failed fetching {what}: {type(e).__name__}: {e}") from e

    def find_database(self, database_id: str) -> Dict[str, Any]:
        return self._call(
            f"database {database_id}",
            self._client.databases.retrieve,
            database_id=database_id,
        )

    def query_database(
        self,
        database_id: str,
        *,
        filter: Optional[Dict[str, Any]] = None,
        start_cursor: Optional[str] = None,
        page_size: int = PAGE_SIZE,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"database_id": database_id, "page_size": page_size}
        if filter:
            kwargs["filter"] = filter
        if start_cursor:
            kwargs["start_cursor"] = start_cursor
        return self._call(
            f"rows of database {database_id} (cursor={start_cursor})",
            self._client.databases.query,
            **kwargs,
        )

    def find_block(self, block_id: str) -> Dict[str, Any]:
        return self._call(f"block {block_id}", self._client.blocks.retrieve, block_id=block_id)

    def find_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: int = PAGE_SIZE,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"block_id": block_id, "page_size": page_size}
        if start_cursor:
            kwargs["start_cursor"] = start_cursor
        return self._call(
            f"child blocks for {block_id} (cursor={start_cursor})",
            self._client.blocks.children.list,
            **kwargs,
        )


def iter_pages(fetch: Callable[[Optional[str]], Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
    """
    Lazily walk a cursor-paginated listing.

    *fetch* gets the cursor (None first) and returns one response. Results
    are yielded page by page; the next page is requested only once the
    previous one has been consumed and the service reported has_more.
    """
    cursor: Optional[str] = None
    while True:
        response = fetch(cursor)
        for result in response.get("results", []):
            yield result
        if not response.get("has_more") or not response.get("next_cursor"):
            return
        cursor = response["next_cursor"]
