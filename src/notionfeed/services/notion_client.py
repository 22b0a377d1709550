"""Notion REST API client implementing the BlockSource interface."""

import time
from typing import Any, Callable, Dict, Optional

import httpx

from notionfeed.extraction.boards import UNTITLED
from notionfeed.extraction.classifier import icon_value
from notionfeed.models.block import RawBlock
from notionfeed.models.board import Board, BoardKind
from notionfeed.models.config import NotionConfig
from notionfeed.services.block_source import BlockSource
from notionfeed.services.cache import ResponseCache
from notionfeed.services.exceptions import NotionAPIError
from notionfeed.services.properties import extract_properties, first_number, page_title
from notionfeed.utils.ids import normalize_notion_id
from notionfeed.utils.logging import get_logger


logger = get_logger(__name__)

PAGE_SIZE = 100
DATABASE_CACHE_PREFIX = "db_"


def _sort_by_first_number(boards: list[Board]) -> list[Board]:
    """Sort rows descending by their first numeric property, rows without one last."""

    def key(board: Board) -> tuple[bool, float]:
        number = first_number(board.properties)
        return (number is None, -(number or 0))

    return sorted(boards, key=key)


class NotionClient(BlockSource):
    """
    Async HTTP client for the Notion API with a short-lived response cache.

    Block children and database queries are paginated transparently and
    cached for ``cache_ttl`` seconds. Failures raise NotionAPIError; there
    are no retries.

    Example:
        >>> async with NotionClient(config) as client:
        ...     blocks = await client.fetch_children(config.root_page_id)
    """

    def __init__(
        self,
        config: NotionConfig,
        cache_ttl: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize Notion client.

        Args:
            config: Notion configuration (token, API base, version)
            cache_ttl: Seconds a cached response stays fresh
            transport: Optional httpx transport (used by tests)
            clock: Time source for cache freshness
        """
        self.config = config
        self.timeout = httpx.Timeout(config.timeout, connect=10.0)
        self._cache = ResponseCache(ttl=cache_ttl)
        self._clock = clock
        self._client = httpx.AsyncClient(
            base_url=str(config.api_base).rstrip("/"),
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Notion-Version": config.notion_version,
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and decode the JSON body.

        Raises:
            NotionAPIError: On transport errors or HTTP status >= 400
        """
        logger.debug("notion_request", method=method, endpoint=endpoint, params=params)

        try:
            response = await self._client.request(method, endpoint, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error("notion_request_failed", method=method, endpoint=endpoint, error=str(e))
            raise NotionAPIError(f"Request to {endpoint} failed: {e}") from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            logger.error(
                "notion_api_error",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                code=body.get("code"),
            )
            raise NotionAPIError(
                message=body.get("message") or response.text or "Unknown error",
                status_code=response.status_code,
                code=body.get("code") or "",
            )

        return response.json()

    async def fetch_children(self, container_id: str, force_refresh: bool = False) -> list[RawBlock]:
        """
        Fetch all direct children of a block or page.

        Args:
            container_id: Block/page id or page URL
            force_refresh: Skip the cache and refetch from Notion

        Returns:
            Ordered list of child blocks

        Raises:
            NotionAPIError: If any page of results fails to load
        """
        clean_id = normalize_notion_id(container_id)

        if not force_refresh:
            cached = self._cache.get(clean_id, self._clock())
            if cached is not None:
                logger.debug("cache_hit", key=clean_id)
                return list(cached)

        blocks: list[RawBlock] = []
        cursor: Optional[str] = None

        while True:
            params: Dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor

            data = await self._request("GET", f"blocks/{clean_id}/children", params=params)
            blocks.extend(RawBlock.from_api(result) for result in data.get("results") or [])

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        logger.info("blocks_fetched", container_id=clean_id, count=len(blocks))
        self._cache.put(clean_id, blocks, self._clock())
        return list(blocks)

    async def query_database(self, database_id: str, force_refresh: bool = False) -> list[Board]:
        """
        Query every row of a database as an unloaded page board.

        Rows carry their extracted properties and icon, and are sorted
        descending by their first numeric property.

        Args:
            database_id: Database id
            force_refresh: Skip the cache and requery Notion

        Returns:
            Page boards whose parent is the database

        Raises:
            NotionAPIError: If the query fails
        """
        clean_id = normalize_notion_id(database_id)
        cache_key = f"{DATABASE_CACHE_PREFIX}{clean_id}"

        if not force_refresh:
            cached = self._cache.get(cache_key, self._clock())
            if cached is not None:
                logger.debug("cache_hit", key=cache_key)
                return [board.model_copy() for board in cached]

        rows: list[Board] = []
        cursor: Optional[str] = None

        while True:
            body: Dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor

            data = await self._request("POST", f"databases/{clean_id}/query", json=body)

            for page in data.get("results") or []:
                if not isinstance(page, dict) or not page.get("id"):
                    continue
                properties = extract_properties(page.get("properties"))
                rows.append(
                    Board(
                        id=page["id"],
                        title=page_title(page.get("properties")) or UNTITLED,
                        parent_id=database_id,
                        kind=BoardKind.PAGE,
                        has_children=True,
                        is_loaded=False,
                        properties=properties or None,
                        icon=icon_value(page.get("icon")),
                    )
                )

            cursor = data.get("next_cursor")
            if not data.get("has_more") or not cursor:
                break

        rows = _sort_by_first_number(rows)
        logger.info("database_queried", database_id=clean_id, rows=len(rows))
        self._cache.put(cache_key, rows, self._clock())
        return [board.model_copy() for board in rows]

    def invalidate(self, container_id: str) -> None:
        """Evict every cache entry whose key contains the normalized id."""
        clean_id = normalize_notion_id(container_id)
        removed = self._cache.invalidate(lambda key: clean_id in key)
        logger.debug("cache_invalidated", container_id=clean_id, removed=removed)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("cache_cleared")

    async def fetch_page_icon(self, page_id: str) -> Optional[str]:
        """
        Fetch a page's icon. Best-effort: failures are logged and yield None.

        Returns:
            Emoji literal, icon image URL, or None
        """
        try:
            data = await self._request("GET", f"pages/{normalize_notion_id(page_id)}")
        except NotionAPIError as e:
            logger.warning("page_icon_unavailable", page_id=page_id, error=str(e))
            return None
        return icon_value(data.get("icon"))

    async def create_toggle(self, parent_id: str, title: str) -> Board:
        """
        Append a new toggle section to a page and return it as a board.

        The parent's cached children are invalidated so the next load sees it.

        Raises:
            NotionAPIError: If the block cannot be created
        """
        clean_id = normalize_notion_id(parent_id)
        body = {
            "children": [
                {
                    "object": "block",
                    "type": "toggle",
                    "toggle": {"rich_text": [{"type": "text", "text": {"content": title}}]},
                }
            ]
        }
        data = await self._request("PATCH", f"blocks/{clean_id}/children", json=body)
        self.invalidate(parent_id)

        results = data.get("results") or []
        if not results or not results[0].get("id"):
            raise NotionAPIError("Notion did not return the created block")

        logger.info("toggle_created", parent_id=clean_id, block_id=results[0]["id"])
        return Board(
            id=results[0]["id"],
            title=title,
            parent_id=parent_id,
            kind=BoardKind.TOGGLE,
            has_children=False,
            is_loaded=True,
        )
