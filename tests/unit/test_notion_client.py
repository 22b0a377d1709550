"""Unit tests for the Notion REST client."""

import json

import httpx
import pytest

from notionfeed.models.board import BoardKind
from notionfeed.models.config import NotionConfig
from notionfeed.services.exceptions import NotionAPIError
from notionfeed.services.notion_client import NotionClient


PAGE_ID = "0123456789abcdef0123456789abcdef"
DASHED_PAGE_ID = "01234567-89ab-cdef-0123-456789abcdef"
DB_ID = "fedcba9876543210fedcba9876543210"


class FakeClock:
    """Manually advanced time source."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def paragraph(block_id, text=""):
    return {
        "object": "block",
        "id": block_id,
        "type": "paragraph",
        "has_children": False,
        "paragraph": {"rich_text": [{"plain_text": text}] if text else []},
    }


def row(page_id, title, rank=None, icon=None):
    properties = {"Name": {"type": "title", "title": [{"plain_text": title}]}}
    if rank is not None:
        properties["Rank"] = {"type": "number", "number": rank}
    return {"object": "page", "id": page_id, "icon": icon, "properties": properties}


@pytest.fixture
def config():
    return NotionConfig(api_key="secret_test", root_page_id=PAGE_ID)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def requests():
    return []


def make_client(config, clock, requests, handler, cache_ttl=5.0):
    def recording(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return NotionClient(config, cache_ttl=cache_ttl, transport=httpx.MockTransport(recording), clock=clock)


class TestFetchChildren:
    """Test NotionClient.fetch_children."""

    @pytest.mark.asyncio
    async def test_sends_auth_and_version_headers(self, config, clock, requests):
        """Test every request carries the token and API version."""
        client = make_client(config, clock, requests, lambda r: httpx.Response(200, json={"results": []}))

        async with client:
            await client.fetch_children(PAGE_ID)

        request = requests[0]
        assert request.headers["Authorization"] == "Bearer secret_test"
        assert request.headers["Notion-Version"] == "2022-06-28"
        assert request.url.path == f"/v1/blocks/{PAGE_ID}/children"
        assert request.url.params["page_size"] == "100"

    @pytest.mark.asyncio
    async def test_follows_pagination(self, config, clock, requests):
        """Test all result pages are fetched and concatenated in order."""

        def handler(request):
            if request.url.params.get("start_cursor") == "c2":
                return httpx.Response(200, json={"results": [paragraph("b3")], "has_more": False})
            return httpx.Response(
                200,
                json={"results": [paragraph("b1"), paragraph("b2")], "has_more": True, "next_cursor": "c2"},
            )

        async with make_client(config, clock, requests, handler) as client:
            blocks = await client.fetch_children(PAGE_ID)

        assert [b.id for b in blocks] == ["b1", "b2", "b3"]
        assert len(requests) == 2
        assert "start_cursor" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_payload_lifted_from_type_key(self, config, clock, requests):
        """Test the block's type-specific object becomes its payload."""
        handler = lambda r: httpx.Response(200, json={"results": [paragraph("b1", "Hello")]})

        async with make_client(config, clock, requests, handler) as client:
            blocks = await client.fetch_children(PAGE_ID)

        assert blocks[0].type == "paragraph"
        assert blocks[0].payload["rich_text"][0]["plain_text"] == "Hello"

    @pytest.mark.asyncio
    async def test_cache_hit_within_ttl(self, config, clock, requests):
        """Test a second fetch within the TTL is served from cache."""
        handler = lambda r: httpx.Response(200, json={"results": [paragraph("b1")]})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            clock.now += 4.0
            blocks = await client.fetch_children(DASHED_PAGE_ID)

        assert len(requests) == 1
        assert [b.id for b in blocks] == ["b1"]

    @pytest.mark.asyncio
    async def test_cache_expires(self, config, clock, requests):
        """Test the cache is bypassed once the TTL elapses."""
        handler = lambda r: httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            clock.now += 5.0
            await client.fetch_children(PAGE_ID)

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_cache(self, config, clock, requests):
        """Test force_refresh always goes to the network."""
        handler = lambda r: httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            await client.fetch_children(PAGE_ID, force_refresh=True)

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_invalidate_evicts(self, config, clock, requests):
        """Test invalidation drops the cached children."""
        handler = lambda r: httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            client.invalidate(DASHED_PAGE_ID)
            await client.fetch_children(PAGE_ID)

        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self, config, clock, requests):
        """Test mutating a result does not corrupt the cache."""
        handler = lambda r: httpx.Response(200, json={"results": [paragraph("b1")]})

        async with make_client(config, clock, requests, handler) as client:
            first = await client.fetch_children(PAGE_ID)
            first.clear()
            second = await client.fetch_children(PAGE_ID)

        assert [b.id for b in second] == ["b1"]

    @pytest.mark.asyncio
    async def test_http_error_raises(self, config, clock, requests):
        """Test error responses raise NotionAPIError with status and code."""
        handler = lambda r: httpx.Response(
            404, json={"object": "error", "code": "object_not_found", "message": "Could not find block"}
        )

        async with make_client(config, clock, requests, handler) as client:
            with pytest.raises(NotionAPIError) as exc_info:
                await client.fetch_children(PAGE_ID)

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "object_not_found"
        assert "Could not find block" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, config, clock, requests):
        """Test connection failures surface as NotionAPIError."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(config, clock, requests, handler) as client:
            with pytest.raises(NotionAPIError) as exc_info:
                await client.fetch_children(PAGE_ID)

        assert exc_info.value.status_code == 0

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, config, clock, requests):
        """Test a failed fetch leaves nothing in the cache."""
        responses = iter([
            httpx.Response(500, json={"message": "boom"}),
            httpx.Response(200, json={"results": [paragraph("b1")]}),
        ])

        async with make_client(config, clock, requests, lambda r: next(responses)) as client:
            with pytest.raises(NotionAPIError):
                await client.fetch_children(PAGE_ID)
            blocks = await client.fetch_children(PAGE_ID)

        assert [b.id for b in blocks] == ["b1"]


class TestQueryDatabase:
    """Test NotionClient.query_database."""

    @pytest.mark.asyncio
    async def test_rows_become_page_boards(self, config, clock, requests):
        """Test rows are returned as unloaded pages under the database."""
        handler = lambda r: httpx.Response(200, json={"results": [
            row("r1", "First", icon={"type": "emoji", "emoji": "📘"}),
        ]})

        async with make_client(config, clock, requests, handler) as client:
            boards = await client.query_database(DB_ID)

        board = boards[0]
        assert board.kind is BoardKind.PAGE
        assert board.title == "First"
        assert board.parent_id == DB_ID
        assert board.has_children is True
        assert board.is_loaded is False
        assert board.icon == "📘"
        assert board.properties is None
        assert requests[0].method == "POST"
        assert requests[0].url.path == f"/v1/databases/{DB_ID}/query"
        assert json.loads(requests[0].content) == {"page_size": 100}

    @pytest.mark.asyncio
    async def test_untitled_rows(self, config, clock, requests):
        """Test rows without a title get the placeholder."""
        handler = lambda r: httpx.Response(200, json={"results": [row("r1", "")]})

        async with make_client(config, clock, requests, handler) as client:
            boards = await client.query_database(DB_ID)

        assert boards[0].title == "Untitled"

    @pytest.mark.asyncio
    async def test_sorted_by_first_number_descending(self, config, clock, requests):
        """Test rows sort by their first number, unnumbered rows last."""
        handler = lambda r: httpx.Response(200, json={"results": [
            row("low", "Low", rank=1),
            row("none", "None"),
            row("high", "High", rank=10),
            row("mid", "Mid", rank=5),
        ]})

        async with make_client(config, clock, requests, handler) as client:
            boards = await client.query_database(DB_ID)

        assert [b.id for b in boards] == ["high", "mid", "low", "none"]
        assert boards[0].properties[0].name == "Rank"

    @pytest.mark.asyncio
    async def test_paginates_with_body_cursor(self, config, clock, requests):
        """Test the start cursor is sent in the request body."""

        def handler(request):
            body = json.loads(request.content)
            if body.get("start_cursor") == "next":
                return httpx.Response(200, json={"results": [row("r2", "Two")], "has_more": False})
            return httpx.Response(200, json={"results": [row("r1", "One")], "has_more": True, "next_cursor": "next"})

        async with make_client(config, clock, requests, handler) as client:
            boards = await client.query_database(DB_ID)

        assert {b.id for b in boards} == {"r1", "r2"}

    @pytest.mark.asyncio
    async def test_cached_separately_from_children(self, config, clock, requests):
        """Test database results use their own cache entry."""

        def handler(request):
            if request.method == "POST":
                return httpx.Response(200, json={"results": [row("r1", "One")]})
            return httpx.Response(200, json={"results": [paragraph("b1")]})

        async with make_client(config, clock, requests, handler) as client:
            await client.query_database(DB_ID)
            await client.fetch_children(DB_ID)
            await client.query_database(DB_ID)
            await client.fetch_children(DB_ID)
            client.invalidate(DB_ID)
            await client.query_database(DB_ID)

        assert [r.method for r in requests] == ["POST", "GET", "POST"]


class TestClearCache:
    """Test NotionClient.clear_cache."""

    @pytest.mark.asyncio
    async def test_clear_cache_forces_refetch(self, config, clock, requests):
        """Test clearing the cache drops every entry."""
        handler = lambda r: httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            client.clear_cache()
            await client.fetch_children(PAGE_ID)

        assert len(requests) == 2


class TestFetchPageIcon:
    """Test NotionClient.fetch_page_icon."""

    @pytest.mark.asyncio
    async def test_emoji_icon(self, config, clock, requests):
        """Test emoji icons are returned literally."""
        handler = lambda r: httpx.Response(200, json={"icon": {"type": "emoji", "emoji": "🎨"}})

        async with make_client(config, clock, requests, handler) as client:
            assert await client.fetch_page_icon(PAGE_ID) == "🎨"

        assert requests[0].url.path == f"/v1/pages/{PAGE_ID}"

    @pytest.mark.asyncio
    async def test_file_icon(self, config, clock, requests):
        """Test uploaded and external icons return their URL."""
        handler = lambda r: httpx.Response(
            200, json={"icon": {"type": "external", "external": {"url": "https://x/icon.png"}}}
        )

        async with make_client(config, clock, requests, handler) as client:
            assert await client.fetch_page_icon(PAGE_ID) == "https://x/icon.png"

    @pytest.mark.asyncio
    async def test_missing_icon(self, config, clock, requests):
        """Test pages without icon give None."""
        handler = lambda r: httpx.Response(200, json={"icon": None})

        async with make_client(config, clock, requests, handler) as client:
            assert await client.fetch_page_icon(PAGE_ID) is None

    @pytest.mark.asyncio
    async def test_failure_degrades_to_none(self, config, clock, requests):
        """Test icon failures do not raise."""
        handler = lambda r: httpx.Response(403, json={"message": "restricted"})

        async with make_client(config, clock, requests, handler) as client:
            assert await client.fetch_page_icon(PAGE_ID) is None


class TestCreateToggle:
    """Test NotionClient.create_toggle."""

    @pytest.mark.asyncio
    async def test_appends_toggle_and_invalidates_parent(self, config, clock, requests):
        """Test the toggle is appended and the parent refetched afterwards."""

        def handler(request):
            if request.method == "PATCH":
                return httpx.Response(200, json={"results": [{"id": "new-toggle", "type": "toggle"}]})
            return httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            await client.fetch_children(PAGE_ID)
            board = await client.create_toggle(DASHED_PAGE_ID, "Ideas")
            await client.fetch_children(PAGE_ID)

        assert board.id == "new-toggle"
        assert board.title == "Ideas"
        assert board.kind is BoardKind.TOGGLE
        assert board.parent_id == DASHED_PAGE_ID
        assert board.is_loaded is True

        patch = requests[1]
        assert patch.method == "PATCH"
        assert patch.url.path == f"/v1/blocks/{PAGE_ID}/children"
        body = json.loads(patch.content)
        assert body["children"][0]["toggle"]["rich_text"][0]["text"]["content"] == "Ideas"
        assert [r.method for r in requests] == ["GET", "PATCH", "GET"]

    @pytest.mark.asyncio
    async def test_empty_response_raises(self, config, clock, requests):
        """Test a response without the created block raises."""
        handler = lambda r: httpx.Response(200, json={"results": []})

        async with make_client(config, clock, requests, handler) as client:
            with pytest.raises(NotionAPIError):
                await client.create_toggle(PAGE_ID, "Ideas")
