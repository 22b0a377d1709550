"""Shared test fixtures for all test modules."""

from typing import Optional

import pytest

from notionfeed.models.block import RawBlock
from notionfeed.models.board import Board
from notionfeed.services.block_source import BlockSource
from notionfeed.services.exceptions import NotionAPIError


class FakeBlockSource(BlockSource):
    """In-memory BlockSource recording every call it receives."""

    def __init__(self):
        self.children: dict[str, list[RawBlock]] = {}
        self.databases: dict[str, list[Board]] = {}
        self.icons: dict[str, str] = {}
        self.failing: set[str] = set()
        self.failing_icons: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.invalidated: list[str] = []

    async def fetch_children(self, container_id: str, force_refresh: bool = False) -> list[RawBlock]:
        self.calls.append(("children", container_id))
        if container_id in self.failing:
            raise NotionAPIError("upstream failure", status_code=502)
        return list(self.children.get(container_id, []))

    async def query_database(self, database_id: str, force_refresh: bool = False) -> list[Board]:
        self.calls.append(("database", database_id))
        if database_id in self.failing:
            raise NotionAPIError("upstream failure", status_code=502)
        return [board.model_copy() for board in self.databases.get(database_id, [])]

    def invalidate(self, container_id: str) -> None:
        self.invalidated.append(container_id)

    async def fetch_page_icon(self, page_id: str) -> Optional[str]:
        self.calls.append(("icon", page_id))
        if page_id in self.failing_icons:
            raise NotionAPIError("icon failure", status_code=500)
        return self.icons.get(page_id)


@pytest.fixture
def fake_source():
    """Empty in-memory block source."""
    return FakeBlockSource()
