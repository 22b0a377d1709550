"""Abstract Block-Source consumed by the extraction pipeline."""

from abc import ABC, abstractmethod
from typing import Optional

from notionfeed.models.block import RawBlock
from notionfeed.models.board import Board


class BlockSource(ABC):
    """Source of blocks, database rows and page icons.

    Implementations own their caching; callers only choose whether to bypass
    it with ``force_refresh``.
    """

    @abstractmethod
    async def fetch_children(self, container_id: str, force_refresh: bool = False) -> list[RawBlock]:
        """Return the full ordered list of a container's direct children."""

    @abstractmethod
    async def query_database(self, database_id: str, force_refresh: bool = False) -> list[Board]:
        """Return a database's rows as page boards, sorted by first numeric property."""

    @abstractmethod
    def invalidate(self, container_id: str) -> None:
        """Drop every cached response related to the given id."""

    @abstractmethod
    async def fetch_page_icon(self, page_id: str) -> Optional[str]:
        """Return a page's icon, or None when it has none or cannot be fetched."""
