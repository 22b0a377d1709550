"""Feed loading pipeline.

Runs the stages for one board strictly in sequence:

1. Fetch the board's children (or query it, for databases)
2. Expand column layouts
3. Extract sub-boards and auto-load any databases among them
4. Enrich page boards with icons (best-effort, in bounded batches)
5. Extract content items and prefix a title card
6. Number list runs and group items for reading

Nothing is committed to the board catalog or the current feed until every
stage has succeeded. Each load takes a generation token; when a newer load
has started in the meantime, the older result is returned marked stale and
is not committed.
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import Optional

from notionfeed.extraction.boards import extract_boards
from notionfeed.extraction.media import extract_media
from notionfeed.extraction.tree import expand_tree
from notionfeed.feed.catalog import find_board, mark_loaded, merge_boards
from notionfeed.feed.grouper import expand_reorder, group, number_list_items
from notionfeed.models.board import Board, BoardKind
from notionfeed.models.content import ContentItem, ContentMetadata, GroupedItem
from notionfeed.services.block_source import BlockSource
from notionfeed.utils.ids import normalize_notion_id, title_card_id
from notionfeed.utils.logging import get_logger


logger = get_logger(__name__)


@dataclass
class FeedSnapshot:
    """Result of one pipeline run.

    Attributes:
        board_id: Board that was loaded (None for the root feed)
        generation: Token of the load that produced this snapshot
        boards: Board catalog after the load
        items: Flat content items, title card first
        groups: Items grouped for reading
        stale: True if a newer load started before this one finished
    """

    board_id: Optional[str]
    generation: int
    boards: list[Board] = field(default_factory=list)
    items: list[ContentItem] = field(default_factory=list)
    groups: list[GroupedItem] = field(default_factory=list)
    stale: bool = False


class FeedLoader:
    """Loads boards from a BlockSource and keeps the session's feed state.

    Attributes:
        boards: Accumulated board catalog (append/update only)
        current: Snapshot of the most recently committed load
    """

    def __init__(
        self,
        source: BlockSource,
        root_page_id: str,
        root_title: str = "Gallery",
        show_database_names: bool = False,
        icon_batch_size: int = 5,
    ):
        """Initialize the loader.

        Args:
            source: Block source used for every fetch
            root_page_id: Page whose content forms the root feed
            root_title: Title card text for the root feed
            show_database_names: Keep databases as navigable boards instead of
                loading their rows automatically
            icon_batch_size: Number of icon fetches issued concurrently
        """
        self.source = source
        self.root_page_id = root_page_id
        self.root_title = root_title
        self.show_database_names = show_database_names
        self.icon_batch_size = icon_batch_size
        self.boards: list[Board] = []
        self.current: Optional[FeedSnapshot] = None
        self._generation = 0

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    async def load_root(self, force_refresh: bool = False) -> FeedSnapshot:
        """Load the root page's boards and content.

        Raises:
            Any error from the block source; nothing is committed in that case
        """
        generation = self._next_generation()
        logger.info("root_load_started", generation=generation, force_refresh=force_refresh)

        try:
            blocks = await self.source.fetch_children(self.root_page_id, force_refresh)
            expanded = await expand_tree(blocks, self.source, force_refresh)
            boards = await self._complete_boards(extract_boards(expanded), force_refresh)
            items = extract_media(expanded, self.root_page_id)
        except Exception as e:
            logger.error("root_load_failed", generation=generation, error=str(e))
            raise

        items = self._with_title_card(items, self.root_title, self.root_page_id)
        return self._commit(generation, None, boards, items)

    async def load_board(self, board_id: Optional[str], force_refresh: bool = True) -> FeedSnapshot:
        """Load one board's content and sub-boards.

        Databases are queried for their rows and produce no content items.
        Selecting no board loads the root feed.

        Args:
            board_id: Board to load, or None for the root
            force_refresh: Invalidate and refetch instead of using the cache

        Raises:
            Any error from the block source; nothing is committed in that case
        """
        if board_id is None:
            return await self.load_root(force_refresh)

        generation = self._next_generation()
        selected = find_board(self.boards, board_id)
        if selected is not None:
            board_id = selected.id
        title = selected.title if selected else self.root_title
        parent_title = self._parent_title(selected)

        logger.info(
            "board_load_started",
            board_id=board_id,
            generation=generation,
            kind=selected.kind.value if selected else None,
        )

        if force_refresh:
            self.source.invalidate(board_id)

        try:
            if selected is not None and selected.kind is BoardKind.DATABASE:
                sub_boards = await self.source.query_database(board_id, force_refresh)
                items: list[ContentItem] = []
            else:
                blocks = await self.source.fetch_children(board_id, force_refresh)
                expanded = await expand_tree(blocks, self.source, force_refresh)
                items = extract_media(expanded, board_id)
                sub_boards = extract_boards(expanded, board_id)

            sub_boards = await self._complete_boards(sub_boards, force_refresh)
        except Exception as e:
            logger.error("board_load_failed", board_id=board_id, generation=generation, error=str(e))
            raise

        items = self._with_title_card(items, title, board_id, parent_title)
        return self._commit(generation, board_id, sub_boards, items)

    def reorder(self, moved_id: str, target_id: str) -> bool:
        """Apply a manual drag of one card onto another to the current feed.

        Returns:
            True if the feed changed, False for a no-op (no feed, same id,
            or unknown id)
        """
        if self.current is None:
            return False

        flat = expand_reorder(self.current.groups, moved_id, target_id)
        if flat is None:
            logger.debug("reorder_ignored", moved_id=moved_id, target_id=target_id)
            return False

        self.current = replace(self.current, items=flat, groups=group(number_list_items(flat)))
        logger.info("feed_reordered", moved_id=moved_id, target_id=target_id)
        return True

    async def _complete_boards(self, boards: list[Board], force_refresh: bool) -> list[Board]:
        if not self.show_database_names:
            boards = await self._auto_load_databases(boards, force_refresh)
        return await self._enrich_icons(boards)

    async def _auto_load_databases(self, boards: list[Board], force_refresh: bool) -> list[Board]:
        """Replace unloaded databases with their rows until none remain."""
        catalog = list(boards)

        while True:
            pending = [b for b in catalog if b.kind is BoardKind.DATABASE and not b.is_loaded]
            if not pending:
                return catalog

            results = await asyncio.gather(
                *(self.source.query_database(db.id, force_refresh) for db in pending)
            )
            for db in pending:
                catalog = mark_loaded(catalog, db.id)
            catalog = merge_boards(catalog, [row for rows in results for row in rows])

            logger.debug("databases_loaded", count=len(pending))

    async def _enrich_icons(self, boards: list[Board]) -> list[Board]:
        """Fetch icons for page boards that have none, in bounded batches."""
        missing = [b for b in boards if b.kind is BoardKind.PAGE and not b.icon]
        icons: dict[str, str] = {}

        for start in range(0, len(missing), self.icon_batch_size):
            batch = missing[start:start + self.icon_batch_size]
            results = await asyncio.gather(*(self._fetch_icon(b.id) for b in batch))
            icons.update({b.id: icon for b, icon in zip(batch, results) if icon})

        if not icons:
            return boards
        return [b.model_copy(update={"icon": icons[b.id]}) if b.id in icons else b for b in boards]

    async def _fetch_icon(self, page_id: str) -> Optional[str]:
        try:
            return await self.source.fetch_page_icon(page_id)
        except Exception as e:
            logger.warning("page_icon_failed", page_id=page_id, error=str(e))
            return None

    def _parent_title(self, board: Optional[Board]) -> Optional[str]:
        if board is None or not board.parent_id:
            return None
        if normalize_notion_id(board.parent_id) == normalize_notion_id(self.root_page_id):
            return None
        parent = find_board(self.boards, board.parent_id)
        return parent.title if parent else None

    @staticmethod
    def _with_title_card(
        items: list[ContentItem],
        title: str,
        board_id: str,
        parent_title: Optional[str] = None,
    ) -> list[ContentItem]:
        if not items:
            return []
        card = ContentItem(
            id=title_card_id(board_id),
            kind="title",
            content=title,
            metadata=ContentMetadata(parent_title=parent_title),
            parent_id=board_id,
        )
        return [card, *items]

    def _commit(
        self,
        generation: int,
        board_id: Optional[str],
        new_boards: list[Board],
        items: list[ContentItem],
    ) -> FeedSnapshot:
        groups = group(number_list_items(items))
        catalog = merge_boards(self.boards, new_boards)
        if board_id is not None:
            catalog = mark_loaded(catalog, board_id)

        snapshot = FeedSnapshot(
            board_id=board_id,
            generation=generation,
            boards=catalog,
            items=items,
            groups=groups,
        )

        if generation != self._generation:
            logger.warning(
                "stale_result_discarded",
                board_id=board_id,
                generation=generation,
                latest=self._generation,
            )
            snapshot.stale = True
            return snapshot

        self.boards = catalog
        self.current = snapshot
        logger.info(
            "feed_committed",
            board_id=board_id,
            generation=generation,
            boards=len(catalog),
            items=len(items),
            groups=len(groups),
        )
        return snapshot
