"""Expansion of multi-column layouts into a flat block sequence."""

import asyncio

from notionfeed.extraction.classifier import COLUMN_LIST_TYPE
from notionfeed.models.block import RawBlock
from notionfeed.services.block_source import BlockSource
from notionfeed.utils.logging import get_logger


logger = get_logger(__name__)


async def expand_tree(
    children: list[RawBlock],
    source: BlockSource,
    force_refresh: bool = False,
) -> list[RawBlock]:
    """Flatten column layouts among a page's children.

    Column lists hold columns, and columns hold the real content, so two
    fetch stages run in sequence: all column lists' children (the columns),
    then all columns' children. Fetches within a stage run concurrently.

    The result is the original children followed by every column and then
    every column's content. Column material always comes after its siblings;
    finer ordering across columns is not preserved.

    Args:
        children: Direct children of a page or toggle
        source: Block source used to fetch nested children
        force_refresh: Bypass the source's cache

    Returns:
        Expanded block list

    Raises:
        Any error raised by the source; no partial result is returned
    """
    column_lists = [block for block in children if block.type == COLUMN_LIST_TYPE]
    if not column_lists:
        return list(children)

    column_batches = await asyncio.gather(
        *(source.fetch_children(block.id, force_refresh) for block in column_lists)
    )
    columns = [column for batch in column_batches for column in batch]

    content_batches = await asyncio.gather(
        *(source.fetch_children(column.id, force_refresh) for column in columns)
    )
    column_content = [block for batch in content_batches for block in batch]

    logger.debug(
        "tree_expanded",
        column_lists=len(column_lists),
        columns=len(columns),
        column_blocks=len(column_content),
    )

    return [*children, *columns, *column_content]
