"""Extraction of displayable content items from a block sequence."""

from notionfeed.extraction.classifier import classify
from notionfeed.models.block import RawBlock
from notionfeed.models.content import ContentItem
from notionfeed.utils.logging import get_logger


logger = get_logger(__name__)


def extract_media(blocks: list[RawBlock], parent_id: str) -> list[ContentItem]:
    """Classify every block, keeping input order and dropping duplicates.

    A block id reachable through two expansion paths yields a single item at
    its first occurrence. The output is never re-sorted; callers supply
    blocks already in reading order.

    Args:
        blocks: Expanded block sequence
        parent_id: Id of the board the items belong to

    Returns:
        Content items in block order
    """
    seen_ids: set[str] = set()
    items = []

    for block in blocks:
        if block.id in seen_ids:
            continue
        item = classify(block, parent_id)
        if item is None:
            continue
        seen_ids.add(block.id)
        items.append(item)

    logger.debug("media_extracted", parent_id=parent_id, blocks=len(blocks), items=len(items))
    return items
