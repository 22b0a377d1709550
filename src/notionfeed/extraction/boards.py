"""Extraction of navigable boards from a block sequence."""

from typing import Optional

from notionfeed.extraction.classifier import plain_text
from notionfeed.models.block import RawBlock
from notionfeed.models.board import Board, BoardKind


UNTITLED = "Untitled"

BOARD_TYPES = {
    "toggle": BoardKind.TOGGLE,
    "child_page": BoardKind.PAGE,
    "child_database": BoardKind.DATABASE,
}


def _board_title(block: RawBlock) -> str:
    if block.type == "toggle":
        title = plain_text(block.payload.get("rich_text"))
    else:
        title = str(block.payload.get("title") or "")
    return title or UNTITLED


def extract_boards(blocks: list[RawBlock], parent_id: Optional[str] = None) -> list[Board]:
    """Extract toggle sections, sub-pages and sub-databases as boards.

    Boards are returned in block order and are not de-duplicated; merging
    against known boards is the caller's job (see ``merge_boards``).

    Args:
        blocks: Expanded block sequence of one page
        parent_id: Id of the page the blocks belong to (None at the root)

    Returns:
        New, unloaded boards
    """
    boards = []
    for block in blocks:
        kind = BOARD_TYPES.get(block.type)
        if kind is None:
            continue
        boards.append(
            Board(
                id=block.id,
                title=_board_title(block),
                parent_id=parent_id,
                kind=kind,
                # Database rows are queried on demand, never inferred from has_children
                has_children=block.has_children or kind is BoardKind.DATABASE,
                is_loaded=False,
            )
        )
    return boards
