"""Board catalog operations and navigation tree construction."""

from typing import Optional

from notionfeed.models.board import Board, BoardKind, BoardNode
from notionfeed.utils.ids import normalize_notion_id


def merge_boards(existing: list[Board], incoming: list[Board]) -> list[Board]:
    """Merge newly extracted boards into a catalog by id.

    Known boards keep their position; their title, icon and properties are
    refreshed from the incoming copy when it carries them, and ``is_loaded``
    never goes back from True to False. Unknown boards are appended in order.
    Applying the same incoming list twice yields the same catalog.

    Args:
        existing: Current catalog
        incoming: Boards from an extraction pass or database query

    Returns:
        New catalog list (inputs are not modified)
    """
    merged = [board.model_copy() for board in existing]
    index = {board.id: i for i, board in enumerate(merged)}

    for board in incoming:
        position = index.get(board.id)
        if position is None:
            index[board.id] = len(merged)
            merged.append(board.model_copy())
            continue

        known = merged[position]
        merged[position] = known.model_copy(
            update={
                "title": board.title or known.title,
                "icon": board.icon or known.icon,
                "properties": board.properties or known.properties,
                "has_children": known.has_children or board.has_children,
                "is_loaded": known.is_loaded or board.is_loaded,
            }
        )

    return merged


def mark_loaded(boards: list[Board], board_id: str) -> list[Board]:
    """Return a copy of the catalog with one board flagged as loaded."""
    return [
        board.model_copy(update={"is_loaded": True}) if board.id == board_id else board
        for board in boards
    ]


def find_board(boards: list[Board], board_id: Optional[str]) -> Optional[Board]:
    """Look up a board by id, accepting dashed, undashed or URL forms."""
    if not board_id:
        return None
    wanted = normalize_notion_id(board_id)
    for board in boards:
        if board.id == board_id or normalize_notion_id(board.id) == wanted:
            return board
    return None


def build_tree(boards: list[Board], show_database_names: bool = False) -> list[BoardNode]:
    """Build the navigation forest from a flat catalog.

    Boards whose parent is absent from the catalog become roots. When
    ``show_database_names`` is False, database boards are elided and their
    children take their place at the same depth.

    Args:
        boards: Flat board catalog
        show_database_names: Keep database boards as nodes of their own

    Returns:
        Root nodes in catalog order
    """
    known_ids = {board.id for board in boards}
    children_of: dict[Optional[str], list[Board]] = {}
    for board in boards:
        parent = board.parent_id if board.parent_id in known_ids else None
        children_of.setdefault(parent, []).append(board)

    visited: set[str] = set()

    def build(parent_id: Optional[str]) -> list[BoardNode]:
        nodes = []
        for board in children_of.get(parent_id, []):
            if board.id in visited:
                continue
            visited.add(board.id)
            children = build(board.id)
            if board.kind is BoardKind.DATABASE and not show_database_names:
                nodes.extend(children)
            else:
                nodes.append(BoardNode(board=board, children=children))
        return nodes

    return build(None)
