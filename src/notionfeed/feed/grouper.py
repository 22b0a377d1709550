"""Reading-order grouping of content items.

Adjacent text-like items (headings, paragraphs, lists, quotes, callouts,
to-dos) are merged into one card. An empty paragraph ends the current card.
Media, embeds, code, links, titles, files and property cards always stand on
their own.

The manual reorder expander is the inverse: it flattens grouped entries back
into items after a drag, re-inserting empty separators so that grouping the
result again keeps the boundaries the user sees.
"""

from typing import Optional

from notionfeed.models.content import ContentItem, ContentMetadata, GroupedItem
from notionfeed.utils.ids import join_group_id, separator_id


STANDALONE_KINDS = frozenset({
    "image",
    "video",
    "youtube",
    "loom",
    "canva",
    "code",
    "link",
    "file",
    "properties",
    "title",
})


def is_separator(item: ContentItem) -> bool:
    """Whether the item is an empty paragraph marking a section break."""
    return item.kind == "text" and not (item.content or "").strip()


def number_list_items(items: list[ContentItem]) -> list[ContentItem]:
    """Stamp consecutive numbered-list items with 1-based ordinals.

    Any other item, including an empty separator, ends the run so the next
    numbered item starts again at 1.

    Example:
        Items of kinds numbered, numbered, text, numbered come back with
        ``metadata.number`` 1, 2, None, 1.
    """
    numbered = []
    counter = 0

    for item in items:
        if item.kind == "numbered_list":
            counter += 1
            metadata = item.metadata.model_copy(update={"number": counter})
            numbered.append(item.model_copy(update={"metadata": metadata}))
            continue

        counter = 0
        numbered.append(item)

    return numbered


def _flush(members: list[ContentItem]) -> GroupedItem:
    if len(members) == 1:
        return GroupedItem.standalone(members[0])

    first = members[0]
    headings = [member for member in members if member.kind == "heading"]
    return GroupedItem(
        id=join_group_id(member.id for member in members),
        kind="text",
        content=first.content or "",
        metadata=ContentMetadata(level=first.metadata.level),
        parent_id=first.parent_id,
        is_group=True,
        group_items=list(members),
        headings=headings or None,
    )


def group(items: list[ContentItem]) -> list[GroupedItem]:
    """Partition items into reading cards.

    Args:
        items: Numbered content items in reading order

    Returns:
        Grouped entries; empty separators are consumed and never returned

    Example:
        A heading ``h1``, a paragraph ``p1``, an empty paragraph and an image
        ``img1`` give two entries: the group ``h1-p1`` and the image on its own.
    """
    result: list[GroupedItem] = []
    current: list[ContentItem] = []

    for item in items:
        if is_separator(item):
            if current:
                result.append(_flush(current))
                current = []
            continue

        if item.kind in STANDALONE_KINDS:
            if current:
                result.append(_flush(current))
                current = []
            result.append(GroupedItem.standalone(item))
            continue

        current.append(item)

    if current:
        result.append(_flush(current))

    return result


def _is_standalone_entry(entry: GroupedItem) -> bool:
    return not entry.is_group and entry.kind in STANDALONE_KINDS


def _move(entries: list[GroupedItem], moved_id: str, target_id: str) -> Optional[list[GroupedItem]]:
    if moved_id == target_id:
        return None

    ids = [entry.id for entry in entries]
    if moved_id not in ids or target_id not in ids:
        return None

    old_index = ids.index(moved_id)
    new_index = ids.index(target_id)

    reordered = list(entries)
    moved = reordered.pop(old_index)
    reordered.insert(new_index, moved)
    return reordered


def expand_reorder(
    groups: list[GroupedItem],
    moved_id: str,
    target_id: str,
) -> Optional[list[ContentItem]]:
    """Move one entry onto another's position and flatten the result.

    The moved entry is removed from its index and inserted at the target's
    original index. Groups are then expanded back into their members, and an
    empty separator is placed between two neighbouring entries unless both
    are standalone items, so that ``group()`` on the output reproduces the
    same entries in the new order.

    Args:
        groups: Current grouped entries
        moved_id: Id of the dragged entry
        target_id: Id of the entry it was dropped on

    Returns:
        Flat item sequence, or None when nothing moves (same id or unknown id)
    """
    reordered = _move(groups, moved_id, target_id)
    if reordered is None:
        return None

    flat: list[ContentItem] = []
    previous: Optional[GroupedItem] = None

    for entry in reordered:
        if previous is not None and not (
            _is_standalone_entry(previous) and _is_standalone_entry(entry)
        ):
            flat.append(
                ContentItem(
                    id=separator_id(previous.id, entry.id),
                    kind="text",
                    content="",
                    parent_id=entry.parent_id,
                )
            )

        if entry.is_group:
            flat.extend(member.model_copy() for member in entry.group_items or [])
        else:
            flat.append(entry.as_content_item())

        previous = entry

    return flat
