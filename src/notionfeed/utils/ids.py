"""Identifier helpers for Notion blocks, boards and content groups."""

import re
from typing import Iterable


_HEX_ID = re.compile(r"[a-fA-F0-9]{32}")
_TRAILING_HEX_ID = re.compile(r"[a-fA-F0-9]{32}$")

# Prefix of the synthetic title card shown above a board's content
TITLE_CARD_PREFIX = "title-"


def normalize_notion_id(id_or_url: str) -> str:
    """
    Normalize a Notion id or page URL to its bare 32-character hex form.

    Notion accepts ids with or without dashes, and page URLs embed the id
    after the page slug. Normalizing lets all of them share one cache entry.

    Args:
        id_or_url: Dashed UUID, bare hex id, or Notion page URL

    Returns:
        The 32 hex digits ending the last path segment (dashes removed),
        else the first 32-hex-digit run anywhere, else the input unchanged

    Example:
        >>> normalize_notion_id("1a2b3c4d-1a2b-1a2b-1a2b-1a2b3c4d5e6f")
        "1a2b3c4d1a2b1a2b1a2b1a2b3c4d5e6f"
    """
    if not id_or_url:
        return ""

    # Page URLs end in "<slug>-<id>"; a slug ending in a hex letter must not shift the id
    last_segment = id_or_url.split("?", 1)[0].split("#", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    match = _TRAILING_HEX_ID.search(last_segment.replace("-", ""))
    if match:
        return match.group(0)

    match = _HEX_ID.search(id_or_url.replace("-", ""))
    return match.group(0) if match else id_or_url


def join_group_id(member_ids: Iterable[str]) -> str:
    """
    Build the id of a compound group from its member ids.

    The id is a plain order-preserving join so the same members always
    produce the same id.

    Example:
        >>> join_group_id(["h1", "p1"])
        "h1-p1"
    """
    return "-".join(member_ids)


def separator_id(previous_id: str, next_id: str) -> str:
    """Id of the synthetic separator placed between two reordered entries."""
    return f"separator:{previous_id}:{next_id}"


def title_card_id(board_id: str) -> str:
    """Id of the title card shown above a board's content."""
    return f"{TITLE_CARD_PREFIX}{board_id}"
