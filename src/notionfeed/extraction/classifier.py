"""Block classifier.

Maps one Notion block to at most one typed ContentItem. The classifier is a
pure function of its input: it performs no I/O and never raises on malformed
payloads, degrading missing fields to empty strings or False instead.

Text-bearing blocks are emitted only when their plain text is non-empty,
except paragraphs: an empty paragraph is emitted as an empty ``text`` item
because the grouper treats it as a section separator.
"""

from typing import Any, Callable, Optional

from notionfeed.extraction.embeds import (
    canva_embed,
    is_canva_url,
    loom_video_id,
    youtube_video_id,
)
from notionfeed.models.block import RawBlock
from notionfeed.models.content import ContentItem, ContentMetadata


# Layout blocks whose real content lives one or two levels down
COLUMN_LIST_TYPE = "column_list"
COLUMN_TYPE = "column"
CONTAINER_TYPES = frozenset({COLUMN_LIST_TYPE, COLUMN_TYPE})

DEFAULT_FILE_NAME = "File"


def is_container(block: RawBlock) -> bool:
    """Whether the block is a layout container rather than content."""
    return block.type in CONTAINER_TYPES


def plain_text(rich_text: Any) -> str:
    """Concatenate the ``plain_text`` runs of a Notion rich-text array."""
    if not isinstance(rich_text, list):
        return ""
    return "".join(
        str(run.get("plain_text") or "") for run in rich_text if isinstance(run, dict)
    )


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def file_url(payload: dict) -> str:
    """URL of a Notion-hosted or external file object."""
    return _str(_dict(payload.get("file")).get("url")) or _str(_dict(payload.get("external")).get("url")) or ""


def icon_value(icon: Any) -> Optional[str]:
    """Emoji literal or image URL of a Notion icon object."""
    icon = _dict(icon)
    if icon.get("type") == "emoji":
        return _str(icon.get("emoji"))
    return file_url(icon) or None


def _text_item(block: RawBlock, parent_id: str, kind: str, **metadata: Any) -> Optional[ContentItem]:
    content = plain_text(block.payload.get("rich_text"))
    if not content.strip():
        return None
    return ContentItem(
        id=block.id,
        kind=kind,
        content=content,
        metadata=ContentMetadata(**metadata),
        parent_id=parent_id,
    )


def _paragraph(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    # Emitted even when empty; see module docstring
    return ContentItem(
        id=block.id,
        kind="text",
        content=plain_text(block.payload.get("rich_text")),
        parent_id=parent_id,
    )


def _heading(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    suffix = block.type.rsplit("_", 1)[-1]
    level = int(suffix) if suffix.isdigit() else 1
    return _text_item(block, parent_id, "heading", level=level)


def _code(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(block, parent_id, "code", language=_str(block.payload.get("language")))


def _quote(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(block, parent_id, "quote")


def _callout(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(
        block,
        parent_id,
        "callout",
        icon=icon_value(block.payload.get("icon")),
        color=_str(block.payload.get("color")),
    )


def _bulleted(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(block, parent_id, "bulleted_list")


def _numbered(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(block, parent_id, "numbered_list")


def _todo(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _text_item(block, parent_id, "todo", checked=block.payload.get("checked") is True)


def _media_item(block: RawBlock, parent_id: str, kind: str, **metadata: Any) -> Optional[ContentItem]:
    url = file_url(block.payload)
    if not url:
        return None
    return ContentItem(
        id=block.id,
        kind=kind,
        url=url,
        caption=plain_text(block.payload.get("caption")),
        metadata=ContentMetadata(**metadata),
        parent_id=parent_id,
    )


def _image(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    return _media_item(block, parent_id, "image")


def _file(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    url = file_url(block.payload)
    caption = plain_text(block.payload.get("caption"))
    file_name = caption or url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1] or DEFAULT_FILE_NAME
    return _media_item(block, parent_id, "file", file_name=file_name)


def _platform_video(block: RawBlock, parent_id: str, url: str) -> Optional[ContentItem]:
    """Classify a URL as a YouTube or Loom video, or None for other hosts."""
    caption = plain_text(block.payload.get("caption"))

    video_id = youtube_video_id(url)
    if video_id:
        return ContentItem(
            id=block.id,
            kind="youtube",
            url=url,
            caption=caption,
            metadata=ContentMetadata(
                video_id=video_id,
                embed_url=f"https://www.youtube.com/embed/{video_id}",
            ),
            parent_id=parent_id,
        )

    video_id = loom_video_id(url)
    if video_id:
        return ContentItem(
            id=block.id,
            kind="loom",
            url=url,
            caption=caption,
            metadata=ContentMetadata(
                video_id=video_id,
                embed_url=f"https://www.loom.com/embed/{video_id}",
            ),
            parent_id=parent_id,
        )

    return None


def _video(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    url = file_url(block.payload)
    if not url:
        return None
    return _platform_video(block, parent_id, url) or _media_item(block, parent_id, "video")


def _embed(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    url = _str(block.payload.get("url")) or ""
    if not url:
        return None

    platform_item = _platform_video(block, parent_id, url)
    if platform_item is not None:
        return platform_item

    if is_canva_url(url):
        design_id, embed_url = canva_embed(url)
        return ContentItem(
            id=block.id,
            kind="canva",
            url=url,
            caption=plain_text(block.payload.get("caption")),
            metadata=ContentMetadata(design_id=design_id, embed_url=embed_url),
            parent_id=parent_id,
        )

    return None


def _bookmark(block: RawBlock, parent_id: str) -> Optional[ContentItem]:
    url = _str(block.payload.get("url")) or ""
    if not url:
        return None
    return ContentItem(
        id=block.id,
        kind="link",
        url=url,
        caption=plain_text(block.payload.get("caption")),
        content=url,
        parent_id=parent_id,
    )


_CLASSIFIERS: dict[str, Callable[[RawBlock, str], Optional[ContentItem]]] = {
    "paragraph": _paragraph,
    "heading_1": _heading,
    "heading_2": _heading,
    "heading_3": _heading,
    "code": _code,
    "quote": _quote,
    "callout": _callout,
    "bulleted_list_item": _bulleted,
    "numbered_list_item": _numbered,
    "to_do": _todo,
    "image": _image,
    "file": _file,
    "video": _video,
    "embed": _embed,
    "bookmark": _bookmark,
}


def classify(block: RawBlock, parent_id: str = "") -> Optional[ContentItem]:
    """Classify one block as a displayable content item.

    Args:
        block: Block to classify
        parent_id: Id of the board the resulting item belongs to

    Returns:
        ContentItem, or None if the block is skipped (unsupported kind, empty
        text, or media without a URL)

    Examples:
        >>> classify(RawBlock(id="p1", type="paragraph", payload={"rich_text": []}), "page")
        ContentItem(id='p1', kind='text', content='', ...)

        >>> classify(RawBlock(id="d1", type="divider"), "page") is None
        True
    """
    handler = _CLASSIFIERS.get(block.type)
    if handler is None:
        return None
    return handler(block, parent_id)
