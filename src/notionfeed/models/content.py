"""Content item models for the card feed."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from notionfeed.models.board import BoardProperty


ContentKind = Literal[
    "image",
    "video",
    "youtube",
    "loom",
    "canva",
    "text",
    "heading",
    "code",
    "link",
    "title",
    "file",
    "properties",
    "bulleted_list",
    "numbered_list",
    "todo",
    "quote",
    "callout",
]


class ContentMetadata(BaseModel):
    """Kind-specific details of a content item. Every field is optional."""

    language: Optional[str] = Field(default=None, description="Code block language")

    level: Optional[int] = Field(default=None, description="Heading level (1-3)")

    url: Optional[str] = Field(default=None, description="Secondary URL")

    file_name: Optional[str] = Field(default=None, description="Display name of a file")

    parent_title: Optional[str] = Field(
        default=None,
        description="Title of the parent board (title cards only)"
    )

    properties: Optional[list[BoardProperty]] = Field(
        default=None,
        description="Page properties (properties cards only)"
    )

    video_id: Optional[str] = Field(default=None, description="YouTube or Loom video id")

    embed_url: Optional[str] = Field(default=None, description="Normalized embed URL")

    design_id: Optional[str] = Field(default=None, description="Canva design id")

    checked: Optional[bool] = Field(default=None, description="To-do checkbox state")

    icon: Optional[str] = Field(default=None, description="Callout icon (emoji or URL)")

    color: Optional[str] = Field(default=None, description="Callout color name")

    number: Optional[int] = Field(default=None, description="Ordinal of a numbered list item")


class ContentItem(BaseModel):
    """One typed, displayable unit derived from a block."""

    id: str = Field(..., description="Originating block id (or synthetic id)")

    kind: ContentKind = Field(..., description="Content kind")

    url: Optional[str] = Field(default=None, description="Media or link URL")

    caption: Optional[str] = Field(default=None, description="Media caption")

    content: Optional[str] = Field(default=None, description="Plain text content")

    metadata: ContentMetadata = Field(default_factory=ContentMetadata)

    parent_id: str = Field(..., description="Id of the board this item belongs to")

    model_config = {"frozen": False}


class GroupedItem(ContentItem):
    """A content item as laid out for reading.

    A non-group entry carries exactly the fields of its source item. A group
    merges adjacent non-standalone items into a single card.
    """

    is_group: bool = Field(default=False, description="Whether this entry merges several items")

    group_items: Optional[list[ContentItem]] = Field(
        default=None,
        description="Original members in order (groups only)"
    )

    headings: Optional[list[ContentItem]] = Field(
        default=None,
        description="Heading members in order, None when there are none"
    )

    @classmethod
    def standalone(cls, item: ContentItem) -> "GroupedItem":
        """Wrap a single item as an ungrouped entry."""
        return cls(**item.model_dump(exclude=_GROUP_FIELDS), is_group=False)

    def as_content_item(self) -> ContentItem:
        """Drop the grouping fields, returning the plain item."""
        return ContentItem(**self.model_dump(exclude=_GROUP_FIELDS))


_GROUP_FIELDS = {"is_group", "group_items", "headings"}
