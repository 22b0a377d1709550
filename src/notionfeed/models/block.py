"""RawBlock model for blocks returned by the Notion API."""

from typing import Any

from pydantic import BaseModel, Field


class RawBlock(BaseModel):
    """A single block as returned by the Notion API.

    Notion block objects carry their kind-specific fields under a key equal
    to the block type (e.g. ``{"type": "image", "image": {...}}``). RawBlock
    lifts that nested object into ``payload`` so callers dispatch on ``type``
    and read one dict instead of probing arbitrary attributes.
    """

    id: str = Field(
        ...,
        description="Stable, unique Notion block id"
    )

    type: str = Field(
        ...,
        description="Notion block type tag (paragraph, heading_1, image, ...)"
    )

    has_children: bool = Field(
        default=False,
        description="Whether the block reports nested children"
    )

    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Kind-specific fields (the API object's block[type] entry)"
    )

    model_config = {"frozen": True}

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RawBlock":
        """
        Build a RawBlock from a Notion API block object.

        Missing or malformed fields degrade to defaults instead of raising.

        Args:
            data: Block object as decoded from the API JSON response

        Returns:
            RawBlock with the kind-specific payload extracted
        """
        block_type = data.get("type") or ""
        payload = data.get(block_type) if block_type else None
        return cls(
            id=str(data.get("id") or ""),
            type=str(block_type),
            has_children=bool(data.get("has_children", False)),
            payload=payload if isinstance(payload, dict) else {},
        )
