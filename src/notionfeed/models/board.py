"""Board models for the navigation tree."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class BoardKind(str, Enum):
    """Kind of navigable container a board was built from."""

    TOGGLE = "toggle"
    PAGE = "page"
    DATABASE = "database"


class BoardProperty(BaseModel):
    """One typed property of a database row page."""

    name: str = Field(..., description="Property name as defined in the database")

    type: str = Field(..., description="Notion property type (date, select, number, ...)")

    value: Any = Field(..., description="Display value (str, number, bool or list of str)")

    color: Optional[str] = Field(
        default=None,
        description="Notion color name for select/status options"
    )


class Board(BaseModel):
    """Navigable container shown in the navigation tree."""

    id: str = Field(..., description="Notion block or page id")

    title: str = Field(..., description="Display title")

    parent_id: Optional[str] = Field(
        default=None,
        description="Id of the containing board (None for root boards)"
    )

    kind: BoardKind = Field(..., description="Toggle section, sub-page or database")

    has_children: bool = Field(
        default=False,
        description="Whether the board has content to load"
    )

    is_loaded: bool = Field(
        default=False,
        description="Set once the board's children have been fetched"
    )

    properties: Optional[list[BoardProperty]] = Field(
        default=None,
        description="Database row properties (pages from database queries only)"
    )

    icon: Optional[str] = Field(
        default=None,
        description="Emoji literal or icon image URL"
    )

    model_config = {"frozen": False}


class BoardNode(BaseModel):
    """A board with its resolved children, for rendering the navigation tree."""

    board: Board

    children: list["BoardNode"] = Field(default_factory=list)


BoardNode.model_rebuild()
