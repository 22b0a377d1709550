"""Extraction of typed database row properties."""

from typing import Any, Optional

from notionfeed.extraction.classifier import plain_text
from notionfeed.models.board import BoardProperty


def _date_value(data: Any) -> Optional[str]:
    if not isinstance(data, dict) or not data.get("start"):
        return None
    if data.get("end"):
        return f"{data['start']} → {data['end']}"
    return data["start"]


def _option(data: Any) -> tuple[Optional[str], Optional[str]]:
    if not isinstance(data, dict):
        return None, None
    return data.get("name") or None, data.get("color") or None


def _people(data: Any) -> Optional[list[str]]:
    if not isinstance(data, list):
        return None
    names = [person.get("name") for person in data if isinstance(person, dict) and person.get("name")]
    return names or None


def _property(name: str, prop: dict) -> Optional[BoardProperty]:
    prop_type = prop.get("type")
    data = prop.get(prop_type) if prop_type else None
    color = None

    if prop_type == "date":
        value = _date_value(data)
    elif prop_type in ("select", "status"):
        value, color = _option(data)
    elif prop_type == "multi_select":
        names = [opt.get("name") for opt in data or [] if isinstance(opt, dict) and opt.get("name")]
        value = names or None
    elif prop_type == "number":
        value = data if isinstance(data, (int, float)) and not isinstance(data, bool) else None
    elif prop_type == "checkbox":
        value = data is True
    elif prop_type in ("url", "email", "phone_number", "created_time", "last_edited_time"):
        value = data or None
    elif prop_type == "rich_text":
        value = plain_text(data) or None
    elif prop_type == "people":
        value = _people(data)
    else:
        # title is the board title; formulas, relations and rollups are not shown
        return None

    if value is None:
        return None
    return BoardProperty(name=name, type=prop_type, value=value, color=color)


def extract_properties(properties: Any) -> list[BoardProperty]:
    """Convert a page's ``properties`` object into display properties.

    Empty values and unsupported property types are skipped. Order follows
    the API response.

    Args:
        properties: The ``properties`` mapping of a database row page

    Returns:
        List of typed properties
    """
    if not isinstance(properties, dict):
        return []

    extracted = []
    for name, prop in properties.items():
        if not isinstance(prop, dict):
            continue
        board_property = _property(name, prop)
        if board_property is not None:
            extracted.append(board_property)
    return extracted


def page_title(properties: Any) -> str:
    """Plain text of a page's title property, or empty string."""
    if not isinstance(properties, dict):
        return ""
    for prop in properties.values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return plain_text(prop.get("title"))
    return ""


def first_number(properties: Optional[list[BoardProperty]]) -> Optional[float]:
    """Value of the first numeric property, used to order database rows."""
    for prop in properties or []:
        if prop.type == "number":
            return prop.value
    return None
