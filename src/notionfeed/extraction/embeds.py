"""URL parsing for embedded video and design platforms."""

from typing import Optional
from urllib.parse import parse_qs, urlparse


# Path segments of Canva URLs that are actions, not share keys
_CANVA_ACTIONS = {"view", "edit", "watch"}


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def _segment_after(segments: list[str], markers: tuple[str, ...]) -> Optional[str]:
    for i, segment in enumerate(segments[:-1]):
        if segment in markers:
            return segments[i + 1]
    return None


def youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id from a YouTube URL.

    Recognizes ``watch?v=<id>``, ``youtu.be/<id>`` and ``/embed/<id>`` forms.

    Returns:
        The video id, or None if the URL is not a YouTube video URL
    """
    parsed = urlparse(url or "")
    host = (parsed.hostname or "").lower()

    if _host_matches(host, "youtu.be"):
        segments = _segments(parsed.path)
        return segments[0] if segments else None

    if _host_matches(host, "youtube.com") or _host_matches(host, "youtube-nocookie.com"):
        video_ids = parse_qs(parsed.query).get("v")
        if video_ids and video_ids[0]:
            return video_ids[0]
        return _segment_after(_segments(parsed.path), ("embed",))

    return None


def loom_video_id(url: str) -> Optional[str]:
    """Extract the video id from a Loom ``/share/<id>`` or ``/embed/<id>`` URL."""
    parsed = urlparse(url or "")
    host = (parsed.hostname or "").lower()
    if not _host_matches(host, "loom.com"):
        return None
    return _segment_after(_segments(parsed.path), ("share", "embed"))


def is_canva_url(url: str) -> bool:
    host = (urlparse(url or "").hostname or "").lower()
    return _host_matches(host, "canva.com")


def canva_embed(url: str) -> tuple[Optional[str], str]:
    """Extract the design id and an embeddable URL from a Canva design URL.

    ``/design/<id>/<shareKey>/...`` is rewritten to
    ``https://www.canva.com/design/<id>/<shareKey>/view?embed``. URLs without
    a share key are returned unchanged.

    Returns:
        Tuple of (design id or None, embed URL)

    Example:
        >>> canva_embed("https://www.canva.com/design/DAF1/abc/edit")
        ("DAF1", "https://www.canva.com/design/DAF1/abc/view?embed")
    """
    segments = _segments(urlparse(url or "").path)
    design_id = _segment_after(segments, ("design",))
    if design_id is None:
        return None, url

    share_index = segments.index("design") + 2
    if share_index < len(segments) and segments[share_index] not in _CANVA_ACTIONS:
        share_key = segments[share_index]
        return design_id, f"https://www.canva.com/design/{design_id}/{share_key}/view?embed"

    return design_id, url
