"""notionfeed - Render a Notion page tree as a grouped card feed.

The extraction pipeline turns the flat block lists returned by the Notion API
into a navigation tree of boards and a reading-ordered sequence of cards:

    >>> from notionfeed.extraction.media import extract_media
    >>> from notionfeed.feed.grouper import group, number_list_items
    >>> cards = group(number_list_items(extract_media(blocks, page_id)))
"""

__version__ = "0.1.0"
