"""Services backed by the Notion API."""
