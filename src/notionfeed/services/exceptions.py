"""Custom exceptions for notionfeed services."""


class NotionAPIError(Exception):
    """Raised when a Notion API request fails.

    Covers both HTTP error responses and transport failures. The pipeline
    does not retry; the error propagates to whoever started the load.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code (0 for transport errors)
        code: Notion error code from the response body, if any
    """

    def __init__(self, message: str, status_code: int = 0, code: str = ""):
        """Initialize NotionAPIError.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (0 for transport errors)
            code: Notion error code (e.g. "object_not_found")
        """
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(f"Notion API error ({status_code}): {message}" if status_code else message)
