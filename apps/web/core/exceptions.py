"""Base exception for user-facing storefront conditions."""

from typing import Any


class StorefrontError(Exception):
    """
    Base exception for recoverable storefront errors.

    Subclasses carry the data a caller needs to render an actionable
    message (distance, shortfall, current status, ...).
    """

    code = "storefront_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation for API error responses."""
        return {"error": self.code, "message": self.message}
