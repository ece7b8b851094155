"""Shared money type."""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator


def _zero_if_missing(value: Any) -> Any:
    """Treat absent or blank prices as zero instead of failing validation."""
    if value is None or value == "":
        return Decimal("0")
    return value


Money = Annotated[Decimal, BeforeValidator(_zero_if_missing)]
