"""Helpers shared by the roadmap and issue services."""

from typing import Any, Optional

from ..core.errors import InvalidArgument

# Largest value SQLite can store in an INTEGER column
MAX_ID = 2**63 - 1


def parse_id(value: Optional[str], label: str) -> int:
    """Parse a positive decimal identifier taken from the request.

    ``label`` names the resource in error messages, e.g. ``"Roadmap"``
    gives ``"Roadmap id is missing."``.  Values outside ``1..MAX_ID``
    are invalid since the store cannot hold them.
    """
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{label} id is missing.")
    text = str(value).strip()
    # str.isdigit accepts non-ASCII digits; identifiers are plain ASCII
    if not (text.isascii() and text.isdigit()):
        raise InvalidArgument(f"{label} id is invalid.")
    parsed = int(text)
    if not 0 < parsed <= MAX_ID:
        raise InvalidArgument(f"{label} id is invalid.")
    return parsed


def render_id(value: Any) -> str:
    """Render an identifier or count as a decimal string."""
    return str(int(value))
