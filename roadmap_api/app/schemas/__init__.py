"""
Pydantic schema definitions for API payloads.

Response models use camelCase aliases (``ownerId``, ``issueCount``)
on the wire while keeping snake_case attribute names in Python.
Numeric identifiers are rendered as decimal strings.
"""
