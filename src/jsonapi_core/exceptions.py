"""Exceptions raised for programmer misuse of the engine.

Malformed client input never reaches these: the parser degrades to defaults
instead of raising.
"""

from __future__ import annotations


class JsonApiError(Exception):
    """Base class for all engine errors."""


class DocumentShapeError(JsonApiError, ValueError):
    """Raised when a builder is asked for data in a shape it did not commit to."""


class ResourceIdentityError(JsonApiError, ValueError):
    """Raised when a resource carries both or neither of ``id`` and ``lid``."""


class DescriptorError(JsonApiError, ValueError):
    """Raised when a resource descriptor is incomplete or redefined."""


class InvalidCursorError(JsonApiError, ValueError):
    """Raised when a cursor string cannot be decoded."""
