"""
Exceptions raised by pagewalk.

Every error delivered to a cursor caller derives from ``PagewalkError`` so a
single ``except`` clause can catch them; ``details`` carries the context of
the failed request.
"""

from __future__ import annotations

from typing import Any


class PagewalkError(Exception):
    """Base exception for all pagewalk errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class FetchError(PagewalkError):
    """The fetch capability failed for one limit/offset request.

    The underlying exception (network error, bad status, undecodable body,
    unimplemented fetch) is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        limit: int | None = None,
        offset: int | None = None,
        **kwargs: Any,
    ):
        details = {"limit": limit, "offset": offset, **kwargs}
        super().__init__(message, {k: v for k, v in details.items() if v is not None})
        self.limit = limit
        self.offset = offset


class CursorResetError(PagewalkError):
    """A caller was still waiting on a fetch when the cursor was reset."""
