"""
pagewalk: lazy bidirectional iteration over limit/offset paginated sources.
"""

from pagewalk.errors import CursorResetError, FetchError, PagewalkError
from pagewalk.remote.client import OffsetPageClient
from pagewalk.window.cursor import FetchState, WindowedCursor
from pagewalk.window.pagination import walk_backward, walk_forward

__all__ = [
    # Errors
    "PagewalkError",
    "FetchError",
    "CursorResetError",
    # Cursor
    "FetchState",
    "WindowedCursor",
    "walk_forward",
    "walk_backward",
    # Remote
    "OffsetPageClient",
]
