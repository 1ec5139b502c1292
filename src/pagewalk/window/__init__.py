"""
Windowed cursor: sparse cache plus fetch scheduling.
"""

from pagewalk.window.cache import SparseCache
from pagewalk.window.cursor import FetchFn, FetchState, WindowedCursor
from pagewalk.window.pagination import walk_backward, walk_forward

__all__ = [
    "SparseCache",
    "FetchFn",
    "FetchState",
    "WindowedCursor",
    "walk_backward",
    "walk_forward",
]
