from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from pagewalk.window.cursor import WindowedCursor


async def walk_forward(cursor: WindowedCursor, *, limit: int | None = None) -> AsyncIterator[Any]:
    """Yield successive `cursor.advance()` results.

    Stops at the first None (end of source) or after `limit` elements. The
    cursor must already have been reset; the element at the current position
    is not yielded.

    The cursor reports "no element" as None, so a source that contains None
    elements ends the walk early at the first one. Call `cursor.advance()`
    directly and check `cursor.position` to walk past them.
    """

    count = 0
    while limit is None or count < limit:
        item = await cursor.advance()
        if item is None:
            return
        yield item
        count += 1


async def walk_backward(cursor: WindowedCursor, *, limit: int | None = None) -> AsyncIterator[Any]:
    """Mirror of `walk_forward` using `cursor.retreat()`.

    Same caveat: a None element stops the walk.
    """

    count = 0
    while limit is None or count < limit:
        item = await cursor.retreat()
        if item is None:
            return
        yield item
        count += 1
