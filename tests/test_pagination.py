from __future__ import annotations

import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parents[1] / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

import asyncio
from typing import Any

from pagewalk.window.cursor import WindowedCursor
from pagewalk.window.pagination import walk_backward, walk_forward


async def _fetch_numbers(limit: int, offset: int, params: Any) -> list[int]:
    total = params["total"]
    return list(range(offset, min(offset + limit, total)))


def test_walk_forward_then_backward_covers_source() -> None:
    async def run() -> tuple[list[int], list[int]]:
        cursor = WindowedCursor(_fetch_numbers)
        await cursor.reset({"total": 13})
        forward = [x async for x in walk_forward(cursor)]
        backward = [x async for x in walk_backward(cursor)]
        return forward, backward

    forward, backward = asyncio.run(run())
    assert forward == list(range(1, 13))
    assert backward == list(range(11, -1, -1))


def test_walk_respects_limit() -> None:
    async def run() -> tuple[list[int], list[int], int | None]:
        cursor = WindowedCursor(_fetch_numbers)
        await cursor.reset({"total": 100}, 40)
        forward = [x async for x in walk_forward(cursor, limit=3)]
        backward = [x async for x in walk_backward(cursor, limit=6)]
        return forward, backward, cursor.position

    forward, backward, position = asyncio.run(run())
    assert forward == [41, 42, 43]
    assert backward == [42, 41, 40, 39, 38, 37]
    assert position == 37


def test_walk_stops_at_none_element() -> None:
    async def fetch(limit: int, offset: int, params: Any) -> list[Any]:
        return [1, 2, None, 4][offset : offset + limit]

    async def run() -> tuple[list[Any], int | None, Any]:
        cursor = WindowedCursor(fetch)
        await cursor.reset(None)
        walked = [x async for x in walk_forward(cursor)]
        return walked, cursor.position, await cursor.advance()

    walked, position, after = asyncio.run(run())
    assert walked == [2]
    # The None element was stepped onto; the walk just could not tell it from the end.
    assert position == 2
    assert after == 4


def test_walk_on_empty_source_yields_nothing() -> None:
    async def run() -> list[int]:
        cursor = WindowedCursor(_fetch_numbers)
        assert await cursor.reset({"total": 0}) is None
        return [x async for x in walk_forward(cursor)]

    assert asyncio.run(run()) == []
