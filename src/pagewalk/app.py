from __future__ import annotations

import logging

from pagewalk.config import Settings
from pagewalk.remote.client import OffsetPageClient
from pagewalk.window.cursor import WindowedCursor
from pagewalk.window.pagination import walk_forward


log = logging.getLogger("pagewalk")


def build_cursor(settings: Settings) -> tuple[OffsetPageClient, WindowedCursor]:
    client = OffsetPageClient.from_settings(settings)
    cursor = WindowedCursor(
        client.fetch_page,
        low_water_mark=settings.low_water_mark,
        high_water_mark=settings.high_water_mark,
    )
    return client, cursor


async def run_app(settings: Settings | None = None) -> list:
    """Walk ``walk_count`` elements forward from ``start_index`` and log them."""

    settings = settings or Settings.load()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    client, cursor = build_cursor(settings)
    log.info("Walking base_url=%s path=%s start=%d", client.base_url, client.path, settings.start_index)

    seen: list = []
    try:
        first = await cursor.reset(settings.query, settings.start_index)
        if first is None:
            log.info("No element at index=%d", settings.start_index)
            return seen
        seen.append(first)
        log.info("index=%d item=%s", settings.start_index, first)

        async for item in walk_forward(cursor, limit=max(0, settings.walk_count - 1)):
            seen.append(item)
            log.info("index=%d item=%s", cursor.position, item)
    finally:
        await client.aclose()

    log.info("Walked %d element(s) exhausted=%s", len(seen), cursor.exhausted)
    return seen
