from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from pagewalk.config import Settings
from pagewalk.errors import FetchError


log = logging.getLogger(__name__)


def _is_retryable_exception(exc: BaseException) -> bool:
    # Network / timeout errors are usually retryable.
    if isinstance(exc, httpx.RequestError):
        return True

    # Only retry HTTP status errors that are plausibly transient.
    if isinstance(exc, httpx.HTTPStatusError):
        status = getattr(exc.response, "status_code", None)
        if status == 429:
            return True
        if isinstance(status, int) and 500 <= status <= 599:
            return True
        return False

    return False


@dataclass
class OffsetPageClient:
    """HTTP source for a limit/offset endpoint returning JSON pages.

    ``fetch_page`` matches the fetch capability expected by
    ``WindowedCursor``; pass the bound method straight in.
    """

    base_url: str
    path: str = "/"
    items_field: str | None = None
    limit_param: str = "limit"
    offset_param: str = "offset"
    timeout_seconds: float = 10.0
    retry_attempts: int = 3

    _client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "OffsetPageClient":
        if not settings.base_url:
            raise ValueError("PAGEWALK_BASE_URL is not configured")
        return cls(
            base_url=settings.base_url.rstrip("/"),
            path=settings.path,
            items_field=settings.items_field,
            limit_param=settings.limit_param,
            offset_param=settings.offset_param,
            timeout_seconds=settings.timeout_seconds,
            retry_attempts=settings.retry_attempts,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds))
        return self._client

    async def _get(self, params: dict[str, Any]) -> httpx.Response:
        url = f"{self.base_url}{self.path}"
        resp = await self._get_client().get(url, params=params)

        # Be polite with rate limits: if we get a 429, pause briefly and let tenacity retry.
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            delay = 1.0
            if retry_after:
                try:
                    delay = float(retry_after)
                except ValueError:
                    delay = 1.0
            await asyncio.sleep(max(0.5, min(delay, 10.0)))

        resp.raise_for_status()
        return resp

    async def request_page(self, params: dict[str, Any]) -> httpx.Response:
        retrying = AsyncRetrying(
            wait=wait_exponential_jitter(initial=0.2, max=2.0),
            stop=stop_after_attempt(max(1, self.retry_attempts)),
            retry=retry_if_exception(_is_retryable_exception),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._get(params)
        raise AssertionError("unreachable")  # pragma: no cover

    def _decode(self, resp: httpx.Response) -> list[Any]:
        data = resp.json()
        if self.items_field is not None:
            # A missing field is malformed, not an empty page; only an explicit
            # empty list ends the source.
            if not isinstance(data, dict) or self.items_field not in data:
                raise ValueError(f"expected a JSON object with {self.items_field!r}")
            data = data[self.items_field]
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON list, got {type(data).__name__}")
        return data

    async def fetch_page(self, limit: int, offset: int, params: Any = None) -> list[Any]:
        query: dict[str, Any] = dict(params or {})
        query[self.limit_param] = limit
        query[self.offset_param] = offset

        try:
            resp = await self.request_page(query)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"HTTP {e.response.status_code} from {self.path}",
                limit=limit,
                offset=offset,
                status_code=e.response.status_code,
                response_body=e.response.text[:500] or None,
            ) from e
        except httpx.RequestError as e:
            raise FetchError(f"Request to {self.path} failed: {e!r}", limit=limit, offset=offset) from e

        try:
            items = self._decode(resp)
        except ValueError as e:
            raise FetchError(f"Malformed page from {self.path}: {e}", limit=limit, offset=offset) from e

        log.debug("PAGE limit=%d offset=%d received=%d", limit, offset, len(items))
        return items
