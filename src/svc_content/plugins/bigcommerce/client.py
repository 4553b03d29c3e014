from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt

from svc_content.exceptions import StoreRequestError

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.bigcommerce.com/stores"
MAX_TRIES = 3
DEFAULT_PAGE_SIZE = 50
DEFAULT_BATCH_SIZE = 5


def _is_server_error(exc: BaseException) -> bool:
    return isinstance(exc, StoreRequestError) and exc.status >= 500


class StoreClient:
    """Thin async client for one installed store.

    Server errors (>= 500) are retried up to ``MAX_TRIES`` times; client
    errors fail immediately.
    """

    def __init__(
        self,
        store_hash: str,
        token: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = API_BASE_URL,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.hash = store_hash
        self.token = token
        self.batch_size = batch_size
        self._client = client
        self._base_url = base_url.rstrip("/")

    def url(self, endpoint: str) -> str:
        return f"{self._base_url}/{self.hash}/{endpoint.lstrip('/')}"

    async def _send(self, client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(MAX_TRIES),
            retry=retry_if_exception(_is_server_error),
            reraise=True,
        ):
            with attempt:
                resp = await client.request(method, url, **kwargs)
                logger.info("%s %s - %s %s", method.upper(), resp.request.url, resp.status_code, resp.reason_phrase)
                if not resp.is_success:
                    raise StoreRequestError(method, str(resp.request.url), resp.status_code, resp.text)
        return resp

    async def fetch(
        self,
        endpoint: str,
        *,
        method: str = "get",
        body: Any = None,
        queries: Optional[dict[str, Any]] = None,
        raw: bool = False,
    ) -> Any:
        params = {name: value for name, value in (queries or {}).items() if name and value}
        headers = {"accept": "application/json", "x-auth-token": self.token}
        kwargs: dict[str, Any] = {"params": params, "headers": headers}
        if body is not None:
            kwargs["json"] = body

        url = self.url(endpoint)
        if self._client is not None:
            resp = await self._send(self._client, method, url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                resp = await self._send(client, method, url, **kwargs)

        if resp.status_code == 204 or not resp.content:
            return None
        result = resp.json()
        if isinstance(result, dict) and "data" in result and not raw:
            return result["data"]
        return result

    async def get(self, endpoint: str, **kwargs) -> Any:
        return await self.fetch(endpoint, method="get", **kwargs)

    async def post(self, endpoint: str, **kwargs) -> Any:
        return await self.fetch(endpoint, method="post", **kwargs)

    async def put(self, endpoint: str, **kwargs) -> Any:
        return await self.fetch(endpoint, method="put", **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> Any:
        return await self.fetch(endpoint, method="delete", **kwargs)

    async def get_all(self, endpoint: str, *, queries: Optional[dict[str, Any]] = None) -> list[Any]:
        """Collect every page of a listing.

        v3 endpoints report ``meta.pagination.total_pages``; v2 endpoints
        return bare lists, so a full page means another one may follow.
        """
        queries = dict(queries or {})
        page_size = queries.get("limit", DEFAULT_PAGE_SIZE)
        results: list[Any] = []
        total_pages = 1
        page = 1
        while page <= total_pages:
            current = await self.fetch(endpoint, queries={**queries, "page": page}, raw=True)
            if isinstance(current, dict):
                items = current.get("data")
                total = ((current.get("meta") or {}).get("pagination") or {}).get("total_pages")
            else:
                items, total = current, None
            if total:
                total_pages = total
            elif isinstance(items, list) and len(items) == page_size:
                total_pages += 1
            if isinstance(items, list):
                results.extend(items)
            page += 1
        return results

    async def batch_requests(
        self,
        requests: Sequence[Callable[[], Awaitable[Any]]],
        concurrency: Optional[int] = None,
    ) -> list[Any]:
        """Run request factories ``concurrency`` at a time (default ``batch_size``), batch after batch."""
        concurrency = self.batch_size if concurrency is None else concurrency
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        results: list[Any] = []
        for start in range(0, len(requests), concurrency):
            batch = requests[start:start + concurrency]
            logger.debug("BATCH: %d", start // concurrency + 1)
            results.extend(await asyncio.gather(*(request() for request in batch)))
        return results
