import asyncio
from typing import Optional

import aiohttp

from indiastreamz.core.models import settings


class HttpClientManager:
    """Lazily creates one pooled aiohttp session shared by scraper, TMDB and debrid calls."""

    def __init__(self):
        self._session: Optional[aiohttp.ClientSession] = None
        self._lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        if self._session and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session and not self._session.closed:
                return self._session

            connector = aiohttp.TCPConnector(
                limit=settings.HTTP_CLIENT_LIMIT,
                limit_per_host=settings.HTTP_CLIENT_LIMIT_PER_HOST,
                ttl_dns_cache=settings.HTTP_CLIENT_TTL_DNS_CACHE,
                keepalive_timeout=settings.HTTP_CLIENT_KEEPALIVE_TIMEOUT,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=settings.HTTP_CLIENT_TIMEOUT_TOTAL),
            )
            return self._session

    async def close(self) -> None:
        async with self._lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None


http_client_manager = HttpClientManager()
