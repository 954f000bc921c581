import asyncio

import aiohttp

from indiastreamz.core.constants import TORBOX_CHECK_CHUNK_SIZE
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings


class TorBox:
    def __init__(self, session: aiohttp.ClientSession, debrid_api_key: str):
        self.session = session
        self.api_url = settings.TORBOX_API_URL
        self.headers = {"Authorization": f"Bearer {debrid_api_key}"}
        self.timeout = aiohttp.ClientTimeout(total=settings.DEBRID_CHECK_TIMEOUT)

    async def get_instant(self, chunk: list):
        try:
            async with self.session.get(
                f"{self.api_url}/torrents/checkcached",
                params={"hash": ",".join(chunk), "format": "list"},
                headers=self.headers,
                timeout=self.timeout,
            ) as response:
                return await response.json()
        except Exception as e:
            logger.log(
                "DEBRID",
                f"Exception while checking hash instant availability on TorBox: {e}",
            )
            return None

    async def get_cached_hashes(self, info_hashes: list) -> set:
        chunks = [
            info_hashes[i : i + TORBOX_CHECK_CHUNK_SIZE]
            for i in range(0, len(info_hashes), TORBOX_CHECK_CHUNK_SIZE)
        ]
        responses = await asyncio.gather(*(self.get_instant(chunk) for chunk in chunks))

        cached = set()
        for response in responses:
            if not response or not response.get("success") or not response.get("data"):
                continue
            for torrent in response["data"]:
                info_hash = torrent.get("hash")
                if info_hash:
                    cached.add(info_hash.lower())
        return cached
