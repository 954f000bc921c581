import asyncio
from urllib.parse import urlsplit

import aiohttp

from indiastreamz.core.exceptions import FetchError
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings
from indiastreamz.scraper.classifier import is_trailer
from indiastreamz.scraper.models import ContentDraft, Listing
from indiastreamz.scraper.parsers import (extract_magnets, extract_synopsis,
                                          extract_title, parse_listings,
                                          parse_soup)


def browser_headers():
    return {
        "User-Agent": settings.SCRAPER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
    }


class TamilMVFetcher:
    def __init__(self, session: aiohttp.ClientSession, base_url: str = None):
        self.session = session
        self.base_url = (base_url or settings.SCRAPER_BASE_URL).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=settings.SCRAPER_REQUEST_TIMEOUT)
        self.max_retries = max(1, settings.SCRAPER_MAX_RETRIES)
        self.backoff = settings.SCRAPER_RETRY_BACKOFF

    async def resolve_base_url(self):
        """Follow the mirror redirect to the current domain, keeping the configured one on failure."""
        resolver_url = settings.SCRAPER_DOMAIN_RESOLVER_URL
        if not resolver_url:
            return self.base_url

        try:
            async with self.session.get(
                resolver_url,
                headers=browser_headers(),
                timeout=self.timeout,
                allow_redirects=True,
            ) as response:
                final_url = urlsplit(str(response.url))
                if response.status < 400 and final_url.scheme and final_url.netloc:
                    self.base_url = f"{final_url.scheme}://{final_url.netloc}"
                    logger.log("SCRAPER", f"Resolved TamilMV domain to {self.base_url}")
                else:
                    logger.warning(
                        f"Domain resolver returned status {response.status}, using {self.base_url}"
                    )
        except Exception as e:
            logger.warning(f"Domain resolver failed ({e}), using {self.base_url}")

        return self.base_url

    async def fetch_page(self, url: str) -> str:
        last_error = None
        for attempt in range(self.max_retries):
            try:
                async with self.session.get(
                    url, headers=browser_headers(), timeout=self.timeout
                ) as response:
                    response.raise_for_status()
                    return await response.text()
            except Exception as e:
                last_error = e
                logger.warning(
                    f"Fetch attempt {attempt + 1}/{self.max_retries} failed for {url}: {e}"
                )
                if attempt + 1 < self.max_retries:
                    await asyncio.sleep(self.backoff * (attempt + 1))

        raise FetchError(url, self.max_retries, str(last_error))

    async def fetch_listings(self, homepage_url: str = None) -> list[Listing]:
        homepage_url = homepage_url or f"{self.base_url}/"
        page = await self.fetch_page(homepage_url)
        listings = parse_listings(page, self.base_url)
        logger.log("SCRAPER", f"Found {len(listings)} listings on {homepage_url}")
        return listings

    async def fetch_details(self, item_url: str, fallback_title: str):
        page = await self.fetch_page(item_url)
        soup = parse_soup(page)

        title = extract_title(soup) or fallback_title
        if is_trailer(title) or is_trailer(fallback_title):
            logger.debug(f"Skipping trailer/promo topic: {title}")
            return None

        magnets = extract_magnets(soup, page)
        if not magnets:
            logger.debug(f"No magnet links on {item_url}")
            return None

        return ContentDraft(
            url=item_url,
            title=title,
            listing_title=fallback_title,
            magnets=magnets,
            synopsis=extract_synopsis(soup),
        )
