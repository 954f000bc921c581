from contextlib import asynccontextmanager

import pytest

from indiastreamz.core.exceptions import FetchError
from indiastreamz.scraper.fetcher import TamilMVFetcher
from tests.conftest import HASH_A


class FakeResponse:
    def __init__(self, status=200, body="", url=None):
        self.status = status
        self.body = body
        self.url = url

    def raise_for_status(self):
        if self.status >= 400:
            raise RuntimeError(f"HTTP {self.status}")

    async def text(self):
        return self.body


class FakeSession:
    """Serves queued responses per url; an exception in the queue is raised instead."""

    def __init__(self, pages):
        self.pages = {url: list(responses) for url, responses in pages.items()}
        self.requests = []

    @asynccontextmanager
    async def get(self, url, **kwargs):
        self.requests.append(url)
        queue = self.pages.get(url) or [FakeResponse(404)]
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        yield response


def make_fetcher(pages):
    fetcher = TamilMVFetcher(FakeSession(pages), base_url="https://tmv.test/")
    fetcher.backoff = 0
    return fetcher


@pytest.mark.asyncio
async def test_fetch_page_retries_then_succeeds():
    fetcher = make_fetcher(
        {"https://tmv.test/a": [ConnectionError("reset"), FakeResponse(502), FakeResponse(200, "ok")]}
    )

    assert await fetcher.fetch_page("https://tmv.test/a") == "ok"
    assert len(fetcher.session.requests) == 3


@pytest.mark.asyncio
async def test_fetch_page_raises_after_retries():
    fetcher = make_fetcher({"https://tmv.test/a": [FakeResponse(503)]})

    with pytest.raises(FetchError) as error:
        await fetcher.fetch_page("https://tmv.test/a")

    assert error.value.attempts == fetcher.max_retries
    assert len(fetcher.session.requests) == fetcher.max_retries


@pytest.mark.asyncio
async def test_fetch_listings_uses_homepage(homepage_html):
    fetcher = make_fetcher({"https://tmv.test/": [FakeResponse(200, homepage_html)]})

    listings = await fetcher.fetch_listings()

    assert fetcher.base_url == "https://tmv.test"
    assert [listing.topic_id for listing in listings] == ["topic-1001", "topic-1002", "topic-1005"]
    assert listings[0].url.startswith("https://tmv.test/")


@pytest.mark.asyncio
async def test_fetch_details_builds_draft(detail_html):
    fetcher = make_fetcher({"https://tmv.test/t/1": [FakeResponse(200, detail_html)]})

    draft = await fetcher.fetch_details("https://tmv.test/t/1", "Leo listing title")

    assert draft.title.startswith("Leo (2023) Tamil TRUE WEB-DL")
    assert draft.listing_title == "Leo listing title"
    assert len(draft.magnets) == 3
    assert draft.synopsis.startswith("Leo is a 2023")


@pytest.mark.asyncio
async def test_fetch_details_skips_trailers_and_empty_pages():
    trailer = (
        "<h1>Coolie (2025) Tamil Official Trailer 4K</h1>"
        f'<a href="magnet:?xt=urn:btih:{HASH_A}">magnet</a>'
    )
    fetcher = make_fetcher(
        {
            "https://tmv.test/t/2": [FakeResponse(200, trailer)],
            "https://tmv.test/t/3": [FakeResponse(200, "<h1>Nothing here yet</h1>")],
        }
    )

    assert await fetcher.fetch_details("https://tmv.test/t/2", "Coolie") is None
    assert await fetcher.fetch_details("https://tmv.test/t/3", "Nothing") is None


@pytest.mark.asyncio
async def test_resolve_base_url_follows_redirect(monkeypatch):
    from indiastreamz.core.models import settings

    monkeypatch.setattr(settings, "SCRAPER_DOMAIN_RESOLVER_URL", "https://mirror.test")
    fetcher = make_fetcher(
        {"https://mirror.test": [FakeResponse(200, url="https://www.1tamilmv.new/index.php")]}
    )
    assert await fetcher.resolve_base_url() == "https://www.1tamilmv.new"

    failing = make_fetcher({"https://mirror.test": [ConnectionError("dns")]})
    assert await failing.resolve_base_url() == "https://tmv.test"
