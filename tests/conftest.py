"""
Shared fixtures: sample TamilMV pages, a temp cache and in-memory fakes for
the fetcher and TMDB, so no test touches the network.
"""

import pytest

from indiastreamz.cache.file_cache import FileCache
from indiastreamz.core.exceptions import FetchError
from indiastreamz.scraper.models import ContentDraft, Listing, MagnetLink

HASH_A = "abcdef0123456789abcdef0123456789abcdef01"
HASH_B = "1234567890abcdef1234567890abcdef12345678"
HASH_C = "fedcba9876543210fedcba9876543210fedcba98"


def magnet(info_hash: str, name: str) -> str:
    return f"magnet:?xt=urn:btih:{info_hash.upper()}&dn={name}&tr=udp%3A%2F%2Ftracker.example%3A1337"


HOMEPAGE_HTML = """
<html><body>
<div class="ipsWidget_inner">
  <p><strong><a href="/index.php?/forums/topic/1001-leo-2023/">Leo (2023) Tamil TRUE WEB-DL - 1080p - AVC - (DD+5.1 - 640Kbps) - 2.5GB - ESub</a></strong></p>
  <p><strong><a href="https://www.1tamilmv.lc/index.php?/forums/topic/1002-show/">Vadhandhi (2022) S01 EP(01-08) Tamil TRUE WEB-DL - 720p - 1.4GB</a></strong></p>
  <p><strong><a href="/index.php?/forums/topic/1001-leo-2023/?do=getNewComment">Leo (2023) Tamil TRUE WEB-DL - 1080p - duplicate link</a></strong></p>
  <p><strong><a href="/index.php?/forums/topic/1003-0/">Broken topic with a zero suffix</a></strong></p>
  <p><strong><a href="/index.php?/forums/topic/">Forum index link title</a></strong></p>
  <p><a href="/index.php?/forums/topic/1004-short/">Short</a></p>
  <p><strong><a href="/index.php?/forums/topic/1005-re/">Re: Jailer (2023) [Tamil + Telugu] HDRip - 400MB</a></strong></p>
</div>
</body></html>
"""

DETAIL_HTML = f"""
<html><head><title>Leo (2023) Tamil - 1TamilMV</title></head><body>
<h1 class="ipsType_pageTitle">Leo (2023) Tamil TRUE WEB-DL - 1080p - AVC - (DD+5.1 - 640Kbps) - 2.5GB - ESub</h1>
<div class="ipsType_richText">
  <p>Download Leo from the magnet links below!</p>
  <p>Leo is a 2023 Indian Tamil-language action thriller film directed by Lokesh Kanagaraj. It stars Vijay in the lead.</p>
  <p><strong>Leo (2023) Tamil TRUE WEB-DL - 1080p - AVC - (DD+5.1 - 640Kbps) - 2.5GB</strong><br>
     <a class="magnet-plugin" href="{magnet(HASH_A, 'Leo.2023.Tamil.1080p.AVC.DD%2B5.1.640Kbps.2.5GB')}">magnet</a></p>
  <p><strong>Leo (2023) Tamil TRUE WEB-DL - 720p - HEVC - 1.2GB</strong><br>
     <a class="magnet-plugin" href="{magnet(HASH_B, 'Leo.2023.Tamil.720p.HEVC.1.2GB')}">magnet</a></p>
  <pre>{magnet(HASH_C, 'Leo.2023.Tamil.4K.HEVC.12GB')}</pre>
</div>
</body></html>
"""


@pytest.fixture
def homepage_html():
    return HOMEPAGE_HTML


@pytest.fixture
def detail_html():
    return DETAIL_HTML


@pytest.fixture
def cache(tmp_path):
    return FileCache(str(tmp_path / "cache"), validate_mtime=True)


class FakeFetcher:
    """Stands in for TamilMVFetcher with canned listings and drafts."""

    def __init__(self, listings, details, homepage_error=None):
        self.listings = listings
        self.details = details
        self.homepage_error = homepage_error
        self.detail_calls = []

    async def resolve_base_url(self):
        return "https://www.1tamilmv.lc"

    async def fetch_listings(self, homepage_url=None):
        if self.homepage_error:
            raise self.homepage_error
        return list(self.listings)

    async def fetch_details(self, item_url, fallback_title):
        self.detail_calls.append(item_url)
        result = self.details.get(item_url)
        if isinstance(result, Exception):
            raise result
        return result


def make_draft(url, title, magnets, synopsis=None):
    return ContentDraft(
        url=url,
        title=title,
        listing_title=title,
        magnets=[MagnetLink(uri=uri, description=description) for uri, description in magnets],
        synopsis=synopsis,
    )


@pytest.fixture
def upstream():
    """Three topics: a Tamil movie, a Telugu series and a topic whose page keeps failing."""
    movie_title = "Leo (2023) Tamil TRUE WEB-DL - 1080p - AVC - 2.5GB"
    series_title = "Vadhandhi (2022) S01 EP(01-03) Telugu WEB-DL - 720p - 1.4GB"
    broken_title = "Jailer (2023) Hindi HDRip - 720p - 1.1GB"

    listings = [
        Listing(title=movie_title, url="https://tmv/topic/1", topic_id="topic-1"),
        Listing(title=series_title, url="https://tmv/topic/2", topic_id="topic-2"),
        Listing(title=broken_title, url="https://tmv/topic/3", topic_id="topic-3"),
    ]
    details = {
        "https://tmv/topic/1": make_draft(
            "https://tmv/topic/1",
            movie_title,
            [(magnet(HASH_A, "Leo.2023.1080p.AVC.2.5GB"), "1080p")],
            synopsis="Leo is a 2023 Indian Tamil-language action thriller film by Lokesh.",
        ),
        "https://tmv/topic/2": make_draft(
            "https://tmv/topic/2",
            series_title,
            [(magnet(HASH_B, "Vadhandhi.S01.720p.1.4GB"), "")],
        ),
        "https://tmv/topic/3": FetchError("https://tmv/topic/3", 3, "timeout"),
    }
    return listings, details
