import html
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from indiastreamz.scraper.models import Listing, MagnetLink

TOPIC_ID_PATTERN = re.compile(r"/topic/(\d+)")
INVALID_TOPIC_PATTERN = re.compile(r"/topic/\d+-0/?$")
MAGNET_PATTERN = re.compile(r"magnet:\?[^\s<>\"']+", re.IGNORECASE)
REPLY_PREFIX_PATTERN = re.compile(r"^Re:\s*", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")
SENTENCE_SPLIT_PATTERN = re.compile(r"(?<=[.!?])\s+")
BOILERPLATE_PATTERN = re.compile(
    r"https?://|www\.|magnet|torrent|download|telegram|join\s+us|watch\s+online|"
    r"click\s+here|seeders?|leechers?|\.mkv|\.mp4",
    re.IGNORECASE,
)

TITLE_SELECTORS = (
    "h1",
    ".ipsType_pageTitle",
    ".topic-title",
    '[data-role="title"]',
    "title",
)
SYNOPSIS_SELECTORS = (".ipsType_richText", ".post-content")
MAGNET_CONTAINERS = ["tr", "div", "li", "p"]
MIN_LISTING_TITLE_LENGTH = 10
MIN_SYNOPSIS_LENGTH = 50
MAX_SYNOPSIS_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 300


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text or "").strip()


def parse_soup(page: str) -> BeautifulSoup:
    return BeautifulSoup(page or "", "html.parser")


def is_valid_topic_href(href: str) -> bool:
    if not href or href.rstrip().endswith("/topic/"):
        return False
    if "/topic/0/" in href or INVALID_TOPIC_PATTERN.search(href):
        return False
    return True


def topic_key(url: str):
    match = TOPIC_ID_PATTERN.search(url or "")
    if not match or match.group(1) == "0":
        return None
    return f"topic-{match.group(1)}"


def _listing_title(link) -> str:
    strong = link.find_parent("strong")
    if strong is not None:
        title = strong.get_text(" ")
    elif link.parent is not None:
        title = link.parent.get_text(" ")
    else:
        title = ""

    title = _collapse(title)
    if len(title) < 5:
        title = _collapse(link.get_text(" "))
    return REPLY_PREFIX_PATTERN.sub("", title).strip()


def parse_listings(page: str, base_url: str) -> list[Listing]:
    """Extract topic links from the homepage in page order, one per topic id."""
    soup = parse_soup(page)
    listings = []
    seen = set()

    for link in soup.select('a[href*="/topic/"]'):
        href = link.get("href", "")
        if not is_valid_topic_href(href):
            continue

        url = urljoin(f"{base_url}/", href)
        key = topic_key(url)
        if key is None or key in seen:
            continue

        title = _listing_title(link)
        if len(title) < MIN_LISTING_TITLE_LENGTH:
            continue

        seen.add(key)
        listings.append(Listing(title=title, url=url, topic_id=key))

    return listings


def extract_title(soup: BeautifulSoup):
    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue

        title = _collapse(element.get_text(" "))
        if title:
            return title
    return None


def _element_magnets(element) -> list[str]:
    magnets = []
    for attribute in ("href", "data-href", "data-magnet", "onclick"):
        value = element.get(attribute)
        if value and "magnet:" in value:
            magnets.extend(MAGNET_PATTERN.findall(value))
    return magnets


def _nearby_text(element) -> str:
    container = element.find_parent(MAGNET_CONTAINERS)
    if container is None:
        return _collapse(element.get_text(" "))[:MAX_DESCRIPTION_LENGTH]
    return _collapse(container.get_text(" "))[:MAX_DESCRIPTION_LENGTH]


def _has_magnet_marker(value) -> bool:
    if isinstance(value, list):
        value = " ".join(value)
    return bool(value) and "magnet" in value.lower()


def extract_magnets(soup: BeautifulSoup, page: str = None) -> list[MagnetLink]:
    """Collect magnet URIs from links, data attributes, buttons and raw markup.

    Attribute-bound magnets carry the text of their closest row or block as a
    description; magnets only found in the raw markup or in code blocks get none.
    """
    found = {}

    candidates = soup.select(
        'a[href^="magnet:"], [data-href^="magnet:"], [data-magnet], [onclick*="magnet:"]'
    )
    candidates += [
        element
        for element in soup.find_all(True)
        if _has_magnet_marker(element.get("class")) or _has_magnet_marker(element.get("id"))
    ]

    for element in candidates:
        for uri in _element_magnets(element):
            uri = html.unescape(uri)
            if uri not in found:
                found[uri] = _nearby_text(element)

    raw_sources = [page if page is not None else str(soup)]
    raw_sources += [block.get_text() for block in soup.find_all(["code", "pre"])]
    for source in raw_sources:
        for uri in MAGNET_PATTERN.findall(source):
            found.setdefault(html.unescape(uri), "")

    return [MagnetLink(uri=uri, description=description) for uri, description in found.items()]


def extract_synopsis(soup: BeautifulSoup):
    body = None
    for selector in SYNOPSIS_SELECTORS:
        body = soup.select_one(selector)
        if body is not None:
            break
    if body is None:
        return None

    lines = [
        _collapse(line)
        for line in body.get_text("\n").split("\n")
        if line.strip() and not BOILERPLATE_PATTERN.search(line)
    ]

    for sentence in SENTENCE_SPLIT_PATTERN.split(" ".join(lines)):
        sentence = sentence.strip()
        if len(sentence) >= MIN_SYNOPSIS_LENGTH and not sentence[0].isdigit():
            return sentence[:MAX_SYNOPSIS_LENGTH]
    return None
