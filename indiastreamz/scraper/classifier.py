"""Heuristics that turn scraped TamilMV titles and magnet names into structure.

Every function here is pure and total: it accepts any string (including empty
or HTML-derived text) and never raises.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from indiastreamz.core.constants import LANGUAGE_ALIASES, LANGUAGES

LANGUAGE_PATTERN = re.compile(
    r"(?<![A-Za-z])("
    + "|".join(sorted(LANGUAGE_ALIASES, key=len, reverse=True))
    + r")(?![A-Za-z])",
    re.IGNORECASE,
)

SEASON_PATTERNS = (
    re.compile(r"(?<![A-Za-z])S(\d{1,2})(?!\d)", re.IGNORECASE),
    re.compile(r"\bSeason\s*(\d{1,2})(?!\d)", re.IGNORECASE),
)
EPISODE_RANGE_PATTERNS = (
    re.compile(
        r"(?<![A-Za-z])EP?\s*\(?\s*(\d{1,4})\s*(?:-|to)\s*(?:EP?)?\s*(\d{1,4})\s*\)?",
        re.IGNORECASE,
    ),
    re.compile(
        r"\bEpisodes?\s*\(?\s*(\d{1,4})\s*(?:-|to)\s*(\d{1,4})", re.IGNORECASE
    ),
)
SINGLE_EPISODE_PATTERNS = (
    re.compile(r"(?<![A-Za-z])EP?\s*\(?\s*(\d{1,4})(?!\d)", re.IGNORECASE),
    re.compile(r"\bEpisode\s*(\d{1,4})(?!\d)", re.IGNORECASE),
)
MAX_EPISODES = 500

QUALITY_PATTERNS = (
    ("4K", re.compile(r"(?<!\d)(?:4K|2160P|UHD)", re.IGNORECASE)),
    ("1080p", re.compile(r"1080P|FULL\s?HD|FHD", re.IGNORECASE)),
    ("720p", re.compile(r"720P", re.IGNORECASE)),
    ("480p", re.compile(r"480P", re.IGNORECASE)),
)
CODEC_PATTERNS = (
    ("HEVC", re.compile(r"HEVC|[HX]\.?265", re.IGNORECASE)),
    ("AVC", re.compile(r"AVC|[HX]\.?264", re.IGNORECASE)),
)
SOURCE_PATTERNS = (
    ("WEB-DL", re.compile(r"WEB-?DL", re.IGNORECASE)),
    ("WEBRip", re.compile(r"WEB-?RIP", re.IGNORECASE)),
    ("HDRip", re.compile(r"HD-?\s?RIP", re.IGNORECASE)),
    ("BluRay", re.compile(r"BLU-?RAY|BDRIP|BRRIP", re.IGNORECASE)),
    ("DVDRip", re.compile(r"DVD-?RIP", re.IGNORECASE)),
    ("PreDVD", re.compile(r"PRE-?DVD", re.IGNORECASE)),
    ("HDTV", re.compile(r"HDTV", re.IGNORECASE)),
    ("CAM", re.compile(r"\b(?:HD-?CAM|CAMRIP|CAM|HDTS)\b", re.IGNORECASE)),
)
AUDIO_PATTERNS = (
    ("DD+5.1", re.compile(r"DD\+\s?5\.1|DDP\s?5\.1|E-?AC-?3", re.IGNORECASE)),
    ("DD+", re.compile(r"DD\+|DDP", re.IGNORECASE)),
    ("DD5.1", re.compile(r"DD\s?5\.1|AC-?3", re.IGNORECASE)),
    ("TrueHD", re.compile(r"TRUE-?HD", re.IGNORECASE)),
    ("Atmos", re.compile(r"ATMOS", re.IGNORECASE)),
    ("DTS", re.compile(r"DTS", re.IGNORECASE)),
    ("AAC", re.compile(r"AAC", re.IGNORECASE)),
)
AUDIO_BITRATE_PATTERN = re.compile(r"(\d{2,4})\s*KBPS", re.IGNORECASE)
SIZE_PATTERN = re.compile(r"(?<!\d)(\d+(?:\.\d+)?)\s*(GB|MB|TB)(?![A-Za-z])", re.IGNORECASE)

TRAILER_PATTERN = re.compile(
    r"\b(?:trailer|teaser|promo|first\s+look|glimpse|motion\s+poster)s?\b",
    re.IGNORECASE,
)

YEAR_IN_BRACKETS_PATTERN = re.compile(r"[\(\[]\s*((?:19|20)\d{2})\s*[\)\]]")
YEAR_PATTERN = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d|p\b|\s*kbps)", re.IGNORECASE)

SITE_PREFIX_PATTERN = re.compile(r"^\s*www\.\S+\s*-\s*", re.IGNORECASE)
YEAR_PREFIX_PATTERN = re.compile(r"^(.+?)\s*[\(\[]\s*(?:19|20)\d{2}\s*[\)\]]")
BRACKET_GROUP_PATTERN = re.compile(r"\[[^\]]*\]")
DASH_PARENTHETICAL_PATTERN = re.compile(r"\s*-\s*\([^)]*\)")
PARENTHETICAL_PATTERN = re.compile(r"\(([^)]*)\)")
TECHNICAL_TERMS = (
    r"TRUE|WEB-?DL|WEB-?Rip|HD-?Rip|Pre-?DVD|HQ|UHD|HC-?ESubs?|ESubs?|"
    r"Org\s+Auds?|Original\s+Audios?|(?:HQ\s+)?Clean\s+Audios?|Multi\s+Audios?|"
    r"Dual\s+Audios?|Blu-?Ray|BDRip|DVDRip|HDTV|HD-?CAM|CAMRip|4K|2160p|1080p|"
    r"720p|480p|HEVC|AVC|[xh]\.?26[45]|10\s?bit|HDR|DD\+?\s?5\.1|DDP\s?5\.1|"
    r"AAC(?:\s?2\.0)?|DTS|Atmos|\d+(?:\.\d+)?\s?(?:GB|MB|TB)|\d+\s?Kbps|Proper|Uncut"
)
TECHNICAL_TERM_PATTERN = re.compile(
    rf"(?<![A-Za-z0-9])(?:{TECHNICAL_TERMS})(?![A-Za-z0-9])", re.IGNORECASE
)
SERIES_TOKEN_PATTERN = re.compile(
    r"(?<![A-Za-z])S\d{1,2}(?:\s*E\d{1,4}(?:\s*-\s*E?\d{1,4})?)?(?!\d)"
    r"|\bSeason\s*\d{1,2}(?!\d)"
    r"|(?<![A-Za-z])EP?\s*\(?\s*\d{1,4}(?:\s*(?:-|to)\s*(?:EP?)?\s*\d{1,4})?\s*\)?"
    r"|\bEpisodes?\s*\d{1,4}(?:\s*(?:-|to)\s*\d{1,4})?",
    re.IGNORECASE,
)
EMPTY_BRACKETS_PATTERN = re.compile(r"[\(\[][\s+&,/|-]*[\)\]]")
SEPARATOR_RUN_PATTERN = re.compile(r"(?:\s*[-|:]\s*){2,}")
WHITESPACE_PATTERN = re.compile(r"\s+")
EDGE_CHARACTERS = " -|:,+&_./"


@dataclass(frozen=True)
class SeriesInfo:
    is_series: bool = False
    season: Optional[int] = None
    episodes: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class StreamDetails:
    quality: Optional[str] = None
    codec: Optional[str] = None
    audio: Optional[str] = None
    audio_bitrate: Optional[str] = None
    size: Optional[str] = None
    source: Optional[str] = None


def ordered_languages(languages) -> List[str]:
    return [language for language in LANGUAGES if language in languages]


def detect_languages(text: str) -> set:
    """Return every language tag mentioned in ``text``.

    Lists such as ``(Tamil + Telugu)`` or ``[Tam + Hin]`` and standalone names or
    abbreviations are all caught by the same letter-bounded match, so ``TAM`` counts
    but ``Tamilrockers`` does not. An empty set means the language is unknown.
    """
    if not text:
        return set()

    return {LANGUAGE_ALIASES[match.upper()] for match in LANGUAGE_PATTERN.findall(text)}


def _first_int(patterns, text: str):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def _episode_range(text: str) -> List[int]:
    for pattern in EPISODE_RANGE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = int(match.group(1)), int(match.group(2))
            start = max(start, 1)
            if end < start or end - start >= MAX_EPISODES:
                continue
            return list(range(start, end + 1))
    return []


def detect_series(text: str) -> SeriesInfo:
    if not text:
        return SeriesInfo()

    season = _first_int(SEASON_PATTERNS, text)
    if season is not None and season < 1:
        season = None

    episodes = _episode_range(text)
    if season is not None and not episodes:
        episode = _first_int(SINGLE_EPISODE_PATTERNS, text)
        if episode and episode > 0:
            episodes = [episode]

    if season is None and not episodes:
        return SeriesInfo()

    # an episode range without a season marker is a first season
    return SeriesInfo(is_series=True, season=season or 1, episodes=episodes)


def _first_label(patterns, text: str):
    for label, pattern in patterns:
        if pattern.search(text):
            return label
    return None


def format_size(value: float, unit: str) -> str:
    unit = unit.upper()
    if unit == "GB":
        if value >= 1:
            return f"{value:.1f}GB"
        return f"{value * 1024:.0f}MB"
    if unit == "MB":
        if value >= 1024:
            return f"{value / 1024:.1f}GB"
        return f"{value:.0f}MB"
    return f"{value:g}TB"


def classify_quality(display_name: str) -> StreamDetails:
    if not display_name:
        return StreamDetails()

    bitrate = AUDIO_BITRATE_PATTERN.search(display_name)
    size = SIZE_PATTERN.search(display_name)

    return StreamDetails(
        quality=_first_label(QUALITY_PATTERNS, display_name),
        codec=_first_label(CODEC_PATTERNS, display_name),
        audio=_first_label(AUDIO_PATTERNS, display_name),
        audio_bitrate=f"{bitrate.group(1)}Kbps" if bitrate else None,
        size=format_size(float(size.group(1)), size.group(2)) if size else None,
        source=_first_label(SOURCE_PATTERNS, display_name),
    )


def format_stream_name(details: StreamDetails, fallback: str = "Unknown") -> str:
    parts = []
    if details.quality:
        parts.append(details.quality)
    if details.codec:
        parts.append(details.codec)

    audio = " ".join(part for part in (details.audio, details.audio_bitrate) if part)
    if audio:
        parts.append(audio)
    if details.size:
        parts.append(details.size)
    if details.source and len(parts) < 4:
        parts.append(details.source)

    return " - ".join(parts) if parts else fallback


def is_trailer(title: str) -> bool:
    return bool(title) and TRAILER_PATTERN.search(title) is not None


def extract_year(text: str) -> Optional[int]:
    if not text:
        return None

    match = YEAR_IN_BRACKETS_PATTERN.search(text) or YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _tidy(text: str) -> str:
    text = EMPTY_BRACKETS_PATTERN.sub(" ", text)
    text = SEPARATOR_RUN_PATTERN.sub(" - ", text)
    text = _collapse(text)
    return text.strip(EDGE_CHARACTERS)


def _drop_noisy_parenthetical(match: re.Match) -> str:
    inner = match.group(1)
    if LANGUAGE_PATTERN.search(inner) or TECHNICAL_TERM_PATTERN.search(inner):
        return " "
    return match.group(0)


def clean_display_title(raw_title: str) -> str:
    """Strip release noise from a scraped title, keeping the human title.

    ``"Vikram (2022) Tamil HQ HDRip - 1080p - x264 - (DD+5.1) - 2.5GB"`` becomes
    ``"Vikram"``. Falls back to progressively less aggressive results so a
    non-empty input never yields an empty title.
    """
    if not raw_title:
        return ""

    minimal = _collapse(SITE_PREFIX_PATTERN.sub("", raw_title))
    if not minimal:
        return raw_title.strip()

    cleaned = minimal
    prefix = YEAR_PREFIX_PATTERN.match(cleaned)
    if prefix and prefix.group(1).strip(EDGE_CHARACTERS):
        cleaned = prefix.group(1)

    cleaned = BRACKET_GROUP_PATTERN.sub(" ", cleaned)
    cleaned = DASH_PARENTHETICAL_PATTERN.sub(" ", cleaned)
    cleaned = PARENTHETICAL_PATTERN.sub(_drop_noisy_parenthetical, cleaned)
    cleaned = TECHNICAL_TERM_PATTERN.sub(" ", cleaned)
    cleaned = SERIES_TOKEN_PATTERN.sub(" ", cleaned)
    base = _tidy(cleaned)

    cleaned = YEAR_IN_BRACKETS_PATTERN.sub(" ", cleaned)
    cleaned = YEAR_PATTERN.sub(" ", cleaned)
    cleaned = LANGUAGE_PATTERN.sub(" ", cleaned)
    cleaned = _tidy(cleaned)

    return cleaned or base or _tidy(minimal) or minimal


def clean_title_for_search(raw_title: str):
    return clean_display_title(raw_title), extract_year(raw_title)
