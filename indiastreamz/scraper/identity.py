import hashlib
import re

SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return SLUG_PATTERN.sub("-", (text or "").lower()).strip("-")


def language_prefix(languages) -> str:
    languages = set(languages or ())
    if len(languages) == 1:
        return next(iter(languages))
    if languages:
        return "multi"
    return "unknown"


def short_hash(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()[:8]


def normalized_key(title: str, languages) -> str:
    return slugify(f"{language_prefix(languages)}-{title}")


def _hash_input(normalized: str, languages) -> str:
    # "multi" alone would let two different language sets share an id
    return f"{normalized}|{'+'.join(sorted(set(languages or ())))}"


def movie_id(title: str, languages) -> str:
    normalized = normalized_key(title, languages)
    return f"{normalized}-{short_hash(_hash_input(normalized, languages))}"


def series_id(title: str, season: int, languages) -> str:
    normalized = normalized_key(title, languages)
    digest = short_hash(_hash_input(f"{normalized}-s{season}", languages))
    return f"{normalized}-s{season}-{digest}"


def episode_stream_id(series_id: str, season: int, episode: int) -> str:
    return f"{series_id}:{season}:{episode}"


def content_id(title: str, languages, season: int = None) -> str:
    if season is None:
        return movie_id(title, languages)
    return series_id(title, season, languages)
