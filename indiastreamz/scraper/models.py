from typing import List, Optional

from pydantic import BaseModel, Field


class Listing(BaseModel):
    title: str
    url: str
    topic_id: str


class MagnetLink(BaseModel):
    uri: str
    description: str = ""


class ContentDraft(BaseModel):
    """Structured result of one detail page, before identity and enrichment."""

    url: str
    title: str
    listing_title: str
    magnets: List[MagnetLink]
    synopsis: Optional[str] = None


class StreamEntry(BaseModel):
    name: str
    infoHash: str
    externalUrl: str
    description: Optional[str] = None
    behaviorHints: dict = Field(default_factory=dict)


class ContentRecord(BaseModel):
    id: str
    type: str
    name: str
    title: str
    cleanedDisplayTitle: str
    originalScrapedTitle: str
    languages: List[str]
    url: Optional[str] = None
    year: Optional[int] = None
    season: Optional[int] = None
    episodes: List[int] = Field(default_factory=list)
    qualities: List[str] = Field(default_factory=list)
    streams: List[StreamEntry] = Field(default_factory=list)

    description: Optional[str] = None
    poster: Optional[str] = None
    background: Optional[str] = None
    logo: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    cast: List[str] = Field(default_factory=list)
    director: List[str] = Field(default_factory=list)
    writer: List[str] = Field(default_factory=list)
    runtime: Optional[str] = None
    imdbRating: Optional[str] = None
    releaseInfo: Optional[str] = None
    released: Optional[str] = None
    trailers: List[dict] = Field(default_factory=list)
    country: Optional[str] = None
    originalLanguage: Optional[str] = None
    tagline: Optional[str] = None
    popularity: Optional[float] = None
    voteCount: Optional[int] = None
    tmdbId: Optional[int] = None
    tmdbTitle: Optional[str] = None
    matchScore: Optional[float] = None
    weakMatch: bool = False


class CatalogEntry(BaseModel):
    id: str
    type: str
    name: str
    poster: Optional[str] = None
    background: Optional[str] = None
    description: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    releaseInfo: Optional[str] = None
    imdbRating: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
