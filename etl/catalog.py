from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from cachetools import TTLCache

from api.config import ENRICHMENT_CACHE_TTL, STREAMING_REGION
from api.core.errors import UpstreamUnavailable
from api.core.models import MAX_CAST, Movie, StreamingFlags
from etl.omdb_client import OMDbClient
from etl.tmdb_client import TMDBClient

logger = logging.getLogger(__name__)

POSTER_BASE = "https://image.tmdb.org/t/p/w500"
YOUTUBE_WATCH = "https://www.youtube.com/watch?v="

# TMDB's fixed movie genre table; /movie/popular only returns ids.
TMDB_GENRES: Dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}

_PROVIDER_KEYWORDS: Dict[str, tuple[str, ...]] = {
    "netflix": ("Netflix",),
    "amazon": ("Prime", "Amazon"),
    "disney": ("Disney",),
}

_UPSTREAM_ERRORS = (httpx.HTTPError, UpstreamUnavailable, ValueError)


@dataclass
class Enrichment:
    imdb_rating: Optional[float] = None
    rotten_tomatoes: Optional[str] = None
    streaming: StreamingFlags = field(default_factory=StreamingFlags)
    cast: Optional[List[str]] = None
    trailer: Optional[str] = None

    def apply(self, movie: Movie) -> Movie:
        return movie.model_copy(
            update={
                "imdb_rating": self.imdb_rating,
                "rotten_tomatoes": self.rotten_tomatoes,
                "streaming": self.streaming,
                "cast": self.cast,
                "trailer": self.trailer,
            }
        )


def _poster_url(poster_path: Optional[str]) -> Optional[str]:
    if not poster_path:
        return None
    return f"{POSTER_BASE}{poster_path}"


def _rating(raw: Any) -> Optional[float]:
    # TMDB reports unrated titles as 0.0
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def movie_from_listing(data: Dict[str, Any]) -> Movie:
    genres = [TMDB_GENRES[gid] for gid in data.get("genre_ids") or [] if gid in TMDB_GENRES]
    return _movie(data, genres)


def movie_from_details(data: Dict[str, Any]) -> Movie:
    genres = [g.get("name") for g in data.get("genres") or [] if g.get("name")]
    return _movie(data, genres)


def _movie(data: Dict[str, Any], genres: List[str]) -> Movie:
    return Movie(
        id=int(data["id"]),
        title=data.get("title") or "",
        poster=_poster_url(data.get("poster_path")),
        overview=data.get("overview"),
        release_date=data.get("release_date") or None,
        genres=genres,
        tmdb_rating=_rating(data.get("vote_average")),
    )


def streaming_flags(data: Dict[str, Any], region: str = STREAMING_REGION) -> StreamingFlags:
    providers = (data.get("watch/providers") or {}).get("results") or {}
    flatrate = (providers.get(region) or {}).get("flatrate") or []
    names = [p.get("provider_name") or "" for p in flatrate]
    flags = {
        key: any(word in name for name in names for word in keywords)
        for key, keywords in _PROVIDER_KEYWORDS.items()
    }
    return StreamingFlags(**flags)


def top_cast(data: Dict[str, Any], limit: int = MAX_CAST) -> Optional[List[str]]:
    cast = (data.get("credits") or {}).get("cast") or []
    names = [c.get("name") for c in cast if c.get("name")][:limit]
    return names or None


def trailer_url(data: Dict[str, Any]) -> Optional[str]:
    videos = (data.get("videos") or {}).get("results") or []
    trailers = [
        v
        for v in videos
        if v.get("site") == "YouTube" and v.get("type") == "Trailer" and v.get("key")
    ]
    if not trailers:
        return None
    trailers.sort(key=lambda v: not v.get("official", False))
    return f"{YOUTUBE_WATCH}{trailers[0]['key']}"


class Catalog:
    """Movie catalog backed by TMDB, with optional OMDb ratings.

    Upstream failures never escape: listings degrade to an empty page and
    enrichment degrades to null fields.
    """

    def __init__(
        self,
        tmdb: TMDBClient,
        omdb: OMDbClient | None = None,
        region: str = STREAMING_REGION,
        cache_ttl: int = ENRICHMENT_CACHE_TTL,
    ):
        self._tmdb = tmdb
        self._omdb = omdb
        self.region = region
        self._cache: TTLCache[int, Enrichment] = TTLCache(maxsize=2000, ttl=cache_ttl)

    async def fetch_popular_page(self, page: int) -> List[Movie]:
        try:
            results = await self._tmdb.popular(page)
        except _UPSTREAM_ERRORS as exc:
            logger.warning("Popular page %s unavailable: %s", page, exc)
            return []
        movies: List[Movie] = []
        for raw in results:
            if raw.get("id") is None:
                continue
            movies.append(movie_from_listing(raw))
        return movies

    async def _ratings(self, imdb_id: Optional[str]) -> Dict[str, Any]:
        if not imdb_id or self._omdb is None:
            return {"imdb_rating": None, "rotten_tomatoes": None}
        try:
            return await self._omdb.ratings(imdb_id)
        except _UPSTREAM_ERRORS as exc:
            logger.debug("OMDb lookup failed for %s: %s", imdb_id, exc)
            return {"imdb_rating": None, "rotten_tomatoes": None}

    async def _enrichment_from_details(self, data: Dict[str, Any]) -> Enrichment:
        imdb_id = (data.get("external_ids") or {}).get("imdb_id") or data.get("imdb_id")
        ratings = await self._ratings(imdb_id)
        return Enrichment(
            imdb_rating=ratings.get("imdb_rating"),
            rotten_tomatoes=ratings.get("rotten_tomatoes"),
            streaming=streaming_flags(data, self.region),
            cast=top_cast(data),
            trailer=trailer_url(data),
        )

    async def fetch_enrichment(self, movie_id: int) -> Enrichment:
        cached = self._cache.get(movie_id)
        if cached is not None:
            return cached
        try:
            data = await self._tmdb.details(movie_id)
        except _UPSTREAM_ERRORS as exc:
            logger.debug("TMDB details failed for %s: %s", movie_id, exc)
            return Enrichment()
        enrichment = await self._enrichment_from_details(data)
        self._cache[movie_id] = enrichment
        return enrichment

    async def fetch_details(self, movie_id: int) -> Optional[Movie]:
        try:
            data = await self._tmdb.details(movie_id)
        except _UPSTREAM_ERRORS as exc:
            logger.warning("Movie %s unavailable: %s", movie_id, exc)
            return None
        if data.get("id") is None:
            return None
        enrichment = await self._enrichment_from_details(data)
        self._cache[movie_id] = enrichment
        return enrichment.apply(movie_from_details(data))

    async def aclose(self) -> None:
        await self._tmdb.aclose()
        if self._omdb is not None:
            await self._omdb.aclose()
