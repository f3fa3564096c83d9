from __future__ import annotations

from typing import Dict, List, Sequence

from api.core.models import Movie, StreamingFlags
from etl.catalog import Enrichment

HOUR_MS = 60 * 60 * 1000


def make_movie(
    movie_id: int,
    genres: Sequence[str] | None = None,
    rating: float | None = None,
    title: str | None = None,
) -> Movie:
    return Movie(
        id=movie_id,
        title=title or f"Movie {movie_id}",
        genres=list(genres or []),
        tmdb_rating=rating,
    )


class FakeCatalog:
    def __init__(
        self,
        pages: Dict[int, List[Movie]] | None = None,
        enrichments: Dict[int, Enrichment] | None = None,
        failing_ids: Sequence[int] = (),
    ):
        self.pages = pages or {}
        self.enrichments = enrichments or {}
        self.failing_ids = set(failing_ids)
        self.page_calls: List[int] = []
        self.enrich_calls: List[int] = []
        self.closed = False

    async def fetch_popular_page(self, page: int) -> List[Movie]:
        self.page_calls.append(page)
        return [m.model_copy() for m in self.pages.get(page, [])]

    async def fetch_enrichment(self, movie_id: int) -> Enrichment:
        self.enrich_calls.append(movie_id)
        if movie_id in self.failing_ids:
            raise RuntimeError("boom")
        return self.enrichments.get(
            movie_id, Enrichment(streaming=StreamingFlags(netflix=True))
        )

    async def fetch_details(self, movie_id: int) -> Movie | None:
        for movies in self.pages.values():
            for movie in movies:
                if movie.id == movie_id:
                    return movie
        return None

    async def aclose(self) -> None:
        self.closed = True
