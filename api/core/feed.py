from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import List

from api.config import CATALOG_CONCURRENCY, FEED_SIZE, UPSTREAM_PAGE_COUNT
from api.core.errors import InvalidUser
from api.core.models import Movie, USER_IDS
from api.core.scoring import score_movie

logger = logging.getLogger(__name__)

ROTATION_PERIOD = 10
PAGE_STRIDE = 10


def rotation_offset(day: date) -> int:
    return day.timetuple().tm_yday % ROTATION_PERIOD + 1


def upstream_page(
    page: int, day: date, page_count: int = UPSTREAM_PAGE_COUNT
) -> int:
    """Map a logical feed page onto a catalog page for the given day.

    Both users get the same upstream page for the same logical page on the
    same day; the mapping shifts by one rotation step per day.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    return ((page - 1) * PAGE_STRIDE + rotation_offset(day)) % page_count + 1


async def _enrich(catalog, movies: List[Movie]) -> List[Movie]:
    sem = asyncio.Semaphore(max(CATALOG_CONCURRENCY, 1))

    async def _worker(movie: Movie):
        async with sem:
            return await catalog.fetch_enrichment(movie.id)

    tasks = [asyncio.create_task(_worker(m)) for m in movies]
    responses = await asyncio.gather(*tasks, return_exceptions=True)

    enriched: List[Movie] = []
    for movie, resp in zip(movies, responses):
        if isinstance(resp, Exception):
            logger.warning("Enrichment failed for movie %s: %s", movie.id, resp)
            enriched.append(movie)
            continue
        enriched.append(resp.apply(movie))
    return enriched


async def select_feed(
    store,
    catalog,
    user_id: str,
    page: int = 1,
    today: date | None = None,
    limit: int = FEED_SIZE,
) -> List[Movie]:
    if user_id not in USER_IDS:
        raise InvalidUser(user_id)
    today = today or date.today()
    target = upstream_page(page, today)

    # Snapshot before any await so concurrent swipes can't change the filter mid-flight.
    user = store.snapshot().users[user_id]
    seen = user.interacted()

    raw = await catalog.fetch_popular_page(target)
    fresh = [m for m in raw if m.id not in seen][:limit]
    logger.debug(
        "Feed for %s page %s -> upstream %s: %d raw, %d fresh",
        user_id,
        page,
        target,
        len(raw),
        len(fresh),
    )

    movies = await _enrich(catalog, fresh)
    if user.liked:
        movies = sorted(movies, key=lambda m: score_movie(user, m), reverse=True)
    return movies
