from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.core.errors import InvalidUser
from api.core.feed import select_feed, upstream_page
from api.core.models import USER_IDS
from api.db.store import StateStore, get_store

router = APIRouter(prefix="/api", tags=["movies"])
logger = logging.getLogger(__name__)


def get_catalog(request: Request):
    return getattr(request.app.state, "catalog", None)


@router.get("/movies")
async def get_movies(
    user_id: str = Query("user1", description="Either 'user1' or 'user2'"),
    page: int = Query(1, ge=1, description="Logical feed page"),
    store: StateStore = Depends(get_store),
    catalog=Depends(get_catalog),
):
    """Ranked, unseen movies for one user."""
    if user_id not in USER_IDS:
        raise InvalidUser(user_id)
    today = date.today()
    if catalog is None:
        logger.warning("Catalog is not configured; returning an empty feed.")
        movies = []
    else:
        movies = await select_feed(store, catalog, user_id, page, today=today)
    return {
        "success": True,
        "page": page,
        "upstream_page": upstream_page(page, today),
        "movies": [m.display() for m in movies],
    }


@router.get("/movie")
async def get_movie(
    id: int = Query(..., description="TMDB movie id"),
    catalog=Depends(get_catalog),
):
    movie = await catalog.fetch_details(id) if catalog is not None else None
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return {"success": True, "movie": movie.display()}
