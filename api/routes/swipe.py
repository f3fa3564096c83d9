from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, model_validator

from api.core.ledger import record_swipe
from api.core.models import Movie
from api.db.store import StateStore, get_store

router = APIRouter(prefix="/api", tags=["swipe"])


class SwipeIn(BaseModel):
    user_id: str
    movie_id: int
    action: Literal["like", "pass", "watched"]
    movie: Optional[Movie] = None

    @model_validator(mode="after")
    def _snapshot_matches_movie(self) -> "SwipeIn":
        if self.movie is not None and self.movie.id != self.movie_id:
            raise ValueError("movie.id must match movie_id")
        return self


@router.post("/swipe")
def post_swipe(payload: SwipeIn, store: StateStore = Depends(get_store)):
    """Record a like / pass / watched decision."""
    result = record_swipe(
        store,
        payload.user_id,
        payload.movie_id,
        payload.action,
        movie=payload.movie,
    )
    return {
        "success": True,
        "accepted": result.accepted,
        "is_match": result.is_match,
    }
