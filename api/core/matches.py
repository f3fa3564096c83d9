"""Match creation and lazy expiry.

Matches are purged only when the full list is read through
:func:`list_active_matches`. Polling never mutates storage, so its results do
not depend on how often clients poll.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from api.config import MATCH_TTL_HOURS
from api.core.models import AppState, Match, Movie

logger = logging.getLogger(__name__)

MATCH_TTL_MS = int(MATCH_TTL_HOURS * 60 * 60 * 1000)


def now_ms() -> int:
    return int(time.time() * 1000)


def is_expired(match: Match, now: int, ttl_ms: int = MATCH_TTL_MS) -> bool:
    return now - match.created_at > ttl_ms


def find_live_match(
    state: AppState, movie_id: int, now: int, ttl_ms: int = MATCH_TTL_MS
) -> Optional[Match]:
    for match in state.matches:
        if match.movie_id == movie_id and not is_expired(match, now, ttl_ms):
            return match
    return None


def add_match(
    state: AppState, movie_id: int, movie: Optional[Movie], now: int
) -> Match:
    """Append a new match, dropping any expired entry for the same movie."""
    state.matches = [m for m in state.matches if m.movie_id != movie_id]
    match = Match(movie_id=movie_id, movie=movie, created_at=now)
    state.matches.append(match)
    logger.info("New match for movie %s", movie_id)
    return match


def list_active_matches(store, now: int | None = None) -> List[Match]:
    now = now_ms() if now is None else now
    snapshot = store.snapshot()
    if not any(is_expired(m, now) for m in snapshot.matches):
        return snapshot.matches

    with store.transaction() as state:
        before = len(state.matches)
        state.matches = [m for m in state.matches if not is_expired(m, now)]
        logger.info("Purged %d expired matches", before - len(state.matches))
        return [m.model_copy(deep=True) for m in state.matches]


def poll_new_matches(store, since: int, now: int | None = None) -> List[Match]:
    now = now_ms() if now is None else now
    snapshot = store.snapshot()
    return [
        m
        for m in snapshot.matches
        if since < m.created_at <= now and not is_expired(m, now)
    ]
