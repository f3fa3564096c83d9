from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from api.core.errors import InvalidUser
from api.core.matches import add_match, find_live_match, now_ms
from api.core.models import Movie, USER_IDS, other_user_id
from api.core.preferences import EVENT_TYPE_WEIGHTS, update_preferences

logger = logging.getLogger(__name__)

ACTIONS = ("like", "pass", "watched")
_BUCKETS = {"like": "liked", "pass": "passed", "watched": "watched"}


@dataclass
class SwipeResult:
    accepted: bool
    is_match: bool


def record_swipe(
    store,
    user_id: str,
    movie_id: int,
    action: str,
    movie: Optional[Movie] = None,
    now: int | None = None,
) -> SwipeResult:
    """Record one swipe and report whether it completed a match.

    A movie lands in exactly one of liked / passed / watched. Repeating the
    same action is a no-op; a different action for an already classified
    movie is refused with ``accepted=False``. Repeated likes re-run the match
    check, which lets a movie match again once its previous match expired.
    """
    if user_id not in USER_IDS:
        raise InvalidUser(user_id)
    if action not in ACTIONS:
        raise ValueError(f"Unknown swipe action: {action!r}")
    if movie is not None and movie.id != movie_id:
        raise ValueError(
            f"Movie snapshot id {movie.id} does not match swiped movie {movie_id}"
        )
    now = now_ms() if now is None else now

    with store.transaction() as state:
        user = state.users[user_id]
        existing = user.classification(movie_id)
        accepted = True

        if existing is None:
            getattr(user, _BUCKETS[action]).add(movie_id)
            weight = EVENT_TYPE_WEIGHTS.get(action)
            if weight is not None and movie is not None:
                update_preferences(user, movie, weight)
            logger.info("%s swiped %s on movie %s", user_id, action, movie_id)
        elif existing != action:
            logger.info(
                "%s tried to reclassify movie %s from %s to %s; ignored",
                user_id,
                movie_id,
                existing,
                action,
            )
            accepted = False

        is_match = False
        if action == "like" and movie_id in user.liked:
            other = state.users[other_user_id(user_id)]
            if movie_id in other.liked and find_live_match(state, movie_id, now) is None:
                add_match(state, movie_id, movie, now)
                is_match = True

    return SwipeResult(accepted=accepted, is_match=is_match)
