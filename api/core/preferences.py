from __future__ import annotations

import logging
import math

from api.core.models import Movie, User

logger = logging.getLogger(__name__)

EVENT_TYPE_WEIGHTS: dict[str, float] = {
    "like": 1.0,
    "watched": 0.5,
}


def weighted_count(user: User) -> float:
    return len(user.liked) + EVENT_TYPE_WEIGHTS["watched"] * len(user.watched)


def update_preferences(user: User, movie: Movie, weight: float) -> None:
    """Fold one like / watched event into the user's preference profile.

    Must be called after the movie id has been added to the matching swipe
    set, so that the weighted count already includes this event.
    """
    prefs = user.preferences
    for genre in movie.genres:
        prefs.genre_weights[genre] = prefs.genre_weights.get(genre, 0.0) + weight

    rating = movie.tmdb_rating
    if rating is None or not math.isfinite(rating):
        return

    count = weighted_count(user)
    if count <= 0:
        logger.debug(
            "Skipping rating affinity update for movie %s: weighted count is %s",
            movie.id,
            count,
        )
        return

    prefs.avg_rating_affinity = (
        prefs.avg_rating_affinity * (count - weight) + rating * weight
    ) / count
