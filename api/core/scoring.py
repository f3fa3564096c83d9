from __future__ import annotations

from api.core.models import Movie, User

GENRE_SCALE = 50.0
RATING_SCALE = 5.0
RATING_CEILING = 10.0


def genre_score(user: User, movie: Movie) -> float:
    weights = user.preferences.genre_weights
    if not movie.genres or not weights:
        return 0.0
    total = sum(weights.values())
    if total <= 0:
        return 0.0
    score = 0.0
    for genre in movie.genres:
        weight = weights.get(genre)
        if weight:
            score += weight / total * GENRE_SCALE
    return score


def rating_score(user: User, movie: Movie) -> float:
    affinity = user.preferences.avg_rating_affinity
    if movie.tmdb_rating is None or not affinity:
        return 0.0
    return (RATING_CEILING - abs(movie.tmdb_rating - affinity)) * RATING_SCALE


def score_movie(user: User, movie: Movie) -> float:
    """Desirability of *movie* for *user*; only comparable within one feed."""
    return genre_score(user, movie) + rating_score(user, movie)
