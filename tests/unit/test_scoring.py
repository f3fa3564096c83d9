from __future__ import annotations

import pytest

from api.core.models import Preferences, User
from api.core.scoring import genre_score, rating_score, score_movie
from tests.helpers import make_movie


def _user(weights=None, avg=0.0) -> User:
    return User(
        display_name="A",
        preferences=Preferences(genre_weights=weights or {}, avg_rating_affinity=avg),
    )


def test_full_genre_and_exact_rating_scores_one_hundred():
    user = _user({"Drama": 2.0}, 8.0)
    assert score_movie(user, make_movie(1, ["Drama"], 8.0)) == pytest.approx(100.0)


def test_genre_share_is_proportional():
    user = _user({"Drama": 3.0, "Comedy": 1.0})
    assert genre_score(user, make_movie(1, ["Comedy"])) == pytest.approx(12.5)
    assert genre_score(user, make_movie(2, ["Drama", "Comedy"])) == pytest.approx(50.0)
    assert genre_score(user, make_movie(3, ["Horror"])) == 0.0


def test_empty_profile_scores_zero():
    assert score_movie(_user(), make_movie(1, ["Drama"], 7.0)) == 0.0


def test_rating_term_shrinks_with_distance():
    user = _user(avg=9.5)
    assert rating_score(user, make_movie(1, [], 1.0)) == pytest.approx(7.5)
    user = _user(avg=10.0)
    assert rating_score(user, make_movie(1, [], 0.0)) == pytest.approx(0.0)
    assert rating_score(_user(avg=1.0), make_movie(1, [], None)) == 0.0


def test_heavier_genre_never_lowers_its_contribution():
    movie = make_movie(1, ["Drama"])
    light = _user({"Drama": 1.0, "Comedy": 1.0})
    heavy = _user({"Drama": 4.0, "Comedy": 1.0})
    assert genre_score(heavy, movie) >= genre_score(light, movie)


def test_scoring_has_no_side_effects():
    user = _user({"Drama": 1.0}, 7.0)
    before = user.model_dump()
    score_movie(user, make_movie(1, ["Drama", "Action"], 6.0))
    assert user.model_dump() == before


def test_fourth_genre_contributes_to_score():
    user = _user({"Horror": 1.0})
    movie = make_movie(1, ["Drama", "Comedy", "Action", "Horror"])
    assert genre_score(user, movie) == pytest.approx(50.0)
