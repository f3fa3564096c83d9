from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

USER_IDS = ("user1", "user2")
MAX_GENRES = 3
MAX_CAST = 5


class StreamingFlags(BaseModel):
    netflix: bool = False
    amazon: bool = False
    disney: bool = False


class Movie(BaseModel):
    id: int
    title: str = ""
    poster: Optional[str] = None
    overview: Optional[str] = None
    release_date: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    tmdb_rating: Optional[float] = None
    imdb_rating: Optional[float] = None
    rotten_tomatoes: Optional[str] = None
    streaming: StreamingFlags = Field(default_factory=StreamingFlags)
    cast: Optional[List[str]] = None
    trailer: Optional[str] = None

    @field_validator("cast")
    @classmethod
    def _trim_cast(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return list(value)[:MAX_CAST]

    def display(self) -> Dict[str, Any]:
        """Serialized form for clients; only the first few genres are shown."""
        data = self.model_dump()
        data["genres"] = data["genres"][:MAX_GENRES]
        return data


class Preferences(BaseModel):
    genre_weights: Dict[str, float] = Field(default_factory=dict)
    avg_rating_affinity: float = 0.0


class User(BaseModel):
    display_name: str
    liked: Set[int] = Field(default_factory=set)
    passed: Set[int] = Field(default_factory=set)
    watched: Set[int] = Field(default_factory=set)
    preferences: Preferences = Field(default_factory=Preferences)

    def interacted(self) -> Set[int]:
        return self.liked | self.passed | self.watched

    def classification(self, movie_id: int) -> Optional[str]:
        """Return which swipe bucket already holds *movie_id*, if any."""
        if movie_id in self.liked:
            return "like"
        if movie_id in self.passed:
            return "pass"
        if movie_id in self.watched:
            return "watched"
        return None


class Match(BaseModel):
    movie_id: int
    movie: Optional[Movie] = None
    created_at: int  # epoch milliseconds

    def display(self) -> Dict[str, Any]:
        data = self.model_dump()
        if self.movie is not None:
            data["movie"] = self.movie.display()
        return data


def _default_users() -> Dict[str, User]:
    return {
        user_id: User(display_name=f"User {idx}")
        for idx, user_id in enumerate(USER_IDS, start=1)
    }


class AppState(BaseModel):
    users: Dict[str, User] = Field(default_factory=_default_users)
    matches: List[Match] = Field(default_factory=list)

    @field_validator("users")
    @classmethod
    def _ensure_both_users(cls, value: Dict[str, User]) -> Dict[str, User]:
        users = {uid: user for uid, user in value.items() if uid in USER_IDS}
        for uid, default in _default_users().items():
            users.setdefault(uid, default)
        return users


def other_user_id(user_id: str) -> str:
    return USER_IDS[1] if user_id == USER_IDS[0] else USER_IDS[0]
