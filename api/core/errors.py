from __future__ import annotations


class InvalidUser(LookupError):
    """Raised when a user id is not one of the two known users."""

    def __init__(self, user_id: str):
        super().__init__(f"Invalid user: {user_id!r}")
        self.user_id = user_id


class UpstreamUnavailable(RuntimeError):
    pass


class PersistenceFailure(RuntimeError):
    pass
