from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from api.core.errors import InvalidUser
from api.core.matches import list_active_matches, now_ms, poll_new_matches
from api.core.models import USER_IDS
from api.db.store import StateStore, get_store

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("")
def get_matches(store: StateStore = Depends(get_store)):
    matches = list_active_matches(store)
    return {"success": True, "matches": [m.display() for m in matches]}


@router.get("/poll")
def poll_matches(
    user_id: str = Query(..., description="Polling user"),
    since: int = Query(0, ge=0, description="Epoch milliseconds of the last poll"),
    store: StateStore = Depends(get_store),
):
    """Matches created after *since*; never purges."""
    if user_id not in USER_IDS:
        raise InvalidUser(user_id)
    now = now_ms()
    matches = poll_new_matches(store, since, now)
    return {
        "success": True,
        "matches": [m.display() for m in matches],
        "server_time": now,
    }
