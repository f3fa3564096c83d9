from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from api.core.errors import InvalidUser
from api.core.models import USER_IDS
from api.db.store import StateStore, get_store

router = APIRouter(prefix="/api/user", tags=["user"])
logger = logging.getLogger(__name__)


class RenameIn(BaseModel):
    user_id: str
    name: str = Field(..., min_length=1, max_length=64)


@router.get("")
def get_user(
    user_id: str = Query(..., description="Either 'user1' or 'user2'"),
    store: StateStore = Depends(get_store),
):
    if user_id not in USER_IDS:
        raise InvalidUser(user_id)
    user = store.snapshot().users[user_id]
    return {"success": True, "user": user.model_dump(mode="json")}


@router.post("")
def post_user(payload: RenameIn, store: StateStore = Depends(get_store)):
    if payload.user_id not in USER_IDS:
        raise InvalidUser(payload.user_id)
    name = payload.name.strip() or payload.name
    with store.transaction() as state:
        state.users[payload.user_id].display_name = name
    logger.info("%s renamed to %r", payload.user_id, name)
    return {"success": True}
