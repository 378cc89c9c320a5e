"""Committed profile and review activity for the caller."""

from fastapi import APIRouter, Depends, Query

from web.auth import get_current_user
from web.deps import get_profile_store
from web.user_store import get_event_counts, get_recent_activity

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
async def get_profile(user: dict = Depends(get_current_user)):
    return get_profile_store().get_profile(user["id"])


@router.get("/activity")
async def get_activity(
    days: int = Query(default=30, ge=1, le=365),
    limit: int = Query(default=20, ge=1, le=200),
    user: dict = Depends(get_current_user),
):
    return {
        "counts": get_event_counts(days=days, user_id=user["id"]),
        "recent": get_recent_activity(user["id"], limit=limit),
    }
