"""Activity log routes"""

from fastapi import APIRouter, Depends, Query
from datetime import datetime, timedelta
from typing import Optional, Literal

from ..services.activity import summarize_activity
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal

router = APIRouter()

EntityType = Literal["task", "list", "folder", "family", "user"]


@router.get("")
async def get_family_activity(
    entity_type: Optional[EntityType] = None,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal)
):
    """Get the activity log for the caller's family"""
    db.initialize()

    query = Q.family_id == principal.family_id
    if entity_type:
        query &= Q.entity_type == entity_type
    if entity_id:
        query &= Q.entity_id == entity_id
    if user_id:
        query &= Q.user_id == user_id

    activities = db.activity.search(query)
    activities = sorted(activities, key=lambda x: x.get("created_at", ""), reverse=True)

    members = {m["id"]: m for m in db.members.search(Q.family_id == principal.family_id)}

    enriched = []
    for activity in activities[offset:offset + limit]:
        member = members.get(activity.get("user_id"))
        enriched.append({
            **activity,
            "user": {
                "id": activity.get("user_id"),
                "display_name": member.get("display_name") if member else None
            }
        })

    return {
        "activities": enriched,
        "total": len(activities),
        "has_more": len(activities) > offset + limit
    }


@router.get("/summary")
async def get_activity_summary(
    days: int = Query(default=7, ge=1, le=365),
    principal: Principal = Depends(get_principal)
):
    """Summarize recent family activity"""
    db.initialize()

    since = (datetime.utcnow() - timedelta(days=days)).isoformat()
    activities = db.activity.search(
        (Q.family_id == principal.family_id) & (Q.created_at >= since)
    )
    members = {m["id"]: m for m in db.members.search(Q.family_id == principal.family_id)}

    return {"days": days, **summarize_activity(activities, members)}
