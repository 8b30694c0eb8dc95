"""Activity log aggregation"""

from collections import Counter
from typing import Dict, Iterable, List


def summarize_activity(activities: Iterable[dict], members: Dict[str, dict]) -> dict:
    """
    Summarize activity entries for a family.

    Counts entries by action, entity type and user, and lists the five most
    active users and the ten most recent entries.
    """
    entries = sorted(activities, key=lambda x: x.get("created_at", ""), reverse=True)

    by_action = Counter(entry["action"] for entry in entries)
    by_entity_type = Counter(entry["entity_type"] for entry in entries)
    by_user_counts = Counter(entry["user_id"] for entry in entries)

    by_user = {
        user_id: {
            "name": (members.get(user_id) or {}).get("display_name") or "Unknown User",
            "count": count
        }
        for user_id, count in by_user_counts.items()
    }

    most_active: List[dict] = [
        {"user_id": user_id, "display_name": by_user[user_id]["name"], "count": count}
        for user_id, count in by_user_counts.most_common(5)
    ]

    return {
        "total_activities": len(entries),
        "by_action": dict(by_action),
        "by_entity_type": dict(by_entity_type),
        "by_user": by_user,
        "most_active_users": most_active,
        "recent_activities": entries[:10]
    }
