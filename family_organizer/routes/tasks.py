"""Task routes"""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone
from typing import Optional, Literal, Dict, List
import logging

from ..config import settings
from ..models.organizer import TaskCreate, TaskUpdate, Priority
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal, build_filter, can_view

logger = logging.getLogger(__name__)

router = APIRouter()

PRIORITY_ORDER = {p.value: i for i, p in enumerate(Priority)}


def parse_deadline(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime into naive UTC; None when absent"""
    if not value:
        return None
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _is_overdue(task: dict, now: datetime) -> bool:
    if task.get("completed"):
        return False
    try:
        deadline = parse_deadline(task.get("deadline"))
    except ValueError:
        return False
    return deadline is not None and deadline < now


def visible_lists(principal: Principal) -> Dict[str, dict]:
    """Lists the caller can see, keyed by id"""
    return {lst["id"]: lst for lst in db.lists.search(build_filter(principal).to_query())}


def _serialize_task(task: dict, lst: dict, now: datetime) -> dict:
    assignee = db.members.get(Q.id == task["assignee_id"]) if task.get("assignee_id") else None
    return {
        **task,
        "list": {
            "id": lst["id"],
            "name": lst.get("name"),
            "color": lst.get("color"),
            "list_type": lst.get("list_type"),
            "visibility": lst.get("visibility")
        },
        "assignee": {
            "id": assignee["id"],
            "display_name": assignee.get("display_name")
        } if assignee else None,
        "subtask_count": db.subtasks.count(Q.task_id == task["id"]),
        "is_overdue": _is_overdue(task, now)
    }


def get_visible_task(task_id: str, principal: Principal):
    """Fetch a task and its list, 404 when either is hidden from the caller"""
    task = db.tasks.get(Q.id == task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    lst = db.lists.get(Q.id == task["list_id"])
    if not lst or not can_view(principal, lst):
        raise HTTPException(status_code=404, detail="Task not found")
    return task, lst


def _check_assignee(assignee_id: Optional[str], principal: Principal):
    if not assignee_id:
        return
    assignee = db.members.get((Q.id == assignee_id) & (Q.family_id == principal.family_id))
    if not assignee:
        raise HTTPException(status_code=400, detail="Assignee not found in family")


def _validated_deadline(value: Optional[str]) -> Optional[str]:
    try:
        parsed = parse_deadline(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid deadline format")
    return parsed.isoformat() if parsed else None


def _notify_assignee(task: dict, principal: Principal):
    assignee_id = task.get("assignee_id")
    if not assignee_id or assignee_id == principal.member_id:
        return
    db.notify(
        family_id=principal.family_id,
        user_id=assignee_id,
        type="TASK_ASSIGNED",
        title="New task assigned",
        message=f"You have been assigned: {task['title']}",
        entity_type="task",
        entity_id=task["id"]
    )


def _record_completion(task: dict, principal: Principal):
    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="COMPLETE",
        entity_type="task",
        entity_id=task["id"],
        entity_name=task["title"]
    )
    if task["owner_id"] != principal.member_id:
        db.notify(
            family_id=principal.family_id,
            user_id=task["owner_id"],
            type="TASK_COMPLETED",
            title="Task completed",
            message=f"{task['title']} was marked complete",
            entity_type="task",
            entity_id=task["id"]
        )


def _sort_tasks(tasks: List[dict], sort_by: str, sort_order: str) -> List[dict]:
    reverse = sort_order == "desc"
    if sort_by == "priority":
        return sorted(tasks, key=lambda t: PRIORITY_ORDER.get(t.get("priority"), -1), reverse=reverse)
    if sort_by == "title":
        return sorted(tasks, key=lambda t: (t.get("title") or "").lower(), reverse=reverse)
    if sort_by == "deadline":
        # Tasks without a deadline always go last
        dated = [t for t in tasks if t.get("deadline")]
        undated = [t for t in tasks if not t.get("deadline")]
        return sorted(dated, key=lambda t: t["deadline"], reverse=reverse) + undated
    return sorted(tasks, key=lambda t: t.get(sort_by) or "", reverse=reverse)


@router.get("")
async def list_tasks(
    list_id: Optional[str] = None,
    assigned_to: Optional[str] = None,
    completed: Optional[bool] = None,
    priority: Optional[Priority] = None,
    has_deadline: Optional[bool] = None,
    overdue: Optional[bool] = None,
    search: Optional[str] = None,
    tags: Optional[str] = None,
    sort_by: Literal["created_at", "updated_at", "deadline", "priority", "title"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    limit: int = settings.tasks_default_limit,
    offset: int = 0,
    principal: Principal = Depends(get_principal)
):
    """List tasks in lists visible to the caller"""
    if limit < 1 or offset < 0:
        raise HTTPException(status_code=400, detail="Invalid pagination parameters")
    if limit > settings.tasks_max_limit:
        raise HTTPException(status_code=400, detail=f"Limit cannot exceed {settings.tasks_max_limit}")

    db.initialize()
    now = datetime.utcnow()
    lists = visible_lists(principal)

    query = (Q.family_id == principal.family_id) & Q.list_id.one_of(list(lists))
    if list_id:
        query &= Q.list_id == list_id
    if assigned_to:
        query &= Q.assignee_id == assigned_to
    if completed is not None:
        query &= Q.completed == completed
    if priority:
        query &= Q.priority == priority.value

    tasks = db.tasks.search(query)

    if has_deadline is True:
        tasks = [t for t in tasks if t.get("deadline")]
    elif has_deadline is False:
        tasks = [t for t in tasks if not t.get("deadline")]

    if overdue:
        tasks = [t for t in tasks if _is_overdue(t, now)]

    if search:
        needle = search.lower()
        tasks = [
            t for t in tasks
            if needle in (t.get("title") or "").lower()
            or needle in (t.get("description") or "").lower()
        ]

    if tags:
        tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()]
        tasks = [t for t in tasks if any(tag in t.get("tags", []) for tag in tag_list)]

    tasks = _sort_tasks(tasks, sort_by, sort_order)
    total = len(tasks)
    page = tasks[offset:offset + limit]

    return {
        "tasks": [_serialize_task(t, lists[t["list_id"]], now) for t in page],
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": offset + limit < total
        }
    }


@router.post("", status_code=201)
async def create_task(data: TaskCreate, principal: Principal = Depends(get_principal)):
    """Create a task in a list the caller can see"""
    db.initialize()

    lst = db.lists.get(Q.id == data.list_id)
    if not lst or not can_view(principal, lst):
        raise HTTPException(status_code=404, detail="List not found or access denied")

    _check_assignee(data.assignee_id, principal)
    deadline = _validated_deadline(data.deadline)

    title = data.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="Task title is required")

    task = {
        "id": db.generate_id(),
        "family_id": principal.family_id,
        "list_id": lst["id"],
        "owner_id": principal.member_id,
        "assignee_id": data.assignee_id,
        "title": title,
        "description": data.description.strip() if data.description and data.description.strip() else None,
        "priority": data.priority.value,
        "deadline": deadline,
        "tags": data.tags,
        "completed": False,
        "completed_at": None,
        "created_at": db.timestamp(),
        "updated_at": db.timestamp()
    }
    db.tasks.insert(task)
    db.lists.update({"updated_at": db.timestamp()}, Q.id == lst["id"])

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="CREATE",
        entity_type="task",
        entity_id=task["id"],
        entity_name=task["title"],
        metadata={"list_id": lst["id"]}
    )
    _notify_assignee(task, principal)

    return _serialize_task(task, lst, datetime.utcnow())


@router.get("/{task_id}")
async def get_task(task_id: str, principal: Principal = Depends(get_principal)):
    """Get a single task"""
    db.initialize()
    task, lst = get_visible_task(task_id, principal)
    return _serialize_task(task, lst, datetime.utcnow())


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    data: TaskUpdate,
    principal: Principal = Depends(get_principal)
):
    """Update a task; any member who can see its list may edit it"""
    db.initialize()
    task, lst = get_visible_task(task_id, principal)

    updates = data.model_dump(exclude_unset=True)

    if "list_id" in updates and updates["list_id"] != task["list_id"]:
        target = db.lists.get(Q.id == updates["list_id"])
        if not target or not can_view(principal, target):
            raise HTTPException(status_code=400, detail="Target list not found or access denied")
        lst = target

    if "title" in updates:
        updates["title"] = updates["title"].strip()
        if not updates["title"]:
            raise HTTPException(status_code=400, detail="Task title cannot be empty")
    if "assignee_id" in updates:
        _check_assignee(updates["assignee_id"], principal)
    if "deadline" in updates:
        updates["deadline"] = _validated_deadline(updates["deadline"])
    if "priority" in updates:
        updates["priority"] = updates["priority"].value

    newly_completed = updates.get("completed") is True and not task.get("completed")
    if "completed" in updates:
        updates["completed_at"] = db.timestamp() if updates["completed"] else None

    updates["updated_at"] = db.timestamp()
    db.tasks.update(updates, Q.id == task_id)
    updated = {**task, **updates}

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="task",
        entity_id=task_id,
        entity_name=updated["title"],
        metadata={"fields": sorted(k for k in updates if k not in ("updated_at", "completed_at"))}
    )
    if updates.get("assignee_id") and updates["assignee_id"] != task.get("assignee_id"):
        _notify_assignee(updated, principal)
    if newly_completed:
        _record_completion(updated, principal)

    return _serialize_task(updated, lst, datetime.utcnow())


@router.post("/{task_id}/complete")
async def toggle_task_completion(task_id: str, principal: Principal = Depends(get_principal)):
    """Toggle a task between open and completed"""
    db.initialize()
    task, lst = get_visible_task(task_id, principal)

    completed = not task.get("completed", False)
    updates = {
        "completed": completed,
        "completed_at": db.timestamp() if completed else None,
        "updated_at": db.timestamp()
    }
    db.tasks.update(updates, Q.id == task_id)
    updated = {**task, **updates}

    if completed:
        _record_completion(updated, principal)

    return _serialize_task(updated, lst, datetime.utcnow())


@router.delete("/{task_id}")
async def delete_task(task_id: str, principal: Principal = Depends(get_principal)):
    """Delete a task (task owner, list owner or admin)"""
    db.initialize()
    task, lst = get_visible_task(task_id, principal)

    allowed = (
        principal.is_admin
        or task["owner_id"] == principal.member_id
        or lst["owner_id"] == principal.member_id
    )
    if not allowed:
        raise HTTPException(status_code=403, detail="Only task owner, list owner or admin can delete this task")

    db.tasks.remove(Q.id == task_id)
    db.subtasks.remove(Q.task_id == task_id)
    db.notifications.remove((Q.entity_type == "task") & (Q.entity_id == task_id))

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="DELETE",
        entity_type="task",
        entity_id=task_id,
        entity_name=task["title"]
    )

    return {"deleted": True}
