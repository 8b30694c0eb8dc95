"""
Task Subtasks API

Checklist items under a task. Access follows the task's list: a subtask is
visible exactly when its task is.
"""
from fastapi import APIRouter, Depends, HTTPException

from ..models.organizer import MAX_SUBTASKS, SubtaskCreate, SubtaskUpdate
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal
from .tasks import get_visible_task

router = APIRouter()


def _can_modify(task: dict, principal: Principal) -> bool:
    return (
        principal.is_admin
        or task["owner_id"] == principal.member_id
        or task.get("assignee_id") == principal.member_id
    )


def _get_subtask(task_id: str, subtask_id: str) -> dict:
    subtask = db.subtasks.get((Q.id == subtask_id) & (Q.task_id == task_id))
    if not subtask:
        raise HTTPException(status_code=404, detail="Subtask not found or access denied")
    return subtask


@router.get("/{task_id}/subtasks")
async def get_subtasks(task_id: str, principal: Principal = Depends(get_principal)):
    """Get the subtasks of a task, oldest first."""
    db.initialize()
    get_visible_task(task_id, principal)

    subtasks = db.subtasks.search(Q.task_id == task_id)
    return sorted(subtasks, key=lambda x: x.get("created_at", ""))


@router.post("/{task_id}/subtasks", status_code=201)
async def create_subtask(
    task_id: str,
    data: SubtaskCreate,
    principal: Principal = Depends(get_principal)
):
    """Add a subtask (task owner, assignee or admin)."""
    db.initialize()
    task, _ = get_visible_task(task_id, principal)

    if not _can_modify(task, principal):
        raise HTTPException(status_code=403, detail="Not authorized to modify this task")

    if db.subtasks.count(Q.task_id == task_id) >= MAX_SUBTASKS:
        raise HTTPException(status_code=400, detail=f"Maximum {MAX_SUBTASKS} subtasks allowed per task")

    subtask = {
        "id": db.generate_id(),
        "task_id": task_id,
        "family_id": principal.family_id,
        "title": data.title,
        "completed": data.completed,
        "completed_at": db.timestamp() if data.completed else None,
        "created_at": db.timestamp(),
        "updated_at": db.timestamp()
    }
    db.subtasks.insert(subtask)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="task",
        entity_id=task_id,
        entity_name=task["title"],
        metadata={"subtask_added": subtask["id"]}
    )

    return subtask


@router.get("/{task_id}/subtasks/{subtask_id}")
async def get_subtask(task_id: str, subtask_id: str, principal: Principal = Depends(get_principal)):
    """Get a single subtask."""
    db.initialize()
    get_visible_task(task_id, principal)
    return _get_subtask(task_id, subtask_id)


@router.patch("/{task_id}/subtasks/{subtask_id}")
async def update_subtask(
    task_id: str,
    subtask_id: str,
    data: SubtaskUpdate,
    principal: Principal = Depends(get_principal)
):
    """Rename or tick off a subtask (task owner, assignee or admin)."""
    db.initialize()
    task, _ = get_visible_task(task_id, principal)
    subtask = _get_subtask(task_id, subtask_id)

    if not _can_modify(task, principal):
        raise HTTPException(status_code=403, detail="Not authorized to modify this subtask")

    updates = data.model_dump(exclude_unset=True)
    if "completed" in updates and updates["completed"] != subtask.get("completed"):
        updates["completed_at"] = db.timestamp() if updates["completed"] else None
    updates["updated_at"] = db.timestamp()
    db.subtasks.update(updates, Q.id == subtask_id)

    return {**subtask, **updates}


@router.delete("/{task_id}/subtasks/{subtask_id}")
async def delete_subtask(task_id: str, subtask_id: str, principal: Principal = Depends(get_principal)):
    """Delete a subtask (task owner or admin)."""
    db.initialize()
    task, _ = get_visible_task(task_id, principal)
    subtask = _get_subtask(task_id, subtask_id)

    if not (principal.is_admin or task["owner_id"] == principal.member_id):
        raise HTTPException(status_code=403, detail="Not authorized to delete this subtask")

    db.subtasks.remove(Q.id == subtask_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="task",
        entity_id=task_id,
        entity_name=task["title"],
        metadata={"subtask_removed": subtask["id"]}
    )

    return {"deleted": True}
