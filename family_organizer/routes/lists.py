"""List routes"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, Literal
import logging

from ..models.organizer import ListCreate, ListUpdate, ListType, Visibility
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal, build_filter, can_edit, can_view

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize_list(lst: dict, principal: Principal) -> dict:
    owner = db.members.get(Q.id == lst["owner_id"])
    folder = db.folders.get(Q.id == lst["folder_id"]) if lst.get("folder_id") else None
    editable = can_edit(principal, lst)
    return {
        **lst,
        "owner": {
            "id": lst["owner_id"],
            "display_name": owner.get("display_name") if owner else None
        },
        "folder": {
            "id": folder["id"],
            "name": folder.get("name"),
            "color": folder.get("color")
        } if folder else None,
        "task_count": db.tasks.count((Q.list_id == lst["id"]) & (Q.completed == False)),  # noqa: E712
        "is_owner": lst["owner_id"] == principal.member_id,
        "can_edit": editable,
        "can_delete": editable,
    }


def get_visible_list(list_id: str, principal: Principal) -> dict:
    """Fetch a list or raise 404 when it is missing or hidden from the caller"""
    lst = db.lists.get(Q.id == list_id)
    if not lst or not can_view(principal, lst):
        raise HTTPException(status_code=404, detail="List not found or access denied")
    return lst


def _check_folder(folder_id: Optional[str], principal: Principal):
    if not folder_id:
        return
    folder = db.folders.get(Q.id == folder_id)
    if not folder or not can_view(principal, folder):
        raise HTTPException(status_code=400, detail="Folder not found or access denied")


@router.get("")
async def list_lists(
    list_type: Optional[ListType] = None,
    folder_id: Optional[str] = None,
    visibility: Optional[Visibility] = None,
    search: Optional[str] = None,
    order_by: Literal["name", "created_at", "updated_at"] = "updated_at",
    order_direction: Literal["asc", "desc"] = "desc",
    principal: Principal = Depends(get_principal)
):
    """List the lists visible to the caller"""
    db.initialize()

    query = build_filter(principal).to_query()
    if list_type:
        query &= Q.list_type == list_type.value
    if folder_id:
        query &= Q.folder_id == folder_id
    if visibility:
        query &= Q.visibility == visibility.value

    lists = db.lists.search(query)

    if search:
        needle = search.lower()
        lists = [
            lst for lst in lists
            if needle in (lst.get("name") or "").lower()
            or needle in (lst.get("description") or "").lower()
        ]

    if order_by == "name":
        lists.sort(key=lambda x: (x.get("name") or "").lower(), reverse=order_direction == "desc")
    else:
        lists.sort(key=lambda x: x.get(order_by) or "", reverse=order_direction == "desc")

    return {
        "lists": [_serialize_list(lst, principal) for lst in lists],
        "meta": {
            "total": len(lists),
            "user_role": principal.role.value,
            "family_id": principal.family_id
        }
    }


@router.post("", status_code=201)
async def create_list(data: ListCreate, principal: Principal = Depends(get_principal)):
    """Create a list owned by the caller"""
    db.initialize()
    _check_folder(data.folder_id, principal)

    lst = {
        "id": db.generate_id(),
        "family_id": principal.family_id,
        "owner_id": principal.member_id,
        "folder_id": data.folder_id,
        "name": data.name,
        "description": data.description.strip() if data.description and data.description.strip() else None,
        "color": data.color,
        "visibility": data.visibility.value,
        "list_type": data.list_type.value,
        "created_at": db.timestamp(),
        "updated_at": db.timestamp()
    }
    db.lists.insert(lst)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="CREATE",
        entity_type="list",
        entity_id=lst["id"],
        entity_name=lst["name"]
    )

    return _serialize_list(lst, principal)


@router.get("/{list_id}")
async def get_list(list_id: str, principal: Principal = Depends(get_principal)):
    """Get a list with its open tasks"""
    db.initialize()
    lst = get_visible_list(list_id, principal)

    tasks = db.tasks.search((Q.list_id == list_id) & (Q.completed == False))  # noqa: E712
    tasks = sorted(tasks, key=lambda x: x.get("created_at", ""), reverse=True)

    result = _serialize_list(lst, principal)
    result["tasks"] = [
        {
            "id": t["id"],
            "title": t["title"],
            "completed": t["completed"],
            "priority": t.get("priority"),
            "deadline": t.get("deadline"),
            "assignee_id": t.get("assignee_id")
        }
        for t in tasks[:50]
    ]
    return result


@router.patch("/{list_id}")
async def update_list(
    list_id: str,
    data: ListUpdate,
    principal: Principal = Depends(get_principal)
):
    """Update a list (owner or admin)"""
    db.initialize()
    lst = get_visible_list(list_id, principal)

    if not can_edit(principal, lst):
        raise HTTPException(status_code=403, detail="Only list owner or admin can update this list")

    updates = data.model_dump(exclude_unset=True)
    if updates.get("folder_id"):
        _check_folder(updates["folder_id"], principal)
    if "visibility" in updates:
        updates["visibility"] = updates["visibility"].value
    updates["updated_at"] = db.timestamp()
    db.lists.update(updates, Q.id == list_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="list",
        entity_id=list_id,
        entity_name=updates.get("name", lst["name"]),
        metadata={"fields": sorted(k for k in updates if k != "updated_at")}
    )

    return _serialize_list({**lst, **updates}, principal)


@router.delete("/{list_id}")
async def delete_list(list_id: str, principal: Principal = Depends(get_principal)):
    """Delete a list with its tasks and shopping items (owner or admin)"""
    db.initialize()
    lst = get_visible_list(list_id, principal)

    if not can_edit(principal, lst):
        raise HTTPException(status_code=403, detail="Only list owner or admin can delete this list")

    task_ids = [t["id"] for t in db.tasks.search(Q.list_id == list_id)]
    db.subtasks.remove(Q.task_id.one_of(task_ids))
    db.shopping_items.remove(Q.list_id == list_id)
    removed = db.tasks.remove(Q.list_id == list_id)
    db.lists.remove(Q.id == list_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="DELETE",
        entity_type="list",
        entity_id=list_id,
        entity_name=lst["name"],
        metadata={"tasks_removed": len(removed)}
    )
    logger.info(f"List {list_id} deleted by {principal.member_id} ({len(removed)} tasks)")

    return {"success": True, "message": "List deleted successfully"}
