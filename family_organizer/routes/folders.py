"""Folder routes"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from ..models.organizer import FolderCreate, FolderUpdate
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal, build_filter, can_edit, can_view

logger = logging.getLogger(__name__)

router = APIRouter()


def _owner_summary(owner_id: str) -> dict:
    member = db.members.get(Q.id == owner_id)
    return {
        "id": owner_id,
        "display_name": member.get("display_name") if member else None
    }


def _serialize_folder(folder: dict, principal: Principal) -> dict:
    return {
        **folder,
        "owner": _owner_summary(folder["owner_id"]),
        "list_count": db.lists.count(Q.folder_id == folder["id"]),
        "is_owner": folder["owner_id"] == principal.member_id,
        "can_edit": can_edit(principal, folder),
    }


def _get_visible_folder(folder_id: str, principal: Principal) -> dict:
    folder = db.folders.get(Q.id == folder_id)
    if not folder or not can_view(principal, folder):
        raise HTTPException(status_code=404, detail="Folder not found or access denied")
    return folder


@router.get("")
async def list_folders(principal: Principal = Depends(get_principal)):
    """List folders visible to the caller, sorted by name"""
    db.initialize()
    folders = db.folders.search(build_filter(principal).to_query())
    folders = sorted(folders, key=lambda x: (x.get("name") or "").lower())
    return [_serialize_folder(f, principal) for f in folders]


@router.post("", status_code=201)
async def create_folder(data: FolderCreate, principal: Principal = Depends(get_principal)):
    """Create a folder owned by the caller"""
    db.initialize()
    folder = {
        "id": db.generate_id(),
        "family_id": principal.family_id,
        "owner_id": principal.member_id,
        "name": data.name,
        "color": data.color,
        "visibility": data.visibility.value,
        "created_at": db.timestamp(),
        "updated_at": db.timestamp()
    }
    db.folders.insert(folder)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="CREATE",
        entity_type="folder",
        entity_id=folder["id"],
        entity_name=folder["name"]
    )

    return _serialize_folder(folder, principal)


@router.get("/{folder_id}")
async def get_folder(folder_id: str, principal: Principal = Depends(get_principal)):
    """Get a folder with the lists inside it the caller can see"""
    db.initialize()
    folder = _get_visible_folder(folder_id, principal)

    lists = db.lists.search(
        (Q.folder_id == folder_id) & build_filter(principal).to_query()
    )
    result = _serialize_folder(folder, principal)
    result["lists"] = sorted(lists, key=lambda x: x.get("updated_at", ""), reverse=True)
    return result


@router.patch("/{folder_id}")
async def update_folder(
    folder_id: str,
    data: FolderUpdate,
    principal: Principal = Depends(get_principal)
):
    """Update a folder (owner or admin)"""
    db.initialize()
    folder = _get_visible_folder(folder_id, principal)

    if not can_edit(principal, folder):
        raise HTTPException(status_code=403, detail="Only folder owner or admin can update this folder")

    updates = data.model_dump(exclude_unset=True)
    # Convert visibility enum to string value
    if "visibility" in updates:
        updates["visibility"] = updates["visibility"].value
    updates["updated_at"] = db.timestamp()
    db.folders.update(updates, Q.id == folder_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="folder",
        entity_id=folder_id,
        entity_name=updates.get("name", folder["name"]),
        metadata={"fields": sorted(k for k in updates if k != "updated_at")}
    )

    return _serialize_folder({**folder, **updates}, principal)


@router.delete("/{folder_id}")
async def delete_folder(folder_id: str, principal: Principal = Depends(get_principal)):
    """Delete a folder; its lists are kept and moved out of it"""
    db.initialize()
    folder = _get_visible_folder(folder_id, principal)

    if not can_edit(principal, folder):
        raise HTTPException(status_code=403, detail="Only folder owner or admin can delete this folder")

    db.lists.update({"folder_id": None, "updated_at": db.timestamp()}, Q.folder_id == folder_id)
    db.folders.remove(Q.id == folder_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="DELETE",
        entity_type="folder",
        entity_id=folder_id,
        entity_name=folder["name"]
    )
    logger.info(f"Folder {folder_id} deleted by {principal.member_id}")

    return {"deleted": True}
