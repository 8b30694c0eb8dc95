"""Member routes"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from ..models.member import MemberCreate, MemberUpdate
from ..services.database import db, Q
from ..services.principal import get_principal, require_admin
from ..services.visibility import Principal

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_family_member(member_id: str, principal: Principal) -> dict:
    member = db.members.get((Q.id == member_id) & (Q.family_id == principal.family_id))
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")
    return member


@router.get("")
async def list_members(principal: Principal = Depends(get_principal)):
    """List members of the caller's family"""
    db.initialize()
    members = db.members.search(Q.family_id == principal.family_id)
    return sorted(members, key=lambda x: x.get("joined_at", ""))


@router.post("", status_code=201)
async def add_member(data: MemberCreate, principal: Principal = Depends(require_admin)):
    """Add a member to the family"""
    db.initialize()

    if data.email:
        existing = db.members.get((Q.family_id == principal.family_id) & (Q.email == data.email))
        if existing:
            raise HTTPException(status_code=400, detail="Member with this email already exists")

    member = {
        "id": db.generate_id(),
        "family_id": principal.family_id,
        "display_name": data.display_name.strip(),
        "email": data.email,
        "role": data.role.value,
        "joined_at": db.timestamp()
    }
    db.members.insert(member)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="CREATE",
        entity_type="user",
        entity_id=member["id"],
        entity_name=member["display_name"],
        metadata={"role": member["role"]}
    )

    return member


@router.get("/{member_id}")
async def get_member(member_id: str, principal: Principal = Depends(get_principal)):
    """Get a family member"""
    db.initialize()
    return _get_family_member(member_id, principal)


@router.patch("/{member_id}")
async def update_member(
    member_id: str,
    data: MemberUpdate,
    principal: Principal = Depends(require_admin)
):
    """Update a member's name, email or role"""
    db.initialize()
    member = _get_family_member(member_id, principal)

    updates = data.model_dump(exclude_unset=True)
    if "role" in updates:
        updates["role"] = updates["role"].value
        if member_id == principal.member_id and updates["role"] != member["role"]:
            raise HTTPException(status_code=400, detail="Admins cannot change their own role")

    db.members.update(updates, Q.id == member_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="UPDATE",
        entity_type="user",
        entity_id=member_id,
        entity_name=updates.get("display_name", member["display_name"]),
        metadata={"fields": sorted(updates)}
    )

    return {**member, **updates}


@router.delete("/{member_id}")
async def remove_member(member_id: str, principal: Principal = Depends(require_admin)):
    """Remove a member from the family"""
    db.initialize()
    member = _get_family_member(member_id, principal)

    if member_id == principal.member_id:
        raise HTTPException(status_code=400, detail="Admins cannot remove themselves")

    # Unassign tasks
    db.tasks.update({"assignee_id": None}, Q.assignee_id == member_id)
    db.notifications.remove(Q.user_id == member_id)
    db.members.remove(Q.id == member_id)

    db.log_activity(
        family_id=principal.family_id,
        user_id=principal.member_id,
        action="DELETE",
        entity_type="user",
        entity_id=member_id,
        entity_name=member["display_name"]
    )
    logger.info(f"Member {member_id} removed from family {principal.family_id}")

    return {"deleted": True}
