"""Family routes"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from ..models.member import FamilyCreate, Role
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.visibility import Principal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_family(data: FamilyCreate):
    """Create a family together with its first admin member"""
    db.initialize()

    family = {
        "id": db.generate_id(),
        "name": data.name.strip(),
        "created_at": db.timestamp()
    }
    admin = {
        "id": db.generate_id(),
        "family_id": family["id"],
        "display_name": data.admin_name.strip(),
        "email": data.admin_email,
        "role": Role.ADMIN.value,
        "joined_at": db.timestamp()
    }
    db.families.insert(family)
    db.members.insert(admin)

    db.log_activity(
        family_id=family["id"],
        user_id=admin["id"],
        action="CREATE",
        entity_type="family",
        entity_id=family["id"],
        entity_name=family["name"]
    )
    logger.info(f"Family {family['id']} created with admin {admin['id']}")

    return {**family, "admin": admin}


@router.get("/me")
async def get_my_family(principal: Principal = Depends(get_principal)):
    """Get the caller's family with its members"""
    db.initialize()

    family = db.families.get(Q.id == principal.family_id)
    if not family:
        raise HTTPException(status_code=404, detail="Family not found")

    members = db.members.search(Q.family_id == principal.family_id)
    return {
        **family,
        "members": sorted(members, key=lambda x: x.get("joined_at", "")),
        "user_role": principal.role.value
    }
