"""Request principal resolution"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from .database import db, Q
from .visibility import Principal

logger = logging.getLogger(__name__)


async def get_principal(
    x_member_id: Optional[str] = Header(default=None)
) -> Principal:
    """
    Build the caller's Principal from the X-Member-Id header.

    Resolved once per request and passed explicitly to every access check.
    """
    if not x_member_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Member-Id header"
        )

    db.initialize()
    member = db.members.get(Q.id == x_member_id)
    if not member:
        logger.warning(f"Unknown member id in request: {x_member_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown member"
        )

    return Principal(
        member_id=member["id"],
        family_id=member["family_id"],
        role=member["role"]
    )


async def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Principal dependency that only admits family admins"""
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only family admins can perform this action"
        )
    return principal
