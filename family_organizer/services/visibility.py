"""
Visibility rules for family resources

A folder, list or task (through its list) is visible to a member when it
belongs to the member's family and either:
- its visibility is FAMILY,
- it is PRIVATE and owned by the member, or
- it is ADULT and the member is an ADULT or ADMIN.

can_view() evaluates the rule for one resource; build_filter() returns the
equivalent declarative expression for pushdown into a store query.
"""
from dataclasses import dataclass
from typing import Any, Iterable, List
import logging

from ..errors import InvalidRoleError, InvalidVisibilityError
from ..models.member import Role
from ..models.organizer import Visibility
from .filters import And, Eq, FilterExpression, Or, field_value

logger = logging.getLogger(__name__)

ADULT_ROLES = frozenset({Role.ADULT, Role.ADMIN})


def parse_role(value: Any) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise InvalidRoleError(value) from None


def parse_visibility(value: Any) -> Visibility:
    try:
        return Visibility(value)
    except ValueError:
        raise InvalidVisibilityError(value) from None


@dataclass(frozen=True)
class Principal:
    """The calling member's identity, built once per request"""
    member_id: str
    family_id: str
    role: Role

    def __post_init__(self):
        if not self.member_id:
            raise ValueError("Principal member_id must not be empty")
        if not self.family_id:
            raise ValueError("Principal family_id must not be empty")
        object.__setattr__(self, "role", parse_role(self.role))

    @property
    def is_adult(self) -> bool:
        return self.role in ADULT_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def can_view(principal: Principal, resource: Any) -> bool:
    """Whether the principal may read the resource"""
    family_id = field_value(resource, "family_id")
    if not family_id:
        raise ValueError("Resource family_id must not be empty")

    visibility = parse_visibility(field_value(resource, "visibility"))

    if family_id != principal.family_id:
        return False

    if visibility == Visibility.FAMILY:
        return True
    if visibility == Visibility.PRIVATE:
        return field_value(resource, "owner_id") == principal.member_id
    return principal.is_adult


def can_edit(principal: Principal, resource: Any) -> bool:
    """Owners and admins may modify or delete what they can see"""
    if not can_view(principal, resource):
        return False
    return principal.is_admin or field_value(resource, "owner_id") == principal.member_id


def build_filter(principal: Principal) -> FilterExpression:
    """Filter matching exactly the resources can_view() accepts for this principal"""
    tiers = [
        Eq("visibility", Visibility.FAMILY.value),
        And(Eq("visibility", Visibility.PRIVATE.value), Eq("owner_id", principal.member_id)),
    ]
    if principal.is_adult:
        tiers.append(Eq("visibility", Visibility.ADULT.value))

    expression = And(Eq("family_id", principal.family_id), Or(*tiers))
    logger.debug(f"Visibility filter for {principal.member_id}: {expression.to_dict()}")
    return expression


def visible_to(principal: Principal, resources: Iterable[Any]) -> List[Any]:
    """Resources the principal may read, in input order"""
    return [resource for resource in resources if can_view(principal, resource)]
