"""Family and member models"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Optional
from enum import Enum


class Role(str, Enum):
    CHILD = "CHILD"  # Sees family and own private items
    ADULT = "ADULT"  # Also sees adults-only items
    ADMIN = "ADMIN"  # Adult who manages members and any item


class FamilyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    admin_name: str = Field(..., min_length=1, max_length=100)
    admin_email: Optional[str] = None


class MemberCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    role: Role = Role.ADULT


class MemberUpdate(BaseModel):
    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    role: Optional[Role] = None

    @field_validator("display_name", "role", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class Member(BaseModel):
    id: str
    family_id: str
    display_name: str
    email: Optional[str] = None
    role: Role
    joined_at: str
