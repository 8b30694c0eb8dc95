"""Folder, list, task and shopping item models"""

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Optional, List
from enum import Enum

MAX_TAGS = 10
MAX_SUBTASKS = 20


def reject_null(value, info: ValidationInfo):
    """Explicit null is only allowed for fields that can be cleared"""
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value


class Visibility(str, Enum):
    PRIVATE = "PRIVATE"  # Only the owner can view
    FAMILY = "FAMILY"    # All family members can view
    ADULT = "ADULT"      # Adult and admin members can view


class ListType(str, Enum):
    TODO = "TODO"
    SHOPPING = "SHOPPING"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
    visibility: Visibility = Visibility.FAMILY

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name is required")
        return v


class FolderUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    visibility: Optional[Visibility] = None

    @field_validator("name", "visibility", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return reject_null(v, info)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name cannot be empty")
        return v


class ListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    folder_id: Optional[str] = None
    visibility: Visibility = Visibility.FAMILY
    list_type: ListType = ListType.TODO

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("List name is required")
        return v


class ListUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    folder_id: Optional[str] = None
    visibility: Optional[Visibility] = None

    @field_validator("name", "visibility", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return reject_null(v, info)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("List name cannot be empty")
        return v


class TaskCreate(BaseModel):
    list_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    deadline: Optional[str] = None
    tags: List[str] = []

    @field_validator("tags")
    @classmethod
    def limit_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag.strip()][:MAX_TAGS]


class TaskUpdate(BaseModel):
    list_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    priority: Optional[Priority] = None
    deadline: Optional[str] = None
    tags: Optional[List[str]] = None
    completed: Optional[bool] = None

    @field_validator("list_id", "title", "priority", "tags", "completed", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return reject_null(v, info)

    @field_validator("tags")
    @classmethod
    def limit_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag.strip()][:MAX_TAGS]


class SubtaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    completed: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class SubtaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    completed: Optional[bool] = None

    @field_validator("title", "completed", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return reject_null(v, info)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v


class ShoppingCategory(str, Enum):
    BAKERY = "bakery"
    PRODUCE = "produce"
    MEAT = "meat"
    FISH = "fish"
    DAIRY = "dairy"
    FROZEN = "frozen"
    PANTRY = "pantry"
    BEVERAGES = "beverages"
    SNACKS = "snacks"
    HOUSEHOLD = "household"
    PERSONAL_CARE = "personal_care"
    BABY = "baby"
    PETS = "pets"
    OTHER = "other"


class ShoppingItemCreate(BaseModel):
    list_id: str
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = None
    category: Optional[ShoppingCategory] = None  # Guessed from the name when omitted
    purchased: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name is required")
        return v


class ShoppingItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = None
    category: Optional[ShoppingCategory] = None
    purchased: Optional[bool] = None
    sort_index: Optional[int] = None

    @field_validator("name", "category", "purchased", "sort_index", mode="before")
    @classmethod
    def not_null(cls, v, info: ValidationInfo):
        return reject_null(v, info)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name cannot be empty")
        return v
