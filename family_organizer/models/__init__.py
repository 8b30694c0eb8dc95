from .member import Role, FamilyCreate, MemberCreate, MemberUpdate, Member
from .organizer import (
    Visibility, ListType, Priority,
    FolderCreate, FolderUpdate,
    ListCreate, ListUpdate,
    TaskCreate, TaskUpdate,
    SubtaskCreate, SubtaskUpdate,
    ShoppingCategory, ShoppingItemCreate, ShoppingItemUpdate,
)
