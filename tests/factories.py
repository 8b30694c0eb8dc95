"""Test data factories for Family Organizer API tests

Each factory inserts a document into the shared TinyDB instance and returns it.
"""

from datetime import datetime
from typing import Optional, List

from family_organizer.services.database import db


def create_family(name: str = "Test Family") -> dict:
    """Insert a family for testing"""
    db.initialize()
    family = {
        "id": db.generate_id(),
        "name": name,
        "created_at": datetime.utcnow().isoformat()
    }
    db.families.insert(family)
    return family


def create_member(
    family_id: str,
    role: str = "ADULT",
    display_name: str = "Test Member",
    email: Optional[str] = None
) -> dict:
    """Insert a family member for testing"""
    db.initialize()
    member = {
        "id": db.generate_id(),
        "family_id": family_id,
        "display_name": display_name,
        "email": email,
        "role": role,
        "joined_at": datetime.utcnow().isoformat()
    }
    db.members.insert(member)
    return member


def create_folder(
    family_id: str,
    owner_id: str,
    name: str = "Test Folder",
    visibility: str = "FAMILY",
    updated_at: Optional[str] = None
) -> dict:
    """Insert a folder for testing"""
    db.initialize()
    now = datetime.utcnow().isoformat()
    folder = {
        "id": db.generate_id(),
        "family_id": family_id,
        "owner_id": owner_id,
        "name": name,
        "color": None,
        "visibility": visibility,
        "created_at": now,
        "updated_at": updated_at or now
    }
    db.folders.insert(folder)
    return folder


def create_list(
    family_id: str,
    owner_id: str,
    name: str = "Test List",
    visibility: str = "FAMILY",
    description: Optional[str] = None,
    folder_id: Optional[str] = None,
    list_type: str = "TODO",
    updated_at: Optional[str] = None
) -> dict:
    """Insert a list for testing"""
    db.initialize()
    now = datetime.utcnow().isoformat()
    lst = {
        "id": db.generate_id(),
        "family_id": family_id,
        "owner_id": owner_id,
        "folder_id": folder_id,
        "name": name,
        "description": description,
        "color": None,
        "visibility": visibility,
        "list_type": list_type,
        "created_at": now,
        "updated_at": updated_at or now
    }
    db.lists.insert(lst)
    return lst


def create_task(
    family_id: str,
    list_id: str,
    owner_id: str,
    title: str = "Test Task",
    description: Optional[str] = None,
    completed: bool = False,
    priority: str = "MEDIUM",
    deadline: Optional[str] = None,
    tags: Optional[List[str]] = None,
    assignee_id: Optional[str] = None,
    created_at: Optional[str] = None
) -> dict:
    """Insert a task for testing"""
    db.initialize()
    now = datetime.utcnow().isoformat()
    task = {
        "id": db.generate_id(),
        "family_id": family_id,
        "list_id": list_id,
        "owner_id": owner_id,
        "assignee_id": assignee_id,
        "title": title,
        "description": description,
        "priority": priority,
        "deadline": deadline,
        "tags": tags or [],
        "completed": completed,
        "completed_at": now if completed else None,
        "created_at": created_at or now,
        "updated_at": created_at or now
    }
    db.tasks.insert(task)
    return task


def create_subtask(
    family_id: str,
    task_id: str,
    title: str = "Test Subtask",
    completed: bool = False,
    created_at: Optional[str] = None
) -> dict:
    """Insert a subtask for testing"""
    db.initialize()
    now = datetime.utcnow().isoformat()
    subtask = {
        "id": db.generate_id(),
        "task_id": task_id,
        "family_id": family_id,
        "title": title,
        "completed": completed,
        "completed_at": now if completed else None,
        "created_at": created_at or now,
        "updated_at": created_at or now
    }
    db.subtasks.insert(subtask)
    return subtask


def create_shopping_item(
    family_id: str,
    list_id: str,
    name: str = "Test Item",
    category: str = "other",
    purchased: bool = False,
    quantity: Optional[float] = None,
    sort_index: int = 1
) -> dict:
    """Insert a shopping item for testing"""
    db.initialize()
    now = datetime.utcnow().isoformat()
    item = {
        "id": db.generate_id(),
        "family_id": family_id,
        "list_id": list_id,
        "name": name,
        "normalized_name": name.strip().lower(),
        "quantity": quantity,
        "unit": None,
        "category": category,
        "purchased": purchased,
        "last_purchased_at": now if purchased else None,
        "sort_index": sort_index,
        "created_at": now,
        "updated_at": now
    }
    db.shopping_items.insert(item)
    return item


def headers_for(member: dict) -> dict:
    """Request headers identifying the given member"""
    return {"X-Member-Id": member["id"]}
