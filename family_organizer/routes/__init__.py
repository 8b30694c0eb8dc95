"""API Routes"""

from . import activity, families, folders, lists, members, notifications, search, shopping, subtasks, tasks

__all__ = [
    "activity", "families", "folders", "lists", "members", "notifications", "search", "shopping", "subtasks", "tasks"
]
