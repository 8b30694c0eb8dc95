"""Family Organizer API - shared lists, tasks and folders with role-based visibility"""

__version__ = "1.0.0"
