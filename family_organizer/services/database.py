"""TinyDB database service for family organizer data"""

from pathlib import Path
from tinydb import TinyDB, Query
from datetime import datetime
from typing import Optional
import logging
import uuid

from ..config import settings

logger = logging.getLogger(__name__)


class Database:
    """Database service using TinyDB"""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db: TinyDB = None

    def initialize(self):
        """Initialize database connection"""
        if self.db is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = TinyDB(str(self.db_path))
        logger.info(f"Opened database at {self.db_path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None

    @property
    def families(self):
        return self.db.table("families")

    @property
    def members(self):
        return self.db.table("members")

    @property
    def folders(self):
        return self.db.table("folders")

    @property
    def lists(self):
        return self.db.table("lists")

    @property
    def tasks(self):
        return self.db.table("tasks")

    @property
    def subtasks(self):
        return self.db.table("subtasks")

    @property
    def shopping_items(self):
        return self.db.table("shopping_items")

    @property
    def activity(self):
        return self.db.table("activity")

    @property
    def notifications(self):
        return self.db.table("notifications")

    def generate_id(self) -> str:
        return str(uuid.uuid4())[:8]

    def timestamp(self) -> str:
        return datetime.utcnow().isoformat()

    def log_activity(
        self,
        family_id: str,
        user_id: str,
        action: str,
        entity_type: str,
        entity_id: str = None,
        entity_name: str = None,
        metadata: dict = None
    ):
        """Log a family activity entry for history and summaries"""
        self.activity.insert({
            "id": self.generate_id(),
            "family_id": family_id,
            "user_id": user_id,
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "entity_name": entity_name,
            "metadata": metadata or {},
            "created_at": self.timestamp()
        })

    def prune_activity(self, cutoff: datetime) -> int:
        """Remove activity entries created before the cutoff"""
        cutoff_str = cutoff.isoformat()
        removed = self.activity.remove(Q.created_at < cutoff_str)
        logger.info(f"Pruned {len(removed)} activity entries older than {cutoff_str}")
        return len(removed)

    def notify(
        self,
        family_id: str,
        user_id: str,
        type: str,
        title: str,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None
    ) -> dict:
        """Create an in-app notification for a member"""
        notification = {
            "id": self.generate_id(),
            "family_id": family_id,
            "user_id": user_id,
            "type": type,
            "title": title,
            "message": message,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "read": False,
            "created_at": self.timestamp()
        }
        self.notifications.insert(notification)
        return notification


# Query helper
Q = Query()

# Shared instance used by every route module
db = Database(settings.database_path)
