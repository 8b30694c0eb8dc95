"""
Search API

Global search across tasks, lists and folders the caller can see.
Each group is ordered by relevance; equal scores keep the store ordering
(open tasks first, then most recent).
"""
from fastapi import APIRouter, Depends, HTTPException, Query as QueryParam
from typing import Optional, Literal, List
import logging

from ..config import settings
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.ranking import rank, validate_query
from ..services.visibility import Principal, build_filter
from .tasks import visible_lists

logger = logging.getLogger(__name__)

router = APIRouter()


def _contains(needle: str, *values: Optional[str]) -> bool:
    return any(needle in (value or "").lower() for value in values)


def _ranked(records: List[dict], query: str, kind: str, title_key: str) -> List[dict]:
    return [
        {**record, "type": kind, "relevance_score": relevance}
        for record, relevance in rank(
            records,
            query,
            title_key=title_key,
            min_length=settings.search_min_query_length
        )
    ]


def _search_tasks(principal: Principal, query: str, limit: int) -> List[dict]:
    lists = visible_lists(principal)
    needle = query.lower()

    tasks = db.tasks.search(
        (Q.family_id == principal.family_id) & Q.list_id.one_of(list(lists))
    )
    tasks = [
        t for t in tasks
        if _contains(needle, t.get("title"), t.get("description")) or query in t.get("tags", [])
    ]
    # Open tasks first, newest first within each group
    tasks.sort(key=lambda t: t.get("created_at", ""), reverse=True)
    tasks.sort(key=lambda t: bool(t.get("completed")))

    results = []
    for task in tasks[:limit]:
        lst = lists[task["list_id"]]
        results.append({
            **task,
            "subtask_count": db.subtasks.count(Q.task_id == task["id"]),
            "list": {
                "id": lst["id"],
                "name": lst.get("name"),
                "color": lst.get("color"),
                "list_type": lst.get("list_type")
            }
        })
    return _ranked(results, query, "task", "title")


def _search_lists(principal: Principal, query: str, limit: int) -> List[dict]:
    needle = query.lower()
    lists = db.lists.search(build_filter(principal).to_query())
    lists = [lst for lst in lists if _contains(needle, lst.get("name"), lst.get("description"))]
    lists.sort(key=lambda x: x.get("updated_at", ""), reverse=True)
    return _ranked(lists[:limit], query, "list", "name")


def _search_folders(principal: Principal, query: str, limit: int) -> List[dict]:
    needle = query.lower()
    folders = db.folders.search(build_filter(principal).to_query())
    folders = [f for f in folders if _contains(needle, f.get("name"))]
    folders.sort(key=lambda x: x.get("updated_at", ""), reverse=True)
    return _ranked(folders[:limit], query, "folder", "name")


@router.get("/search")
async def search(
    q: Optional[str] = QueryParam(default=None, description="Search query"),
    type: Literal["all", "tasks", "lists", "folders"] = QueryParam(default="all"),
    limit: int = QueryParam(default=settings.search_default_limit, ge=1),
    principal: Principal = Depends(get_principal)
):
    """Search tasks, lists and folders visible to the caller"""
    query = validate_query(q, settings.search_min_query_length)
    if limit > settings.search_max_limit:
        raise HTTPException(status_code=400, detail=f"Limit cannot exceed {settings.search_max_limit}")

    db.initialize()

    results = {"query": query, "tasks": [], "lists": [], "folders": [], "total": 0}

    if type in ("all", "tasks"):
        results["tasks"] = _search_tasks(principal, query, limit)
    if type in ("all", "lists"):
        results["lists"] = _search_lists(principal, query, limit)
    if type in ("all", "folders"):
        results["folders"] = _search_folders(principal, query, limit)

    results["total"] = len(results["tasks"]) + len(results["lists"]) + len(results["folders"])
    logger.debug(f"Search '{query}' ({type}) by {principal.member_id}: {results['total']} results")

    return results
