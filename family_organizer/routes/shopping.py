"""
Shopping Items API

Items on SHOPPING lists. An item is visible exactly when its list is.
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, Literal
import logging

from ..config import settings
from ..models.organizer import ListType, ShoppingCategory, ShoppingItemCreate, ShoppingItemUpdate
from ..services.database import db, Q
from ..services.principal import get_principal
from ..services.shopping import categorize, normalize_name
from ..services.visibility import Principal, can_view
from .tasks import visible_lists

logger = logging.getLogger(__name__)

router = APIRouter()

SortField = Literal["name", "category", "created_at", "updated_at", "sort_index"]


def _serialize_item(item: dict, lst: dict) -> dict:
    return {
        **item,
        "list": {
            "id": lst["id"],
            "name": lst.get("name"),
            "color": lst.get("color"),
            "list_type": lst.get("list_type"),
            "visibility": lst.get("visibility")
        }
    }


def _get_visible_item(item_id: str, principal: Principal):
    """Fetch an item and its list, 404 when either is hidden from the caller"""
    item = db.shopping_items.get(Q.id == item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Shopping item not found")
    lst = db.lists.get(Q.id == item["list_id"])
    if not lst or not can_view(principal, lst):
        raise HTTPException(status_code=404, detail="Shopping item not found")
    return item, lst


@router.get("")
async def list_items(
    list_id: Optional[str] = None,
    category: Optional[ShoppingCategory] = None,
    purchased: Optional[bool] = None,
    search: Optional[str] = None,
    sort_by: SortField = "sort_index",
    sort_order: Literal["asc", "desc"] = "asc",
    limit: int = 50,
    offset: int = 0,
    principal: Principal = Depends(get_principal)
):
    """List shopping items on lists visible to the caller"""
    if limit < 1 or offset < 0:
        raise HTTPException(status_code=400, detail="Invalid pagination parameters")
    if limit > settings.tasks_max_limit:
        raise HTTPException(status_code=400, detail=f"Limit cannot exceed {settings.tasks_max_limit}")

    db.initialize()
    lists = visible_lists(principal)

    query = (Q.family_id == principal.family_id) & Q.list_id.one_of(list(lists))
    if list_id:
        query &= Q.list_id == list_id
    if category:
        query &= Q.category == category.value
    if purchased is not None:
        query &= Q.purchased == purchased

    items = db.shopping_items.search(query)

    if search:
        needle = search.lower()
        items = [i for i in items if needle in (i.get("normalized_name") or "")]

    if sort_by == "sort_index":
        items.sort(key=lambda i: i.get("sort_index", 0), reverse=sort_order == "desc")
    else:
        items.sort(key=lambda i: (i.get(sort_by) or "").lower(), reverse=sort_order == "desc")

    total = len(items)
    page = items[offset:offset + limit]

    return {
        "items": [_serialize_item(i, lists[i["list_id"]]) for i in page],
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "has_more": offset + limit < total
        },
        "categories": [c.value for c in ShoppingCategory]
    }


@router.post("", status_code=201)
async def create_item(data: ShoppingItemCreate, principal: Principal = Depends(get_principal)):
    """Add an item to a visible shopping list"""
    db.initialize()

    lst = db.lists.get(Q.id == data.list_id)
    if not lst or lst.get("list_type") != ListType.SHOPPING.value or not can_view(principal, lst):
        raise HTTPException(status_code=404, detail="Shopping list not found or access denied")

    existing = db.shopping_items.search(Q.list_id == lst["id"])
    next_index = max((i.get("sort_index", 0) for i in existing), default=0) + 1

    item = {
        "id": db.generate_id(),
        "family_id": principal.family_id,
        "list_id": lst["id"],
        "name": data.name,
        "normalized_name": normalize_name(data.name),
        "quantity": data.quantity,
        "unit": data.unit.strip() if data.unit and data.unit.strip() else None,
        "category": (data.category or categorize(data.name)).value,
        "purchased": data.purchased,
        "last_purchased_at": db.timestamp() if data.purchased else None,
        "sort_index": next_index,
        "created_at": db.timestamp(),
        "updated_at": db.timestamp()
    }
    db.shopping_items.insert(item)
    db.lists.update({"updated_at": db.timestamp()}, Q.id == lst["id"])

    logger.debug(f"Shopping item {item['id']} added to list {lst['id']} as {item['category']}")
    return _serialize_item(item, lst)


@router.get("/{item_id}")
async def get_item(item_id: str, principal: Principal = Depends(get_principal)):
    """Get a single shopping item"""
    db.initialize()
    item, lst = _get_visible_item(item_id, principal)
    return _serialize_item(item, lst)


@router.patch("/{item_id}")
async def update_item(
    item_id: str,
    data: ShoppingItemUpdate,
    principal: Principal = Depends(get_principal)
):
    """Update an item; any member who can see its list may edit it"""
    db.initialize()
    item, lst = _get_visible_item(item_id, principal)

    updates = data.model_dump(exclude_unset=True)

    if "name" in updates:
        updates["normalized_name"] = normalize_name(updates["name"])
        # A renamed item is recategorized unless a category is given
        if "category" not in updates and updates["name"] != item["name"]:
            updates["category"] = categorize(updates["name"])
    if "category" in updates:
        updates["category"] = updates["category"].value
    if "unit" in updates:
        updates["unit"] = updates["unit"].strip() if updates["unit"] and updates["unit"].strip() else None
    if updates.get("purchased") and not item.get("purchased"):
        updates["last_purchased_at"] = db.timestamp()

    updates["updated_at"] = db.timestamp()
    db.shopping_items.update(updates, Q.id == item_id)

    return _serialize_item({**item, **updates}, lst)


@router.delete("/{item_id}")
async def delete_item(item_id: str, principal: Principal = Depends(get_principal)):
    """Delete a shopping item"""
    db.initialize()
    _get_visible_item(item_id, principal)
    db.shopping_items.remove(Q.id == item_id)
    return {"deleted": True}
