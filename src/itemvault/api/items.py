"""Item API routes.

Learn: Every handler takes the CurrentIdentity as an explicit argument
and passes its user_id to ItemService, which scopes the query. A missing
item and another user's item both come back as 404.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.auth.dependencies import CurrentIdentity, get_current_identity
from itemvault.db.engine import get_db
from itemvault.errors import NotFound
from itemvault.schemas.item import STATUS_PATTERN, ItemCreate, ItemRead, ItemUpdate
from itemvault.services.item_service import ItemService

router = APIRouter(prefix="/items")


def _svc(db: AsyncSession = Depends(get_db)) -> ItemService:
    return ItemService(db)


@router.post("", response_model=ItemRead, status_code=201)
async def create_item(
    body: ItemCreate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: ItemService = Depends(_svc),
):
    return await svc.create(identity.user_id, body.model_dump())


@router.get("", response_model=list[ItemRead])
async def list_items(
    status: Optional[str] = Query(None, pattern=STATUS_PATTERN),
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: ItemService = Depends(_svc),
):
    """List the caller's items, newest first."""
    return await svc.find_all(identity.user_id, status=status)


@router.get("/{item_id}", response_model=ItemRead)
async def get_item(
    item_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: ItemService = Depends(_svc),
):
    item = await svc.find_one(item_id, identity.user_id)
    if not item:
        raise NotFound("Item not found")
    return item


@router.put("/{item_id}", response_model=ItemRead)
async def update_item(
    item_id: uuid.UUID,
    body: ItemUpdate,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: ItemService = Depends(_svc),
):
    """Partial update — omitted or null fields keep their current value."""
    item = await svc.update(
        item_id, identity.user_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    if not item:
        raise NotFound("Item not found")
    return item


@router.delete("/{item_id}", status_code=204)
async def delete_item(
    item_id: uuid.UUID,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: ItemService = Depends(_svc),
):
    if not await svc.delete(item_id, identity.user_id):
        raise NotFound("Item not found")
    return Response(status_code=204)
