"""Item service — owner-scoped data access for items.

Learn: This is where ownership is enforced. There is no separate
"can this user see this item" check; every statement below carries
`owner_id == <caller>` in its WHERE clause. An item that belongs to
someone else simply does not match, so it looks exactly like an item
that does not exist (the route turns both into 404).

owner_id comes from the verified identity only. Any owner_id (or id)
in the incoming fields is dropped.
"""

import uuid
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from itemvault.db.models import Item, utcnow

# Fields a caller may set. Everything else is owned by the service.
WRITABLE_FIELDS = ("title", "description", "status")


class ItemService:
    """Business logic for a single owner's items."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, owner_id: uuid.UUID, fields: dict[str, Any]) -> Item:
        item = Item(owner_id=owner_id, **_writable(fields))
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def find_one(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> Item | None:
        result = await self.db.execute(
            select(Item).where(Item.id == item_id, Item.owner_id == owner_id)
        )
        return result.scalars().first()

    async def find_all(
        self, owner_id: uuid.UUID, status: Optional[str] = None
    ) -> list[Item]:
        q = select(Item).where(Item.owner_id == owner_id)
        if status:
            q = q.where(Item.status == status)
        result = await self.db.execute(q.order_by(Item.created_at.desc()))
        return list(result.scalars().all())

    async def update(
        self, item_id: uuid.UUID, owner_id: uuid.UUID, fields: dict[str, Any]
    ) -> Item | None:
        """Apply a partial update. Returns None if no owned item matched."""
        values = _writable(fields)
        if not values:
            return await self.find_one(item_id, owner_id)

        result = await self.db.execute(
            update(Item)
            .where(Item.id == item_id, Item.owner_id == owner_id)
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            return None
        await self.db.commit()
        return await self._reload(item_id, owner_id)

    async def delete(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(Item).where(Item.id == item_id, Item.owner_id == owner_id)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def _reload(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> Item | None:
        result = await self.db.execute(
            select(Item)
            .where(Item.id == item_id, Item.owner_id == owner_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()


def _writable(fields: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k in WRITABLE_FIELDS}
