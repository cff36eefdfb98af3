from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from typing import List, Optional, Tuple

from travelplan.core.logger import logger
from travelplan.models.costs.cost_model import Cost
from travelplan.models.itinerary.itinerary_item import ItineraryItem
from travelplan.models.user.user import User
from travelplan.schemas.itinerary.item import ItemCreate, ItemUpdate
from travelplan.services.costs.cost_service import build_cost
from travelplan.utils.dates import to_naive_utc

_COST_FIELDS = {"has_cost", "cost_amount", "cost_currency", "cost_category", "cost_date"}
_DATE_FIELDS = ("start_date", "end_date")


async def _fetch_item(db: AsyncSession, trip_id: int, item_id: int) -> ItineraryItem:
    result = await db.execute(
        select(ItineraryItem)
        .options(selectinload(ItineraryItem.created_by))
        .where(ItineraryItem.id == item_id, ItineraryItem.trip_id == trip_id)
        .execution_options(populate_existing=True)
    )
    item = result.scalar_one_or_none()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Itinerary item not found")
    return item


async def list_items(db: AsyncSession, trip_id: int) -> List[ItineraryItem]:
    result = await db.execute(
        select(ItineraryItem)
        .options(selectinload(ItineraryItem.created_by))
        .where(ItineraryItem.trip_id == trip_id)
        .order_by(ItineraryItem.start_date.asc(), ItineraryItem.id.asc())
    )
    return result.scalars().all()


async def create_item(
    db: AsyncSession, trip_id: int, data: ItemCreate, current_user: User
) -> Tuple[ItineraryItem, Optional[Cost]]:
    """Create an item and, when it is priced, the matching cost in the same transaction."""
    fields = data.model_dump(exclude=_COST_FIELDS)
    for key in _DATE_FIELDS:
        fields[key] = to_naive_utc(fields[key])

    item = ItineraryItem(**fields, trip_id=trip_id, created_by_id=current_user.id)
    item.apply_location_rule()
    db.add(item)

    cost = None
    if data.has_cost and data.cost_amount and data.cost_amount > 0:
        cost = build_cost(
            trip_id=trip_id,
            paid_by_id=current_user.id,
            amount=data.cost_amount,
            description=data.title,
            currency=data.cost_currency,
            category=data.cost_category,
            date=data.cost_date,
        )
        db.add(cost)

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"Item {item.id} added to trip {trip_id}{' with cost ' + str(cost.id) if cost else ''}")

    item = await _fetch_item(db, trip_id, item.id)
    if cost is not None:
        result = await db.execute(
            select(Cost).options(selectinload(Cost.paid_by)).where(Cost.id == cost.id)
        )
        cost = result.scalar_one()
    return item, cost


async def get_item(db: AsyncSession, trip_id: int, item_id: int) -> ItineraryItem:
    return await _fetch_item(db, trip_id, item_id)


async def update_item(db: AsyncSession, trip_id: int, item_id: int, data: ItemUpdate) -> ItineraryItem:
    item = await _fetch_item(db, trip_id, item_id)

    update_fields = data.model_dump(exclude_unset=True)
    if update_fields.get("type") is None:
        update_fields.pop("type", None)
    if "title" in update_fields and not update_fields["title"]:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Title is required")

    for key in _DATE_FIELDS:
        if key in update_fields:
            update_fields[key] = to_naive_utc(update_fields[key])

    for field, value in update_fields.items():
        setattr(item, field, value)
    item.apply_location_rule()

    await db.commit()
    return await _fetch_item(db, trip_id, item_id)


async def delete_item(db: AsyncSession, trip_id: int, item_id: int) -> None:
    item = await _fetch_item(db, trip_id, item_id)
    await db.delete(item)
    await db.commit()
    logger.info(f"Item {item_id} deleted from trip {trip_id}")
