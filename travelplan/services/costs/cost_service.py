from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from typing import List, Optional, Dict
from decimal import Decimal

from travelplan.core.logger import logger
from travelplan.services.trips.trip_member_service import is_user_already_member
from travelplan.models.costs.cost_model import Cost
from travelplan.models.user.user import User
from travelplan.schemas.costs.cost import CostCreate, CostUpdate, CostSummary, PayerTotal
from travelplan.utils.dates import to_naive_utc, utcnow


async def _fetch_cost(session: AsyncSession, trip_id: int, cost_id: int) -> Cost:
    result = await session.execute(
        select(Cost)
        .options(selectinload(Cost.paid_by))
        .where(Cost.id == cost_id, Cost.trip_id == trip_id)
        .execution_options(populate_existing=True)
    )
    cost = result.scalar_one_or_none()
    if not cost:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Cost not found")
    return cost


async def ensure_payer_is_member(session: AsyncSession, trip_id: int, user_id: int) -> None:
    if not await is_user_already_member(session, trip_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Payer must be a member of the trip",
        )


def build_cost(
    trip_id: int,
    paid_by_id: int,
    amount: Decimal,
    description: str,
    currency: str = "USD",
    category=None,
    date=None,
) -> Cost:
    """Unsaved Cost row; shared with itinerary items that carry a price."""
    cost = Cost(
        trip_id=trip_id,
        paid_by_id=paid_by_id,
        amount=amount,
        currency=currency.upper(),
        description=description,
        date=to_naive_utc(date) or utcnow(),
    )
    if category is not None:
        cost.category = category
    return cost


async def list_costs(session: AsyncSession, trip_id: int) -> List[Cost]:
    result = await session.execute(
        select(Cost)
        .options(selectinload(Cost.paid_by))
        .where(Cost.trip_id == trip_id)
        .order_by(Cost.date.desc(), Cost.id.desc())
    )
    return result.scalars().all()


async def create_cost(session: AsyncSession, trip_id: int, data: CostCreate, current_user: User) -> Cost:
    payer_id = data.paid_by_id or current_user.id
    if payer_id != current_user.id:
        await ensure_payer_is_member(session, trip_id, payer_id)

    cost = build_cost(
        trip_id=trip_id,
        paid_by_id=payer_id,
        amount=data.amount,
        description=data.description,
        currency=data.currency,
        category=data.category,
        date=data.date,
    )
    session.add(cost)
    await session.commit()

    logger.info(f"Cost {cost.id} added to trip {trip_id} by user {current_user.id}")
    return await _fetch_cost(session, trip_id, cost.id)


async def get_cost(session: AsyncSession, trip_id: int, cost_id: int) -> Cost:
    return await _fetch_cost(session, trip_id, cost_id)


async def update_cost(session: AsyncSession, trip_id: int, cost_id: int, data: CostUpdate) -> Cost:
    cost = await _fetch_cost(session, trip_id, cost_id)

    # Every column here is required, so an explicit null leaves the value as is
    update_fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "paid_by_id" in update_fields and update_fields["paid_by_id"] != cost.paid_by_id:
        await ensure_payer_is_member(session, trip_id, update_fields["paid_by_id"])
    if "date" in update_fields:
        update_fields["date"] = to_naive_utc(update_fields["date"])

    for field, value in update_fields.items():
        setattr(cost, field, value)

    await session.commit()
    return await _fetch_cost(session, trip_id, cost_id)


async def delete_cost(session: AsyncSession, trip_id: int, cost_id: int) -> None:
    cost = await _fetch_cost(session, trip_id, cost_id)
    await session.delete(cost)
    await session.commit()
    logger.info(f"Cost {cost_id} deleted from trip {trip_id}")


async def get_cost_summary(session: AsyncSession, trip_id: int) -> CostSummary:
    """Totals per currency, and per category and payer split by currency."""
    total = func.sum(Cost.amount)

    count = await session.scalar(select(func.count(Cost.id)).where(Cost.trip_id == trip_id))

    by_currency: Dict[str, Decimal] = {}
    rows = await session.execute(
        select(Cost.currency, total).where(Cost.trip_id == trip_id).group_by(Cost.currency)
    )
    for currency, amount in rows.all():
        by_currency[currency] = Decimal(amount or 0)

    by_category: Dict[str, Dict[str, Decimal]] = {}
    rows = await session.execute(
        select(Cost.category, Cost.currency, total)
        .where(Cost.trip_id == trip_id)
        .group_by(Cost.category, Cost.currency)
    )
    for category, currency, amount in rows.all():
        by_category.setdefault(category.value, {})[currency] = Decimal(amount or 0)

    by_payer: Dict[Optional[int], PayerTotal] = {}
    rows = await session.execute(
        select(Cost.paid_by_id, User.name, Cost.currency, total)
        .select_from(Cost)
        .outerjoin(User, User.id == Cost.paid_by_id)
        .where(Cost.trip_id == trip_id)
        .group_by(Cost.paid_by_id, User.name, Cost.currency)
    )
    for payer_id, name, currency, amount in rows.all():
        entry = by_payer.get(payer_id)
        if entry is None:
            entry = by_payer[payer_id] = PayerTotal(
                payer_id=payer_id, name=name or "Former member", totals={}
            )
        entry.totals[currency] = Decimal(amount or 0)

    # Former members (no payer id) go last
    payers = sorted(by_payer.values(), key=lambda p: (p.payer_id is None, p.name, p.payer_id or 0))

    return CostSummary(
        cost_count=count or 0,
        total_by_currency=by_currency,
        total_by_category=by_category,
        total_by_payer=payers,
    )
