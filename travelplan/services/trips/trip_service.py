from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, or_
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from typing import List

from travelplan.core.logger import logger
from travelplan.dependencies.trip_access import get_accessible_trip, get_owned_trip
from travelplan.models.trips.trip_model import Trip
from travelplan.models.trips.trip_member import TripMember, TripRole
from travelplan.models.trips.trip_invite import TripInvite
from travelplan.models.itinerary.itinerary_item import ItineraryItem
from travelplan.models.costs.cost_model import Cost
from travelplan.models.tasks.task_model import Task
from travelplan.models.polls.poll_models import Poll, Vote
from travelplan.schemas.trip.trip_schema import TripCreate, TripUpdate


def _detail_query(trip_id: int):
    return (
        select(Trip)
        .options(
            selectinload(Trip.creator),
            selectinload(Trip.members).selectinload(TripMember.user),
        )
        .where(Trip.id == trip_id)
        .execution_options(populate_existing=True)
    )


async def purge_trip(db: AsyncSession, trip_id: int) -> None:
    """
    Delete a trip and every row hanging off it, children first.

    Does not commit; the caller owns the transaction so the purge can be
    combined with other deletes.
    """
    poll_ids = select(Poll.id).where(Poll.trip_id == trip_id)
    await db.execute(delete(Vote).where(Vote.poll_id.in_(poll_ids)))
    await db.execute(delete(Poll).where(Poll.trip_id == trip_id))
    await db.execute(delete(Task).where(Task.trip_id == trip_id))
    await db.execute(delete(Cost).where(Cost.trip_id == trip_id))
    await db.execute(delete(ItineraryItem).where(ItineraryItem.trip_id == trip_id))
    await db.execute(delete(TripInvite).where(TripInvite.trip_id == trip_id))
    await db.execute(delete(TripMember).where(TripMember.trip_id == trip_id))
    await db.execute(delete(Trip).where(Trip.id == trip_id))


class TripService:

    @staticmethod
    async def create_trip(db: AsyncSession, trip_data: TripCreate, user_id: int) -> Trip:
        new_trip = Trip(**trip_data.model_dump(), creator_id=user_id)
        db.add(new_trip)
        try:
            await db.flush()
            db.add(TripMember(
                user_id=user_id,
                trip_id=new_trip.id,
                role=TripRole.CREATOR
            ))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Trip {new_trip.id} created by user {user_id}")
        return await TripService.get_trip_detail(db, new_trip.id)

    @staticmethod
    async def get_user_trips(db: AsyncSession, user_id: int) -> List[Trip]:
        member_of = select(TripMember.trip_id).where(TripMember.user_id == user_id)
        result = await db.execute(
            select(Trip)
            .options(selectinload(Trip.creator), selectinload(Trip.members))
            .where(or_(Trip.creator_id == user_id, Trip.id.in_(member_of)))
            .order_by(Trip.created_at.desc(), Trip.id.desc())
        )
        trips = result.scalars().all()
        logger.info(f"Retrieved {len(trips)} trips for user {user_id}")
        return trips

    @staticmethod
    async def get_trip_detail(db: AsyncSession, trip_id: int) -> Trip:
        trip = (await db.execute(_detail_query(trip_id))).scalar_one_or_none()
        if not trip:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
        return trip

    @staticmethod
    async def get_trip_by_id(db: AsyncSession, user_id: int, trip_id: int) -> Trip:
        await get_accessible_trip(db, trip_id, user_id)
        return await TripService.get_trip_detail(db, trip_id)

    @staticmethod
    async def update_trip(db: AsyncSession, trip_id: int, trip_data: TripUpdate, user_id: int) -> Trip:
        trip = await get_owned_trip(db, trip_id, user_id)

        update_data = trip_data.model_dump(exclude_unset=True)
        if "name" in update_data and not update_data["name"]:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Trip name is required")

        start = update_data.get("start_date", trip.start_date)
        end = update_data.get("end_date", trip.end_date)
        if start and end and end < start:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="End date must be on or after the start date",
            )

        for key, value in update_data.items():
            setattr(trip, key, value)

        await db.commit()
        logger.info(f"Trip {trip_id} updated by user {user_id}")
        return await TripService.get_trip_detail(db, trip_id)

    @staticmethod
    async def delete_trip(db: AsyncSession, trip_id: int, user_id: int) -> dict:
        await get_owned_trip(db, trip_id, user_id)

        try:
            await purge_trip(db, trip_id)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception(f"Failed to delete trip {trip_id}")
            raise

        logger.info(f"Trip {trip_id} deleted by user {user_id}")
        return {"message": "Trip deleted successfully"}
