from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status

from travelplan.core.logger import logger
from travelplan.core.security import hash_password, revoke_all_refresh_tokens
from travelplan.models.user.user import User
from travelplan.models.trips.trip_model import Trip
from travelplan.models.trips.trip_member import TripMember
from travelplan.models.trips.trip_invite import TripInvite
from travelplan.models.itinerary.itinerary_item import ItineraryItem
from travelplan.models.costs.cost_model import Cost
from travelplan.models.tasks.task_model import Task
from travelplan.models.polls.poll_models import Poll, Vote
from travelplan.schemas.user.user import (
    UserUpdate, UserOut, DataSummary, OwnedTripSummary, UserDataResponse,
    DeletedData, DataDeletionResponse,
)
from travelplan.services.trips.trip_service import purge_trip


async def _count(db: AsyncSession, column, *criteria) -> int:
    return await db.scalar(select(func.count(column)).where(*criteria)) or 0


class ProfileService:
    @staticmethod
    async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def update_user_profile(user_id: int, update_data: UserUpdate, db: AsyncSession) -> User:
        user = await ProfileService.get_user_by_id(user_id, db)

        update_fields = {k: v for k, v in update_data.model_dump(exclude_unset=True).items() if v is not None}
        if not update_fields:
            raise HTTPException(status_code=400, detail="No fields to update.")

        if 'password' in update_fields:
            if user.auth_type != "local":
                raise HTTPException(status_code=400, detail="Password cannot be set for this account")
            update_fields['hashed_password'] = hash_password(update_fields.pop('password'))
        if 'name' in update_fields:
            update_fields['name'] = update_fields['name'].strip()

        for key, value in update_fields.items():
            setattr(user, key, value)

        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_data_summary(user: User, db: AsyncSession) -> UserDataResponse:
        """What the account holds, before the user decides to delete it."""
        invited = or_(TripInvite.receiver_id == user.id, TripInvite.receiver_email == user.email)
        summary = DataSummary(
            trips=await _count(db, Trip.id, Trip.creator_id == user.id),
            costs=await _count(db, Cost.id, Cost.paid_by_id == user.id),
            tasks=await _count(db, Task.id, Task.created_by_id == user.id),
            assigned_tasks=await _count(db, Task.id, Task.assigned_to_id == user.id),
            polls=await _count(db, Poll.id, Poll.created_by_id == user.id),
            votes=await _count(db, Vote.id, Vote.user_id == user.id),
            sent_invites=await _count(db, TripInvite.id, TripInvite.sender_id == user.id),
            received_invites=await _count(db, TripInvite.id, invited),
        )

        result = await db.execute(
            select(Trip)
            .options(
                selectinload(Trip.members),
                selectinload(Trip.costs),
                selectinload(Trip.tasks),
                selectinload(Trip.polls),
            )
            .where(Trip.creator_id == user.id)
            .order_by(Trip.created_at.desc())
        )
        trips = [
            OwnedTripSummary(
                id=trip.id,
                name=trip.name,
                description=trip.description,
                start_date=trip.start_date,
                end_date=trip.end_date,
                created_at=trip.created_at,
                member_count=len(trip.members),
                cost_count=len(trip.costs),
                task_count=len(trip.tasks),
                poll_count=len(trip.polls),
            )
            for trip in result.scalars().all()
        ]

        return UserDataResponse(user=UserOut.model_validate(user), data_summary=summary, trips=trips)

    @staticmethod
    async def delete_account(user: User, db: AsyncSession, redis_client) -> DataDeletionResponse:
        """
        Remove the account and everything it owns in one transaction.

        Costs the user paid and items they added on other people's trips stay
        with their owner set to null; trips the user created go entirely.
        """
        user_id = user.id
        user_email = user.email
        invited = or_(
            TripInvite.sender_id == user_id,
            TripInvite.receiver_id == user_id,
            TripInvite.receiver_email == user_email,
        )

        deleted = DeletedData(
            trips=await _count(db, Trip.id, Trip.creator_id == user_id),
            costs=await _count(db, Cost.id, Cost.paid_by_id == user_id),
            tasks=await _count(db, Task.id, Task.created_by_id == user_id),
            polls=await _count(db, Poll.id, Poll.created_by_id == user_id),
            invitations=await _count(db, TripInvite.id, invited),
        )
        owned_trip_ids = (await db.execute(select(Trip.id).where(Trip.creator_id == user_id))).scalars().all()

        try:
            own_polls = select(Poll.id).where(Poll.created_by_id == user_id)
            await db.execute(delete(Vote).where(Vote.user_id == user_id))
            await db.execute(delete(Vote).where(Vote.poll_id.in_(own_polls)))
            await db.execute(delete(Poll).where(Poll.created_by_id == user_id))

            await db.execute(update(Task).where(Task.assigned_to_id == user_id).values(assigned_to_id=None))
            await db.execute(delete(Task).where(Task.created_by_id == user_id))

            await db.execute(update(Cost).where(Cost.paid_by_id == user_id).values(paid_by_id=None))
            await db.execute(
                update(ItineraryItem).where(ItineraryItem.created_by_id == user_id).values(created_by_id=None)
            )

            await db.execute(delete(TripInvite).where(invited))
            await db.execute(delete(TripMember).where(TripMember.user_id == user_id))

            for trip_id in owned_trip_ids:
                await purge_trip(db, trip_id)

            await db.execute(delete(User).where(User.id == user_id))
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception(f"Failed to delete account {user_id}")
            raise

        await revoke_all_refresh_tokens(redis_client, user_id)
        logger.info(f"Account {user_id} deleted with {len(owned_trip_ids)} owned trip(s)")

        return DataDeletionResponse(
            message="Your account and all associated data have been successfully deleted",
            deleted_data=deleted,
        )
