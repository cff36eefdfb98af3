from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from travelplan.core.logger import logger
from travelplan.models.trips.trip_invite import TripInvite, InviteStatus
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.trip.invite import TripInviteCreate
from travelplan.services import email_service
from travelplan.services.trips.trip_member_service import add_member, is_user_already_member


def _addressed_to(user: User):
    """Invites for this user, whether addressed by account or by bare email."""
    return or_(TripInvite.receiver_id == user.id, TripInvite.receiver_email == user.email)


async def _load_invite(db: AsyncSession, invite_id: int) -> TripInvite:
    result = await db.execute(
        select(TripInvite)
        .options(
            selectinload(TripInvite.sender),
            selectinload(TripInvite.receiver),
            selectinload(TripInvite.trip).selectinload(Trip.creator),
        )
        .where(TripInvite.id == invite_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


def _notify_receiver(invite: TripInvite, to_email: str, receiver: Optional[User]) -> None:
    trip = invite.trip
    try:
        sent = email_service.send_trip_invitation_email(
            to_email=to_email,
            receiver_name=receiver.name if receiver else None,
            sender_name=invite.sender.name,
            trip_name=trip.name,
            trip_description=trip.description,
            start_date=trip.start_date,
            end_date=trip.end_date,
            is_new_user=receiver is None,
        )
        if not sent:
            logger.error(f"[Email Invite] Not sent to {to_email}")
    except Exception as e:
        logger.error(f"[Email Invite] Failed to send to {to_email}: {e}")


async def create_trip_invite(
        db: AsyncSession,
        trip: Trip,
        invite_data: TripInviteCreate,
        current_user: User
) -> TripInvite:
    email = invite_data.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    receiver = result.scalar_one_or_none()

    if receiver:
        if await is_user_already_member(db, trip.id, receiver.id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member")
        existing_filter = and_(TripInvite.trip_id == trip.id, _addressed_to(receiver))
    else:
        existing_filter = and_(TripInvite.trip_id == trip.id, TripInvite.receiver_email == email)

    existing = (await db.execute(select(TripInvite).where(existing_filter))).scalars().all()
    if any(invite.status == InviteStatus.pending for invite in existing):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invitation already sent")

    if existing:
        # Re-open the earlier answered invite rather than adding a second row
        invite = existing[0]
        invite.status = InviteStatus.pending
        invite.sender_id = current_user.id
    else:
        invite = TripInvite(
            trip_id=trip.id,
            sender_id=current_user.id,
            receiver_id=receiver.id if receiver else None,
            receiver_email=None if receiver else email,
            status=InviteStatus.pending,
        )
        db.add(invite)

    await db.commit()
    logger.info(f"User {current_user.id} invited {email} to trip {trip.id}")

    invite = await _load_invite(db, invite.id)
    _notify_receiver(invite, email, receiver)
    return invite


async def get_trip_invites(db: AsyncSession, trip_id: int) -> List[TripInvite]:
    result = await db.execute(
        select(TripInvite)
        .options(selectinload(TripInvite.sender), selectinload(TripInvite.receiver))
        .where(TripInvite.trip_id == trip_id)
        .order_by(TripInvite.created_at.desc(), TripInvite.id.desc())
    )
    return result.scalars().all()


async def cancel_trip_invite(db: AsyncSession, trip: Trip, invite_id: int, current_user: User) -> None:
    result = await db.execute(
        select(TripInvite).where(TripInvite.id == invite_id, TripInvite.trip_id == trip.id)
    )
    invite = result.scalar_one_or_none()
    if not invite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    if invite.sender_id != current_user.id and trip.creator_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to cancel this invitation")

    await db.delete(invite)
    await db.commit()
    logger.info(f"Invite {invite_id} on trip {trip.id} cancelled by user {current_user.id}")


async def get_user_trip_invites(db: AsyncSession, current_user: User) -> List[TripInvite]:
    result = await db.execute(
        select(TripInvite)
        .options(
            selectinload(TripInvite.trip).selectinload(Trip.creator),
            selectinload(TripInvite.sender),
            selectinload(TripInvite.receiver),
        )
        .where(_addressed_to(current_user), TripInvite.status == InviteStatus.pending)
        .order_by(TripInvite.created_at.desc(), TripInvite.id.desc())
    )
    return result.scalars().all()


async def respond_to_invite(db: AsyncSession, invite_id: int, action: str, current_user: User) -> str:
    result = await db.execute(
        select(TripInvite).where(
            TripInvite.id == invite_id,
            TripInvite.status == InviteStatus.pending,
            _addressed_to(current_user),
        )
    )
    invite = result.scalar_one_or_none()
    if not invite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    try:
        if invite.receiver_id is None:
            # An older account-addressed row for the same trip would clash once this one is bound
            await db.execute(
                delete(TripInvite).where(
                    TripInvite.trip_id == invite.trip_id,
                    TripInvite.receiver_id == current_user.id,
                    TripInvite.id != invite.id,
                )
            )

        invite.receiver_id = current_user.id
        invite.receiver_email = None

        if action == "accept":
            invite.status = InviteStatus.accepted
            if not await is_user_already_member(db, invite.trip_id, current_user.id):
                await add_member(db, invite.trip_id, current_user.id)
        else:
            invite.status = InviteStatus.declined

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(f"User {current_user.id} {invite.status.value} invite {invite_id}")
    return "Invitation accepted" if action == "accept" else "Invitation declined"


async def delete_invite(db: AsyncSession, invite_id: int, current_user: User) -> None:
    result = await db.execute(
        select(TripInvite).where(
            TripInvite.id == invite_id,
            or_(TripInvite.sender_id == current_user.id, _addressed_to(current_user)),
        )
    )
    invite = result.scalar_one_or_none()
    if not invite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")

    await db.delete(invite)
    await db.commit()
