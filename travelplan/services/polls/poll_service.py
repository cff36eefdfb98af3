from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from fastapi import HTTPException, status
from typing import List, Tuple

from travelplan.core.logger import logger
from travelplan.models.polls.poll_models import Poll, PollStatus, Vote
from travelplan.models.user.user import User
from travelplan.schemas.polls.poll import PollCreate, PollUpdate
from travelplan.utils.dates import utcnow


def _with_votes(query):
    return query.options(
        selectinload(Poll.created_by),
        selectinload(Poll.votes).selectinload(Vote.user),
    ).execution_options(populate_existing=True)


async def _expire_overdue(session: AsyncSession, polls: List[Poll]) -> None:
    """Switch active polls past their deadline to expired and persist it."""
    now = utcnow()
    overdue = [poll for poll in polls if poll.is_past_expiry(now)]
    if not overdue:
        return
    for poll in overdue:
        poll.status = PollStatus.expired
    await session.commit()
    logger.info(f"Marked {len(overdue)} poll(s) as expired")


async def _fetch_poll(session: AsyncSession, trip_id: int, poll_id: int) -> Poll:
    result = await session.execute(
        _with_votes(select(Poll)).where(Poll.id == poll_id, Poll.trip_id == trip_id)
    )
    poll = result.scalar_one_or_none()
    if not poll:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Poll not found")
    return poll


def _require_creator(poll: Poll, user: User, action: str) -> None:
    if poll.created_by_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the poll creator can {action} this poll",
        )


async def list_polls(session: AsyncSession, trip_id: int) -> List[Poll]:
    result = await session.execute(
        _with_votes(select(Poll)).where(Poll.trip_id == trip_id).order_by(Poll.created_at.desc(), Poll.id.desc())
    )
    polls = result.scalars().all()
    await _expire_overdue(session, polls)
    return polls


async def create_poll(session: AsyncSession, trip_id: int, data: PollCreate, current_user: User) -> Poll:
    poll = Poll(
        trip_id=trip_id,
        created_by_id=current_user.id,
        question=data.question,
        description=data.description,
        options=data.options,
        expires_at=data.expires_at,
        status=PollStatus.active,
    )
    session.add(poll)
    await session.commit()
    logger.info(f"Poll {poll.id} created on trip {trip_id} by user {current_user.id}")
    return await _fetch_poll(session, trip_id, poll.id)


async def get_poll(session: AsyncSession, trip_id: int, poll_id: int) -> Poll:
    poll = await _fetch_poll(session, trip_id, poll_id)
    await _expire_overdue(session, [poll])
    return poll


async def update_poll(session: AsyncSession, trip_id: int, poll_id: int, data: PollUpdate, current_user: User) -> Poll:
    poll = await _fetch_poll(session, trip_id, poll_id)
    _require_creator(poll, current_user, "update")

    update_fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None or k == "description"}
    for field, value in update_fields.items():
        setattr(poll, field, value)

    await session.commit()
    return await _fetch_poll(session, trip_id, poll_id)


async def delete_poll(session: AsyncSession, trip_id: int, poll_id: int, current_user: User) -> None:
    poll = await _fetch_poll(session, trip_id, poll_id)
    _require_creator(poll, current_user, "delete")

    try:
        await session.execute(delete(Vote).where(Vote.poll_id == poll_id))
        await session.execute(delete(Poll).where(Poll.id == poll_id))
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info(f"Poll {poll_id} deleted by user {current_user.id}")


async def cast_vote(session: AsyncSession, trip_id: int, poll_id: int, option: str, current_user: User) -> Tuple[Vote, bool]:
    """
    Record the user's choice on a poll.

    Returns the vote and whether it was newly created; a user who already
    voted has their existing vote changed instead.
    """
    poll = await _fetch_poll(session, trip_id, poll_id)

    if poll.status != PollStatus.active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Poll is not active")

    if poll.is_past_expiry(utcnow()):
        poll.status = PollStatus.expired
        await session.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Poll has expired")

    if option not in poll.options:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid option")

    vote = next((v for v in poll.votes if v.user_id == current_user.id), None)
    created = vote is None
    if created:
        vote = Vote(poll_id=poll.id, user_id=current_user.id, option=option)
        session.add(vote)
    else:
        vote.option = option

    await session.commit()

    result = await session.execute(
        select(Vote)
        .options(selectinload(Vote.user))
        .where(Vote.id == vote.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one(), created


async def remove_vote(session: AsyncSession, trip_id: int, poll_id: int, current_user: User) -> None:
    await _fetch_poll(session, trip_id, poll_id)
    await session.execute(
        delete(Vote).where(Vote.poll_id == poll_id, Vote.user_id == current_user.id)
    )
    await session.commit()
