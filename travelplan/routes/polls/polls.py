from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from travelplan.core.database import get_db
from travelplan.dependencies.auth import get_current_user
from travelplan.dependencies.trip_access import require_trip_access
from travelplan.models.trips.trip_model import Trip
from travelplan.models.user.user import User
from travelplan.schemas.auth.password_reset import MessageResponse
from travelplan.schemas.polls.poll import PollCreate, PollUpdate, PollResponse, VoteCreate, VoteResponse, VoteResult
from travelplan.services.polls import poll_service

router = APIRouter(prefix="/trips/{trip_id}/polls", tags=["Polls"])


@router.get("", response_model=List[PollResponse])
async def list_polls(
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await poll_service.list_polls(session, trip.id)


@router.post("", response_model=PollResponse, status_code=status.HTTP_201_CREATED)
async def create_poll(
    data: PollCreate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await poll_service.create_poll(session, trip.id, data, current_user)


@router.get("/{poll_id}", response_model=PollResponse)
async def get_poll(
    poll_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
):
    return await poll_service.get_poll(session, trip.id, poll_id)


@router.put("/{poll_id}", response_model=PollResponse)
async def update_poll(
    poll_id: int,
    data: PollUpdate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await poll_service.update_poll(session, trip.id, poll_id, data, current_user)


@router.delete("/{poll_id}", response_model=MessageResponse)
async def delete_poll(
    poll_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await poll_service.delete_poll(session, trip.id, poll_id, current_user)
    return {"message": "Poll deleted"}


@router.post(
    "/{poll_id}/vote",
    response_model=VoteResult,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": VoteResult, "description": "Existing vote changed"}},
)
async def vote(
    poll_id: int,
    data: VoteCreate,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    vote, created = await poll_service.cast_vote(session, trip.id, poll_id, data.option, current_user)
    result = VoteResult(
        vote=VoteResponse.model_validate(vote),
        message="Vote recorded successfully" if created else "Vote updated successfully",
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=jsonable_encoder(result),
    )


@router.delete("/{poll_id}/vote", response_model=MessageResponse)
async def remove_vote(
    poll_id: int,
    trip: Trip = Depends(require_trip_access),
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await poll_service.remove_vote(session, trip.id, poll_id, current_user)
    return {"message": "Vote removed"}
