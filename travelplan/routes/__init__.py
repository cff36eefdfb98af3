# travelplan/routes/__init__.py
from fastapi import APIRouter
from travelplan.routes.auth import auth, password_reset, profile
from travelplan.routes.trip import trip_routes, trip_member, invitation
from travelplan.routes.itinerary import items
from travelplan.routes.costs import costs
from travelplan.routes.tasks import tasks
from travelplan.routes.polls import polls
from travelplan.routes.users import search


api_router = APIRouter()


# Auth routes
api_router.include_router(auth.router)
api_router.include_router(password_reset.router)
api_router.include_router(profile.router)
api_router.include_router(search.router)

# Trip routes
api_router.include_router(trip_routes.router)
api_router.include_router(trip_member.router)
api_router.include_router(invitation.trip_router)
api_router.include_router(invitation.router)

# Planning inside a trip
api_router.include_router(items.router)
api_router.include_router(costs.router)
api_router.include_router(tasks.router)
api_router.include_router(polls.router)
