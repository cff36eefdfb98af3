from .user.user import User
from .trips.trip_model import Trip
from .trips.trip_member import TripMember, TripRole
from .trips.trip_invite import TripInvite, InviteStatus
from .itinerary.itinerary_item import ItineraryItem, ItemType
from .costs.cost_model import Cost, CostCategory
from .tasks.task_model import Task, TaskCategory, TaskStatus, TaskPriority
from .polls.poll_models import Poll, Vote, PollStatus
