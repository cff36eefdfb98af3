from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from travelplan.core.database import Base
import enum


class ItemType(str, enum.Enum):
    activity = "activity"
    flight = "flight"
    transport = "transport"
    accommodation = "accommodation"
    food = "food"
    shopping = "shopping"
    other = "other"


# Item types that go from one place to another instead of happening at one
ROUTE_ITEM_TYPES = {ItemType.flight, ItemType.transport}


class ItineraryItem(Base):
    __tablename__ = "itinerary_items"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    type = Column(Enum(ItemType), nullable=False, default=ItemType.activity)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    location = Column(String, nullable=True)
    start_location = Column(String, nullable=True)
    end_location = Column(String, nullable=True)
    confirmation_code = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    trip = relationship("Trip", back_populates="items")
    created_by = relationship("User", foreign_keys=[created_by_id])

    __table_args__ = (
        Index("ix_itinerary_items_trip_id", "trip_id"),
        Index("ix_itinerary_items_start_date", "start_date"),
    )

    def apply_location_rule(self):
        """Flights and transport keep a start/end location, everything else a single one."""
        if self.type in ROUTE_ITEM_TYPES:
            self.location = None
        else:
            self.start_location = None
            self.end_location = None
