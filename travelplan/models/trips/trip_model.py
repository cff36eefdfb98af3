from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from travelplan.core.database import Base


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    creator = relationship("User", back_populates="created_trips")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Deletion of dependent rows is done explicitly in trip_service.purge_trip
    members = relationship("TripMember", back_populates="trip", passive_deletes=True)
    invites = relationship("TripInvite", back_populates="trip", passive_deletes=True)
    items = relationship("ItineraryItem", back_populates="trip", passive_deletes=True)
    costs = relationship("Cost", back_populates="trip", passive_deletes=True)
    tasks = relationship("Task", back_populates="trip", passive_deletes=True)
    polls = relationship("Poll", back_populates="trip", passive_deletes=True)

    @property
    def member_count(self) -> int:
        return len(self.members)
