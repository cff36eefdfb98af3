from sqlalchemy import Column, String, Boolean, Integer, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from travelplan.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    auth_type = Column(String, default="local")  # local, google
    is_active = Column(Boolean, default=True)
    email_verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    created_trips = relationship("Trip", back_populates="creator")
    memberships = relationship("TripMember", back_populates="user")

    sent_invites = relationship("TripInvite", back_populates="sender", foreign_keys="TripInvite.sender_id")
    received_invites = relationship("TripInvite", back_populates="receiver", foreign_keys="TripInvite.receiver_id")

    @property
    def is_verified(self) -> bool:
        return self.email_verified_at is not None
