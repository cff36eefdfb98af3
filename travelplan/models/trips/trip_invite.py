from sqlalchemy import Integer, Column, String, ForeignKey, Enum, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from travelplan.core.database import Base
from datetime import datetime
import enum


class InviteStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class TripInvite(Base):
    """Invitation to a trip, addressed to a registered user or to a bare email.

    Exactly one of ``receiver_id`` and ``receiver_email`` is set. Email-only
    invites are matched against the user's address once they sign up, and
    become id-addressed when answered.
    """
    __tablename__ = "trip_invites"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    receiver_email = Column(String, nullable=True, index=True)
    status = Column(Enum(InviteStatus), default=InviteStatus.pending, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("trip_id", "receiver_id", name="uq_invite_trip_receiver"),
        UniqueConstraint("trip_id", "receiver_email", name="uq_invite_trip_email"),
    )

    trip = relationship("Trip", back_populates="invites")
    sender = relationship("User", back_populates="sent_invites", foreign_keys=[sender_id])
    receiver = relationship("User", back_populates="received_invites", foreign_keys=[receiver_id])
