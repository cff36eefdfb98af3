from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum, Index, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from travelplan.core.database import Base
import enum


class PollStatus(str, enum.Enum):
    active = "active"
    closed = "closed"
    expired = "expired"


class Poll(Base):
    __tablename__ = "polls"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    question = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    options = Column(JSON, nullable=False, default=list)
    status = Column(Enum(PollStatus), nullable=False, default=PollStatus.active)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    trip = relationship("Trip", back_populates="polls")
    created_by = relationship("User", foreign_keys=[created_by_id])
    votes = relationship("Vote", back_populates="poll", passive_deletes=True)

    __table_args__ = (
        Index("ix_polls_trip_id", "trip_id"),
        Index("ix_polls_status", "status"),
    )

    @property
    def vote_count(self) -> int:
        return len(self.votes)

    def is_past_expiry(self, now: datetime) -> bool:
        return self.status == PollStatus.active and self.expires_at < now


class Vote(Base):
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    poll_id = Column(Integer, ForeignKey("polls.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    option = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    poll = relationship("Poll", back_populates="votes")
    user = relationship("User", foreign_keys=[user_id])

    # One vote per poll and user; a second vote updates this row
    __table_args__ = (
        UniqueConstraint("poll_id", "user_id", name="uq_vote_poll_user"),
        Index("ix_votes_poll_id", "poll_id"),
    )
