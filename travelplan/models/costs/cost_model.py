from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, Enum, Index, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime
from travelplan.core.database import Base
import enum


class CostCategory(str, enum.Enum):
    flight = "flight"
    hotel = "hotel"
    food = "food"
    transport = "transport"
    activity = "activity"
    other = "other"


class Cost(Base):
    __tablename__ = "costs"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    # Kept when the payer deletes their account
    paid_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Enum(CostCategory), nullable=False, default=CostCategory.other)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    trip = relationship("Trip", back_populates="costs")
    paid_by = relationship("User", foreign_keys=[paid_by_id])

    __table_args__ = (
        Index("ix_costs_trip_id", "trip_id"),
        Index("ix_costs_paid_by_id", "paid_by_id"),
        Index("ix_costs_date", "date"),
    )

    @property
    def payer_name(self):
        return self.paid_by.name if self.paid_by else None
