from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from travelplan.models.itinerary.itinerary_item import ItemType
from travelplan.models.costs.cost_model import CostCategory
from travelplan.schemas.user.user import UserBrief
from travelplan.schemas.costs.cost import CostResponse
from travelplan.utils.text import require_text


class ItemBase(BaseModel):
    type: ItemType
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    confirmation_code: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return require_text(v, "Title")


class ItemCreate(ItemBase):
    # Optional cost booked together with the item
    has_cost: bool = False
    cost_amount: Optional[Decimal] = Field(None, decimal_places=2)
    cost_currency: str = Field(default="USD", min_length=3, max_length=3)
    cost_category: CostCategory = CostCategory.other
    cost_date: Optional[datetime] = None


class ItemUpdate(BaseModel):
    type: Optional[ItemType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    start_location: Optional[str] = None
    end_location: Optional[str] = None
    confirmation_code: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Title")


class ItemResponse(ItemBase):
    id: int
    trip_id: int
    created_by_id: Optional[int] = None
    created_by: Optional[UserBrief] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ItemCreateResponse(BaseModel):
    item: ItemResponse
    cost: Optional[CostResponse] = None
