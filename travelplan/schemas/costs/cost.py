from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, List
from datetime import datetime
from decimal import Decimal
from travelplan.models.costs.cost_model import CostCategory
from travelplan.schemas.user.user import UserBrief
from travelplan.utils.text import require_text


def _clean_currency(v: Optional[str]) -> Optional[str]:
    return v.upper() if v else v


class CostCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    description: str = Field(..., min_length=1)
    category: CostCategory = CostCategory.other
    date: Optional[datetime] = None
    paid_by_id: Optional[int] = None

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        return require_text(v, "Description")

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return _clean_currency(v)


class CostUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[CostCategory] = None
    date: Optional[datetime] = None
    paid_by_id: Optional[int] = None

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Description")

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v):
        return _clean_currency(v)


class CostResponse(BaseModel):
    id: int
    trip_id: int
    amount: Decimal
    currency: str
    description: str
    category: CostCategory
    date: datetime
    paid_by_id: Optional[int] = None
    paid_by: Optional[UserBrief] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PayerTotal(BaseModel):
    # payer_id is None for costs whose payer deleted their account
    payer_id: Optional[int] = None
    name: str
    totals: Dict[str, Decimal]


class CostSummary(BaseModel):
    cost_count: int
    total_by_currency: Dict[str, Decimal]
    total_by_category: Dict[str, Dict[str, Decimal]]
    total_by_payer: List[PayerTotal]
