"""
Pydantic schemas for rentable equipment.
"""

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from smartfarm.core.ids import Identifier


class Equipment(BaseModel):
    id: Identifier = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    type: Optional[str] = None
    price: Decimal = Field(..., ge=0)  # per day
    description: Optional[str] = None
    available: Optional[bool] = None

    model_config = {"extra": "ignore"}


class RentalQuote(BaseModel):
    days: int
    rate: Decimal
    total: Decimal
