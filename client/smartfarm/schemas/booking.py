"""
Pydantic schemas for booking request/response validation.

Wire names are camelCase (``equipmentId``, ``startDate``); attributes are
snake_case. Server dates may carry a time component and are reduced to the
calendar day.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, model_validator

from smartfarm.core.dates import parse_api_date
from smartfarm.core.ids import Identifier

ApiDate = Annotated[date, BeforeValidator(parse_api_date)]


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class Booking(BaseModel):
    id: Identifier = Field(validation_alias=AliasChoices("id", "_id"))
    equipment_id: Identifier = Field(validation_alias=AliasChoices("equipmentId", "equipment_id"))
    user_id: Optional[Identifier] = Field(None, validation_alias=AliasChoices("userId", "user_id"))
    owner_id: Optional[Identifier] = Field(None, validation_alias=AliasChoices("ownerId", "owner_id"))
    start_date: ApiDate = Field(validation_alias=AliasChoices("startDate", "start_date"))
    end_date: ApiDate = Field(validation_alias=AliasChoices("endDate", "end_date"))
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("createdAt", "created_at"))
    updated_at: Optional[datetime] = Field(None, validation_alias=AliasChoices("updatedAt", "updated_at"))

    model_config = {"extra": "ignore"}


class BookingCreate(BaseModel):
    equipment_id: Identifier = Field(serialization_alias="equipmentId")
    start_date: date = Field(serialization_alias="startDate")
    end_date: date = Field(serialization_alias="endDate")

    @model_validator(mode="after")
    def check_order(self) -> "BookingCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_payload(self) -> dict[str, Any]:
        """JSON body for POST /api/booking, dates as YYYY-MM-DD."""
        return self.model_dump(mode="json", by_alias=True)
