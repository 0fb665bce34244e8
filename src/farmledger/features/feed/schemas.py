from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime

from ..herd.schemas import GoatSummary

FeedType = Literal[
    "Hay", "Grain", "Pasture", "Silage", "Mineral", "Mineral Supplement",
    "Concentrate", "Pellets", "Water", "Other",
]
FeedUnit = Literal["kg", "lbs", "liters", "gallons", "bales", "scoops"]
FeedingTime = Literal["Morning", "Afternoon", "Evening", "Night", "Continuous"]


class FeedRecordBase(BaseModel):
    pen: Optional[str] = Field(None, max_length=50, description="Pen fed, when not feeding a single goat")
    feed_type: FeedType
    quantity: float = Field(..., ge=0)
    unit: FeedUnit
    cost: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    feeding_time: Optional[FeedingTime] = None
    consumed: Optional[float] = Field(None, ge=0)
    waste: Optional[float] = Field(None, ge=0)


class FeedRecordCreate(FeedRecordBase):
    goat_public_id: Optional[str] = None
    date: Optional[datetime.datetime] = Field(None, description="Defaults to now")


class FeedRecordUpdate(BaseModel):
    goat_public_id: Optional[str] = None
    pen: Optional[str] = Field(None, max_length=50)
    date: Optional[datetime.datetime] = None
    feed_type: Optional[FeedType] = None
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[FeedUnit] = None
    cost: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    feeding_time: Optional[FeedingTime] = None
    consumed: Optional[float] = Field(None, ge=0)
    waste: Optional[float] = Field(None, ge=0)


class FeedRecordResponse(FeedRecordBase):
    public_id: str
    goat: Optional[GoatSummary] = None
    date: datetime.datetime
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PaginatedFeedRecordResponse(BaseModel):
    items: List[FeedRecordResponse]
    total: int
    page: int
    size: int
