from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime

from ..herd.schemas import GoatSummary

HealthType = Literal["Vaccination", "Deworming", "Treatment", "Checkup", "Surgery", "Other"]


class HealthRecordCreate(BaseModel):
    goat_public_id: str
    date: Optional[datetime.datetime] = Field(None, description="Defaults to now")
    type: HealthType
    description: str = Field(..., min_length=1)
    veterinarian: Optional[str] = Field(None, max_length=255)
    cost: Optional[float] = Field(None, ge=0)
    next_due_date: Optional[datetime.datetime] = Field(None, description="When the follow-up treatment is due")
    notes: Optional[str] = None


class HealthRecordUpdate(BaseModel):
    goat_public_id: Optional[str] = None
    date: Optional[datetime.datetime] = None
    type: Optional[HealthType] = None
    description: Optional[str] = Field(None, min_length=1)
    veterinarian: Optional[str] = Field(None, max_length=255)
    cost: Optional[float] = Field(None, ge=0)
    next_due_date: Optional[datetime.datetime] = None
    notes: Optional[str] = None


class HealthRecordResponse(BaseModel):
    public_id: str
    goat: GoatSummary
    date: datetime.datetime
    type: HealthType
    description: str
    veterinarian: Optional[str] = None
    cost: Optional[float] = None
    next_due_date: Optional[datetime.datetime] = None
    notes: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PaginatedHealthRecordResponse(BaseModel):
    items: List[HealthRecordResponse]
    total: int
    page: int
    size: int


class DueHealthRecordsResponse(BaseModel):
    """Follow-up treatments split around "now"."""
    overdue: List[HealthRecordResponse]
    upcoming: List[HealthRecordResponse]
    window_days: int
