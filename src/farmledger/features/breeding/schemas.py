from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime

from ..herd.schemas import GoatSummary

BreedingMethod = Literal["natural", "artificial-insemination"]
BreedingStatus = Literal["mated", "pregnancy-confirmed", "pregnant", "kidding", "completed", "failed"]


class BreedingRecordCreate(BaseModel):
    doe_public_id: str
    buck_public_id: str
    mating_date: datetime.datetime
    pregnancy_confirmed: bool = False
    confirmation_date: Optional[datetime.datetime] = None
    breeding_method: BreedingMethod = "natural"
    breeding_cost: float = Field(0.0, ge=0)
    veterinary_cost: float = Field(0.0, ge=0)
    status: BreedingStatus = "mated"
    notes: Optional[str] = None


class BreedingRecordUpdate(BaseModel):
    pregnancy_confirmed: Optional[bool] = None
    confirmation_date: Optional[datetime.datetime] = None
    kidding_date: Optional[datetime.datetime] = None
    kids_born: Optional[int] = Field(None, ge=0)
    kids_survived: Optional[int] = Field(None, ge=0)
    breeding_method: Optional[BreedingMethod] = None
    breeding_cost: Optional[float] = Field(None, ge=0)
    veterinary_cost: Optional[float] = Field(None, ge=0)
    status: Optional[BreedingStatus] = None
    notes: Optional[str] = None


class BreedingRecordResponse(BaseModel):
    public_id: str
    doe: GoatSummary
    buck: GoatSummary
    mating_date: datetime.datetime
    expected_due_date: datetime.datetime
    pregnancy_confirmed: bool
    confirmation_date: Optional[datetime.datetime] = None
    kidding_date: Optional[datetime.datetime] = None
    kids_born: int
    kids_survived: int
    breeding_method: BreedingMethod
    breeding_cost: float
    veterinary_cost: float
    status: BreedingStatus
    notes: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True)


class PaginatedBreedingRecordResponse(BaseModel):
    items: List[BreedingRecordResponse]
    total: int
    page: int
    size: int
