from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
import datetime

Breed = Literal[
    "Boer", "Nubian", "Alpine", "Saanen", "Toggenburg", "LaMancha", "Jamunapari",
    "Sirohi", "Barbari", "Osmanabadi", "Malabari", "Surti", "Jakhrana", "Marwari",
    "Mixed", "Other",
]
Gender = Literal["Male", "Female"]
GoatStatus = Literal["Active", "Sold", "Deceased", "Retired"]


class GoatBase(BaseModel):
    tag_number: str = Field(..., min_length=1, max_length=50, description="Ear tag number, unique per farm")
    name: str = Field(..., min_length=1, max_length=100)
    breed: Breed
    gender: Gender
    date_of_birth: datetime.date
    color: Optional[str] = Field(None, max_length=50)
    pen: Optional[str] = Field(None, max_length=50, description="Pen or section the goat is kept in")
    notes: Optional[str] = None


class GoatCreate(GoatBase):
    status: GoatStatus = "Active"


class GoatUpdate(BaseModel):
    tag_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    breed: Optional[Breed] = None
    gender: Optional[Gender] = None
    date_of_birth: Optional[datetime.date] = None
    color: Optional[str] = Field(None, max_length=50)
    status: Optional[GoatStatus] = None
    pen: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class GoatSummary(BaseModel):
    """Compact goat reference embedded in other records."""
    public_id: str
    tag_number: str
    name: str
    breed: str

    model_config = ConfigDict(from_attributes=True)


class GoatResponse(GoatBase):
    public_id: str = Field(..., description="Public unique identifier for the goat (KSUID)")
    status: GoatStatus
    sale_price: Optional[float] = None
    sale_date: Optional[datetime.datetime] = None
    is_pregnant: bool = False
    due_date: Optional[datetime.datetime] = None
    last_breeding: Optional[datetime.datetime] = None
    sire_public_id: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class PaginatedGoatResponse(BaseModel):
    items: List[GoatResponse]
    total: int
    page: int
    size: int
