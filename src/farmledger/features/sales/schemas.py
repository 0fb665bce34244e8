from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional
import datetime

from ..herd.schemas import GoatSummary


class Buyer(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Buyer name (required)")
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class SaleItemCreate(BaseModel):
    goat_public_id: Optional[str] = Field(None, description="Public KSUID of the goat being sold, if any")
    description: Optional[str] = Field(None, max_length=255)
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(..., ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    total: Optional[float] = Field(None, ge=0, description="Defaults to quantity * unit_price")

    @model_validator(mode="after")
    def require_description_without_goat(self):
        if not self.goat_public_id and not self.description:
            raise ValueError("description is required for items without an animal")
        return self


class SaleCreate(BaseModel):
    buyer: Buyer
    items: List[SaleItemCreate] = Field(..., min_length=1)
    tax_rate: float = Field(0.0, ge=0, description="Fraction, e.g. 0.05 for 5%")
    date: Optional[datetime.datetime] = Field(None, description="Sale date, defaults to now")
    notes: Optional[str] = None


class SaleUpdate(BaseModel):
    buyer: Optional[Buyer] = None
    items: Optional[List[SaleItemCreate]] = Field(None, min_length=1)
    tax_rate: Optional[float] = Field(None, ge=0)
    date: Optional[datetime.datetime] = None
    notes: Optional[str] = None


class SaleItemResponse(BaseModel):
    goat: Optional[GoatSummary] = None
    description: str
    quantity: int
    unit_price: float
    weight_kg: Optional[float] = None
    total: float


class SaleResponse(BaseModel):
    public_id: str
    invoice_number: str
    date: datetime.datetime
    buyer: Buyer
    items: List[SaleItemResponse]
    sub_total: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    notes: Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class PaginatedSaleResponse(BaseModel):
    items: List[SaleResponse]
    total: int
    page: int
    size: int
