"""Report API Schemas

Pydantic models for the time-bucketed reports, the inventory snapshot and
the drill-down listings. Field names are snake_case in Python and camelCase
on the wire (``invoices_count`` -> ``invoicesCount``); CSV headers use the
same camelCase names, so every ``*_CSV_COLUMNS`` list below matches the
aliases of the row model it exports."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Dict, List, Literal, Optional
import datetime

Group = Literal["day", "week", "month"]

BREEDING_REPORT_TYPES = ("matings", "pregnancies", "kiddings", "all")
BREEDING_DETAIL_TYPES = ("matings", "pregnancies", "kiddings")


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DateRange(ReportModel):
    start: datetime.datetime
    end: datetime.datetime


class Pagination(ReportModel):
    page: int
    limit: int


# Sales
class SalesTotals(ReportModel):
    invoices_count: int = 0
    goat_quantity: int = 0
    revenue: float = 0.0


class SalesRow(SalesTotals):
    period: str


class SalesReport(ReportModel):
    range: DateRange
    group: Group
    summary: List[SalesRow]
    totals: SalesTotals
    elapsed_ms: int = 0


# Finance
class FinanceTotals(ReportModel):
    revenue: float = 0.0
    feed_cost: float = 0.0
    health_cost: float = 0.0
    breeding_cost: float = 0.0
    total_cost: float = 0.0
    net: float = 0.0


class FinanceRow(FinanceTotals):
    period: str


class FinanceReport(ReportModel):
    range: DateRange
    group: Group
    summary: List[FinanceRow]
    totals: FinanceTotals
    elapsed_ms: int = 0


# Feed
class FeedFilters(ReportModel):
    feed_type: Optional[str] = None
    unit: Optional[str] = None


class FeedTotals(ReportModel):
    records: int = 0
    total_quantity: float = 0.0
    total_cost: float = 0.0


class FeedRow(FeedTotals):
    period: str


class FeedReport(ReportModel):
    range: DateRange
    group: Group
    filters: FeedFilters
    summary: List[FeedRow]
    totals: FeedTotals
    elapsed_ms: int = 0


# Health
class HealthTotals(ReportModel):
    records: int = 0
    total_cost: float = 0.0


class HealthRow(HealthTotals):
    period: str


class HealthReport(ReportModel):
    range: DateRange
    group: Group
    type: str
    summary: List[HealthRow]
    totals: HealthTotals
    overdue_count: int
    upcoming_count: int
    elapsed_ms: int = 0


# Breeding: columns a single-type report does not cover are left as None and
# dropped from the response.
class BreedingTotals(ReportModel):
    matings: Optional[int] = None
    pregnancies: Optional[int] = None
    kiddings: Optional[int] = None
    kids_born: Optional[int] = None
    kids_survived: Optional[int] = None
    avg_litter_size: Optional[float] = None


class BreedingRow(BreedingTotals):
    period: str


class BreedingReport(ReportModel):
    range: DateRange
    group: Group
    type: str
    summary: List[BreedingRow]
    totals: BreedingTotals
    elapsed_ms: int = 0


# Inventory
class InventoryFilters(ReportModel):
    breed: Optional[str] = None
    gender: Optional[str] = None


class StatusCount(ReportModel):
    status: str
    count: int


class AgeBucketCount(ReportModel):
    bucket: str
    count: int


class InventoryReport(ReportModel):
    filters: InventoryFilters
    total_goats: int
    status_counts: List[StatusCount]
    age_buckets: List[AgeBucketCount]


# Drill-down rows
class GoatRef(ReportModel):
    public_id: str
    tag_number: str
    name: str


class SaleDetailRow(ReportModel):
    invoice_number: str
    date: datetime.datetime
    buyer_name: str
    items_count: int
    goat_quantity: int
    total_amount: float


class FeedDetailRow(ReportModel):
    public_id: str
    date: datetime.datetime
    goat: Optional[GoatRef] = None
    pen: Optional[str] = None
    feed_type: str
    unit: str
    quantity: float
    cost: Optional[float] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None


class HealthDetailRow(ReportModel):
    public_id: str
    date: datetime.datetime
    goat: GoatRef
    type: str
    description: str
    cost: Optional[float] = None
    veterinarian: Optional[str] = None
    next_due_date: Optional[datetime.datetime] = None


class BreedingDetailRow(ReportModel):
    public_id: str
    doe: GoatRef
    buck: GoatRef
    mating_date: datetime.datetime
    confirmation_date: Optional[datetime.datetime] = None
    kidding_date: Optional[datetime.datetime] = None
    kids_born: int
    kids_survived: int
    status: str
    breeding_method: str
    breeding_cost: float
    veterinary_cost: float


class SalesDetails(ReportModel):
    period: str
    group: Group
    pagination: Pagination
    rows: List[SaleDetailRow]
    elapsed_ms: int = 0


class FeedDetails(ReportModel):
    period: str
    group: Group
    filters: FeedFilters
    pagination: Pagination
    rows: List[FeedDetailRow]
    elapsed_ms: int = 0


class HealthDetailFilters(ReportModel):
    type: str


class HealthDetails(ReportModel):
    period: str
    group: Group
    filters: HealthDetailFilters
    pagination: Pagination
    rows: List[HealthDetailRow]
    elapsed_ms: int = 0


class BreedingDetails(ReportModel):
    period: str
    group: Group
    type: str
    pagination: Pagination
    rows: List[BreedingDetailRow]
    elapsed_ms: int = 0


SALES_CSV_COLUMNS = ["period", "invoicesCount", "goatQuantity", "revenue"]
FINANCE_CSV_COLUMNS = ["period", "revenue", "feedCost", "healthCost", "breedingCost", "totalCost", "net"]
FEED_CSV_COLUMNS = ["period", "records", "totalQuantity", "totalCost"]
HEALTH_CSV_COLUMNS = ["period", "records", "totalCost"]
BREEDING_CSV_COLUMNS: Dict[str, List[str]] = {
    "matings": ["period", "matings"],
    "pregnancies": ["period", "pregnancies"],
    "kiddings": ["period", "kiddings", "kidsBorn", "kidsSurvived", "avgLitterSize"],
    "all": ["period", "matings", "pregnancies", "kiddings", "kidsBorn", "kidsSurvived", "avgLitterSize"],
}
INVENTORY_CSV_COLUMNS = ["category", "label", "count"]
