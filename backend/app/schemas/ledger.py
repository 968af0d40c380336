"""Schemas for the financial ledger APIs"""
import datetime as dt
from decimal import Decimal
from typing import Optional, List, Union
from pydantic import BaseModel

from app.models.ledger import RecordType


# =============================================================================
# Attachments
# =============================================================================

class AttachmentUpload(BaseModel):
    """Proof document sent inline with a record"""
    filename: str
    content_base64: str
    content_type: Optional[str] = None


# =============================================================================
# Ledger Record Schemas
# =============================================================================

class CreateLedgerRecordRequest(BaseModel):
    """
    Request to add a revenue or expense entry.

    Required fields are checked by the ledger store so that a missing field
    is reported the same way whether it comes from the API or elsewhere.
    """
    record_type: RecordType
    date: Optional[dt.date] = None
    entity: Optional[str] = None
    description: Optional[str] = None
    vertical: Optional[str] = None
    other_vertical_label: Optional[str] = None  # Used with "Other Expenses" / "Other Income"
    amount: Optional[Decimal] = None
    funding_source: Optional[str] = None  # Expense only
    cogs: Optional[Decimal] = None  # Revenue only
    attachment_url: Optional[str] = None  # Cloud drive link
    attachment: Optional[AttachmentUpload] = None


class UpdateLedgerRecordRequest(BaseModel):
    """Partial update; fields left out are not touched"""
    date: Optional[dt.date] = None
    entity: Optional[str] = None
    description: Optional[str] = None
    vertical: Optional[str] = None
    other_vertical_label: Optional[str] = None
    amount: Optional[Decimal] = None
    funding_source: Optional[str] = None
    cogs: Optional[Decimal] = None
    attachment_url: Optional[str] = None
    attachment: Optional[AttachmentUpload] = None


class LedgerRecordResponse(BaseModel):
    """Ledger record response"""
    id: int
    startup_id: int
    record_type: RecordType
    date: dt.date
    entity: str
    description: str
    vertical: str
    amount: Decimal
    funding_source: Optional[str]
    cogs: Optional[Decimal]
    attachment_url: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


# =============================================================================
# Aggregation Schemas
# =============================================================================

class FiltersResponse(BaseModel):
    entity: str
    year: Union[int, str]


class MonthlyFinancialData(BaseModel):
    """One bar of the monthly revenue/expense chart"""
    month_name: str  # "Jan" for a single year, "2024-Jan" across all years
    revenue: Decimal
    expenses: Decimal


class VerticalData(BaseModel):
    name: str
    value: Decimal


class FinancialSummaryResponse(BaseModel):
    total_revenue: Decimal
    total_expenses: Decimal
    total_funding: Decimal
    available_funds: Decimal


class FinancialsResponse(BaseModel):
    """Complete financials panel for one filter selection"""
    startup_id: int
    currency: str
    filters: FiltersResponse
    monthly: List[MonthlyFinancialData]
    revenue_by_vertical: List[VerticalData]
    expenses_by_vertical: List[VerticalData]
    summary: FinancialSummaryResponse
    expenses: List[LedgerRecordResponse]
    revenues: List[LedgerRecordResponse]
    entities: List[str]
    verticals: List[str]
    available_years: List[Union[int, str]]
    funding_sources: List[str]

    @classmethod
    def from_panel(cls, panel) -> "FinancialsResponse":
        """Build from a loaded FinancialsPanel"""
        snapshot = panel.snapshot
        return cls(
            **panel.to_dict(),
            expenses=[LedgerRecordResponse.model_validate(r) for r in snapshot.expenses],
            revenues=[LedgerRecordResponse.model_validate(r) for r in snapshot.revenues],
        )
