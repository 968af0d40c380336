"""Schemas for cap table APIs: investments, fundraising, valuations"""
import datetime as dt
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class InvestorType(str, Enum):
    """Kinds of investors"""
    ANGEL = "Angel"
    VC_FIRM = "VC Firm"
    CORPORATE = "Corporate"
    GOVERNMENT = "Government"
    INCUBATION_CENTER = "Incubation Center"
    ACCELERATOR = "Accelerator"
    FAMILY_OFFICE = "Family Office"
    OTHER = "Other"


class InvestmentRoundType(str, Enum):
    """Instrument of an investment"""
    EQUITY = "Equity"
    DEBT = "Debt"
    GRANT = "Grant"


class FundraisingRoundType(str, Enum):
    """Types of fundraising rounds"""
    PRE_SEED = "Pre-Seed"
    SEED = "Seed"
    SERIES_A = "Series A"
    SERIES_B = "Series B"
    SERIES_C = "Series C"
    BRIDGE = "Bridge"
    GRANT = "Grant"
    DEBT = "Debt"


# =============================================================================
# Investment Schemas
# =============================================================================

class AddInvestmentRequest(BaseModel):
    """Request to record an investment; required fields are checked by the store"""
    date: Optional[dt.date] = None
    investor_type: Optional[InvestorType] = None
    investment_type: Optional[InvestmentRoundType] = None
    investor_name: Optional[str] = None
    investor_code: Optional[str] = None
    amount: Optional[Decimal] = None
    equity_allocated: Optional[Decimal] = None  # Percent
    shares: Optional[int] = None
    price_per_share: Optional[Decimal] = None
    pre_money_valuation: Optional[Decimal] = None
    post_money_valuation: Optional[Decimal] = None
    proof_url: Optional[str] = None


class UpdateInvestmentRequest(BaseModel):
    """Partial update of an investment record"""
    date: Optional[dt.date] = None
    investor_type: Optional[InvestorType] = None
    investment_type: Optional[InvestmentRoundType] = None
    investor_name: Optional[str] = None
    investor_code: Optional[str] = None
    amount: Optional[Decimal] = None
    equity_allocated: Optional[Decimal] = None
    shares: Optional[int] = None
    price_per_share: Optional[Decimal] = None
    pre_money_valuation: Optional[Decimal] = None
    post_money_valuation: Optional[Decimal] = None
    proof_url: Optional[str] = None


class InvestmentResponse(BaseModel):
    """Investment record response"""
    id: int
    startup_id: int
    date: dt.date
    investor_type: str
    investment_type: str
    investor_name: str
    investor_code: Optional[str]
    amount: Decimal
    equity_allocated: Decimal
    shares: Optional[int]
    price_per_share: Optional[Decimal]
    pre_money_valuation: Optional[Decimal]
    post_money_valuation: Optional[Decimal]
    proof_url: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


class TotalFundingResponse(BaseModel):
    """Reconciled total funding"""
    startup_id: int
    total_funding: Decimal  # Sum of investment records, else the cached figure
    cached_total_funding: Decimal
    investment_count: int


class InvestmentSummaryResponse(BaseModel):
    """Funding split by instrument"""
    total_equity_funding: Decimal
    total_debt_funding: Decimal
    total_grant_funding: Decimal
    total_investments: int
    avg_equity_allocated: Decimal


class InvestmentOptionsResponse(BaseModel):
    investor_types: List[str]
    investment_types: List[str]
    round_types: List[str]


# =============================================================================
# Fundraising Schemas
# =============================================================================

class FundraisingDetailsRequest(BaseModel):
    """Create or update the startup's fundraising round"""
    id: Optional[int] = None  # Target a specific row
    active: bool = False
    type: Optional[FundraisingRoundType] = None
    value: Decimal = Decimal("0")
    equity: Decimal = Decimal("0")
    domain: Optional[str] = None
    stage: Optional[str] = None
    validation_requested: bool = False
    pitch_deck_url: Optional[str] = None
    pitch_video_url: Optional[str] = None
    business_plan_url: Optional[str] = None
    one_pager_url: Optional[str] = None
    website_url: Optional[str] = None
    linkedin_url: Optional[str] = None


class FundraisingDetailsResponse(BaseModel):
    """Fundraising round response"""
    id: int
    startup_id: int
    active: bool
    type: str
    value: Decimal
    equity: Decimal
    domain: Optional[str]
    stage: Optional[str]
    validation_requested: bool
    pitch_deck_url: Optional[str]
    pitch_video_url: Optional[str]
    business_plan_url: Optional[str]
    one_pager_url: Optional[str]
    website_url: Optional[str]
    linkedin_url: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


# =============================================================================
# Valuation Schemas
# =============================================================================

class CreateValuationRequest(BaseModel):
    """Request to record a valuation"""
    date: Optional[dt.date] = None
    valuation: Optional[Decimal] = None
    round_type: Optional[str] = None
    investment_amount: Decimal = Decimal("0")
    notes: Optional[str] = None


class ValuationResponse(BaseModel):
    """Valuation record response"""
    id: int
    date: dt.date
    valuation: Decimal
    round_type: str
    investment_amount: Decimal
    notes: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


class ValuationHistoryPoint(BaseModel):
    """One point of the valuation chart"""
    round_name: str
    valuation: Decimal
    investment_amount: Decimal
    date: dt.date
