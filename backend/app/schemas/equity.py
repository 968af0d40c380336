"""Schemas for founders, share structure and equity distribution"""
import datetime as dt
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel


class FounderRequest(BaseModel):
    """A founder as entered on the cap table form"""
    name: Optional[str] = None
    email: Optional[str] = None
    shares: int = 0
    equity_percentage: Decimal = Decimal("0")
    mentor_code: Optional[str] = None


class ReplaceFoundersRequest(BaseModel):
    """The complete founder list; existing founders are replaced"""
    founders: List[FounderRequest] = []


class FounderResponse(BaseModel):
    id: int
    startup_id: int
    name: str
    email: str
    shares: int
    equity_percentage: Decimal
    mentor_code: Optional[str]
    created_at: dt.datetime

    class Config:
        from_attributes = True


class UpdateSharesRequest(BaseModel):
    """Partial update of the share structure"""
    total_shares: Optional[int] = None
    esop_reserved_shares: Optional[int] = None
    price_per_share: Optional[Decimal] = None


class StartupSharesResponse(BaseModel):
    """Share structure; all zeros until first saved"""
    startup_id: int
    total_shares: int
    esop_reserved_shares: int
    price_per_share: Decimal
    updated_at: Optional[dt.datetime] = None


class EquityHoldingResponse(BaseModel):
    """One slice of the equity distribution chart"""
    holder_type: str  # Founder or Investor
    holder_name: str
    equity_percentage: Decimal
    total_amount: Decimal
