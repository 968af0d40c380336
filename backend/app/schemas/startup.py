"""Schemas for startup profile APIs"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel


class OperationLocation(BaseModel):
    """A subsidiary or international operation of the startup"""
    country: Optional[str] = None
    name: Optional[str] = None


class CreateStartupRequest(BaseModel):
    """Request to register a startup"""
    name: str
    country_of_registration: Optional[str] = None
    currency: Optional[str] = None
    registration_date: Optional[date] = None
    subsidiaries: List[OperationLocation] = []
    international_ops: List[OperationLocation] = []
    total_funding: Decimal = Decimal("0")  # Legacy figure carried over from before investment records


class UpdateStartupRequest(BaseModel):
    """Partial update of a startup profile"""
    name: Optional[str] = None
    country_of_registration: Optional[str] = None
    currency: Optional[str] = None
    registration_date: Optional[date] = None
    subsidiaries: Optional[List[OperationLocation]] = None
    international_ops: Optional[List[OperationLocation]] = None


class StartupResponse(BaseModel):
    """Startup response"""
    id: int
    name: str
    country_of_registration: Optional[str]
    currency: str
    registration_date: Optional[date]
    subsidiaries: List[OperationLocation]
    international_ops: List[OperationLocation]
    total_funding: Decimal  # Cached value; see /investments/total-funding for the reconciled figure
    created_at: datetime

    class Config:
        from_attributes = True
