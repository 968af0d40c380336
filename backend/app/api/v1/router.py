"""API v1 router aggregation"""
from fastapi import APIRouter

from app.api.v1 import startups, financials, investments, fundraising, valuations, equity

api_router = APIRouter()

# Create a combined router for everything scoped to one startup
startup_scoped_router = APIRouter()

# Include startup-specific sub-routers (these have {startup_id} in their paths)
startup_scoped_router.include_router(financials.router, prefix="/{startup_id}/financials", tags=["Financials"])
startup_scoped_router.include_router(investments.router, prefix="/{startup_id}/investments", tags=["Investments"])
startup_scoped_router.include_router(fundraising.router, prefix="/{startup_id}/fundraising", tags=["Fundraising"])
startup_scoped_router.include_router(valuations.router, prefix="/{startup_id}/valuations", tags=["Valuations"])
startup_scoped_router.include_router(equity.router, prefix="/{startup_id}/equity", tags=["Equity"])

# Include all top-level routers
api_router.include_router(startups.router, prefix="/startups", tags=["Startups"])
api_router.include_router(startup_scoped_router, prefix="/startups")
