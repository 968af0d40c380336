"""Founders, share structure and equity distribution API endpoints"""
from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import get_db
from app.models.equity import StartupShares
from app.schemas.equity import (
    FounderRequest,
    ReplaceFoundersRequest,
    FounderResponse,
    UpdateSharesRequest,
    StartupSharesResponse,
    EquityHoldingResponse,
)
from app.services.cap_table import equity_distribution
from app.services.equity import EquityStore
from app.services.investment_store import InvestmentStore

router = APIRouter()


def _build_shares_response(shares: StartupShares) -> StartupSharesResponse:
    return StartupSharesResponse(
        startup_id=shares.startup_id,
        total_shares=shares.total_shares,
        esop_reserved_shares=shares.esop_reserved_shares,
        price_per_share=shares.price_per_share,
        updated_at=shares.updated_at,
    )


@router.get("/founders", response_model=List[FounderResponse])
async def list_founders(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Founders in the order they were added"""
    store = EquityStore(db)
    await store.get_startup(startup_id)
    return [FounderResponse.model_validate(f) for f in await store.list_founders(startup_id)]


@router.post("/founders", response_model=FounderResponse)
async def add_founder(
    request: FounderRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    founder = await EquityStore(db).add_founder(startup_id, request)
    return FounderResponse.model_validate(founder)


@router.put("/founders", response_model=List[FounderResponse])
async def replace_founders(
    request: ReplaceFoundersRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace the founder list.

    The list is validated as a whole; if any founder is rejected the stored
    list is left as it was.
    """
    founders = await EquityStore(db).replace_founders(startup_id, request.founders)
    return [FounderResponse.model_validate(f) for f in founders]


@router.delete("/founders")
async def delete_founders(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    deleted = await EquityStore(db).delete_founders(startup_id)
    return {"deleted": deleted}


@router.get("/shares", response_model=StartupSharesResponse)
async def get_shares(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Total shares, ESOP pool and price per share (zeros until first saved)"""
    return _build_shares_response(await EquityStore(db).get_shares(startup_id))


@router.patch("/shares", response_model=StartupSharesResponse)
async def update_shares(
    request: UpdateSharesRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    return _build_shares_response(await EquityStore(db).update_shares(startup_id, request))


@router.get("/distribution", response_model=List[EquityHoldingResponse])
async def get_equity_distribution(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Founder and investor stakes, largest first"""
    store = EquityStore(db)
    await store.get_startup(startup_id)
    founders = await store.list_founders(startup_id)
    investments = await InvestmentStore(db).list_investments(startup_id)
    return [
        EquityHoldingResponse(
            holder_type=h.holder_type,
            holder_name=h.holder_name,
            equity_percentage=h.equity_percentage,
            total_amount=h.total_amount,
        )
        for h in equity_distribution(founders, investments)
    ]
