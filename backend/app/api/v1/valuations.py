"""Valuations API endpoints"""
from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import get_db
from app.models.investment import ValuationRecord
from app.schemas.investment import CreateValuationRequest, ValuationResponse, ValuationHistoryPoint
from app.services.cap_table import valuation_history
from app.services.investment_store import InvestmentStore, ValuationStore

router = APIRouter()


def _build_valuation_response(v: ValuationRecord) -> ValuationResponse:
    """Convert ValuationRecord model to response schema"""
    return ValuationResponse(
        id=v.id,
        date=v.date,
        valuation=v.valuation,
        round_type=v.round_type,
        investment_amount=v.investment_amount,
        notes=v.notes,
        created_at=v.created_at,
    )


@router.post("", response_model=ValuationResponse)
async def create_valuation(
    request: CreateValuationRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a valuation.

    Use this for priced rounds, formal appraisals, or manual updates between
    rounds. The date may not be in the future.
    """
    valuation = await ValuationStore(db).add_valuation(startup_id, request)
    return _build_valuation_response(valuation)


@router.get("", response_model=List[ValuationResponse])
async def list_valuations(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Recorded valuations, oldest first"""
    store = ValuationStore(db)
    await store.get_startup(startup_id)
    return [_build_valuation_response(v) for v in await store.list_valuations(startup_id)]


@router.get("/history", response_model=List[ValuationHistoryPoint])
async def get_valuation_history(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Valuation chart data.

    Uses recorded valuations when there are any, otherwise derives one point
    per investment date from the investment records.
    """
    valuations = ValuationStore(db)
    await valuations.get_startup(startup_id)
    points = valuation_history(
        await valuations.list_valuations(startup_id),
        await InvestmentStore(db).list_investments(startup_id),
    )
    return [
        ValuationHistoryPoint(
            round_name=p.round_name,
            valuation=p.valuation,
            investment_amount=p.investment_amount,
            date=p.date,
        )
        for p in points
    ]
