"""Investment records API endpoints"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.websocket import manager
from app.models.database import get_db
from app.models.investment import InvestmentRecord
from app.schemas.investment import (
    AddInvestmentRequest,
    UpdateInvestmentRequest,
    InvestmentResponse,
    TotalFundingResponse,
    InvestmentSummaryResponse,
    InvestmentOptionsResponse,
    InvestorType,
    InvestmentRoundType,
    FundraisingRoundType,
)
from app.services.attachments import AttachmentService, get_attachment_service
from app.services.cap_table import investment_summary
from app.services.investment_store import InvestmentStore, InvestmentFilters

router = APIRouter()


def _build_investment_response(inv: InvestmentRecord) -> InvestmentResponse:
    """Convert InvestmentRecord model to response schema"""
    return InvestmentResponse(
        id=inv.id,
        startup_id=inv.startup_id,
        date=inv.date,
        investor_type=inv.investor_type,
        investment_type=inv.investment_type,
        investor_name=inv.investor_name,
        investor_code=inv.investor_code,
        amount=inv.amount,
        equity_allocated=inv.equity_allocated,
        shares=inv.shares,
        price_per_share=inv.price_per_share,
        pre_money_valuation=inv.pre_money_valuation,
        post_money_valuation=inv.post_money_valuation,
        proof_url=inv.proof_url,
        created_at=inv.created_at,
    )


@router.get("/options", response_model=InvestmentOptionsResponse)
async def get_investment_options():
    """Allowed investor, investment and fundraising round types"""
    return InvestmentOptionsResponse(
        investor_types=[t.value for t in InvestorType],
        investment_types=[t.value for t in InvestmentRoundType],
        round_types=[t.value for t in FundraisingRoundType],
    )


@router.get("/total-funding", response_model=TotalFundingResponse)
async def get_total_funding(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Total funding for display.

    The sum of investment records wins; the startup's cached figure is used
    only when there are no investments (or they sum to zero).
    """
    store = InvestmentStore(db)
    startup = await store.get_startup(startup_id)
    investments = await store.list_investments(startup_id)
    return TotalFundingResponse(
        startup_id=startup_id,
        total_funding=await store.total_funding(startup_id),
        cached_total_funding=startup.total_funding,
        investment_count=len(investments),
    )


@router.post("/recalculate", response_model=TotalFundingResponse)
async def recalculate_total_funding(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Resync the cached total funding with the investment records"""
    store = InvestmentStore(db)
    total = await store.recalculate_total_funding(startup_id)
    investments = await store.list_investments(startup_id)
    await manager.notify_changed(startup_id)
    return TotalFundingResponse(
        startup_id=startup_id,
        total_funding=total,
        cached_total_funding=total,
        investment_count=len(investments),
    )


@router.get("/summary", response_model=InvestmentSummaryResponse)
async def get_investment_summary(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Funding split by equity, debt and grant"""
    store = InvestmentStore(db)
    await store.get_startup(startup_id)
    summary = investment_summary(await store.list_investments(startup_id))
    return InvestmentSummaryResponse(
        total_equity_funding=summary.total_equity_funding,
        total_debt_funding=summary.total_debt_funding,
        total_grant_funding=summary.total_grant_funding,
        total_investments=summary.total_investments,
        avg_equity_allocated=summary.avg_equity_allocated,
    )


@router.get("", response_model=List[InvestmentResponse])
async def list_investments(
    startup_id: int = Path(...),
    investor_type: Optional[InvestorType] = Query(None),
    investment_type: Optional[InvestmentRoundType] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Investments newest first, optionally filtered by type and date range"""
    store = InvestmentStore(db)
    await store.get_startup(startup_id)
    investments = await store.list_investments(
        startup_id,
        InvestmentFilters(
            investor_type=investor_type,
            investment_type=investment_type,
            date_from=date_from,
            date_to=date_to,
        ),
    )
    return [_build_investment_response(inv) for inv in investments]


@router.post("", response_model=InvestmentResponse)
async def add_investment(
    request: AddInvestmentRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    """
    Record an investment.

    The startup's cached total funding is increased by the amount in the
    same transaction.
    """
    investment = await InvestmentStore(db, attachments).add_investment(startup_id, request)
    await manager.notify_changed(startup_id)
    return _build_investment_response(investment)


@router.get("/{investment_id}", response_model=InvestmentResponse)
async def get_investment(
    startup_id: int = Path(...),
    investment_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    investment = await InvestmentStore(db).get_investment(startup_id, investment_id)
    return _build_investment_response(investment)


@router.patch("/{investment_id}", response_model=InvestmentResponse)
async def update_investment(
    request: UpdateInvestmentRequest,
    startup_id: int = Path(...),
    investment_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    investment = await InvestmentStore(db, attachments).update_investment(startup_id, investment_id, request)
    await manager.notify_changed(startup_id)
    return _build_investment_response(investment)


@router.delete("/{investment_id}")
async def delete_investment(
    startup_id: int = Path(...),
    investment_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    await InvestmentStore(db).delete_investment(startup_id, investment_id)
    await manager.notify_changed(startup_id)
    return {"deleted": True, "investment_id": investment_id}
