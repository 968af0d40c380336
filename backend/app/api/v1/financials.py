"""Financial ledger API endpoints"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.websocket import manager
from app.models.database import get_db
from app.models.ledger import LedgerRecord
from app.schemas.ledger import (
    CreateLedgerRecordRequest,
    UpdateLedgerRecordRequest,
    LedgerRecordResponse,
    FinancialsResponse,
)
from app.services.attachments import AttachmentService, get_attachment_service
from app.services.financials import FinancialsService
from app.services.financials_view import parse_filters
from app.services.ledger_store import LedgerStore

router = APIRouter()


def _build_record_response(r: LedgerRecord) -> LedgerRecordResponse:
    """Convert LedgerRecord model to response schema"""
    return LedgerRecordResponse(
        id=r.id,
        startup_id=r.startup_id,
        record_type=r.record_type,
        date=r.date,
        entity=r.entity,
        description=r.description,
        vertical=r.vertical,
        amount=r.amount,
        funding_source=r.funding_source,
        cogs=r.cogs,
        attachment_url=r.attachment_url,
        created_at=r.created_at,
    )


@router.get("", response_model=FinancialsResponse)
async def get_financials(
    startup_id: int = Path(...),
    entity: Optional[str] = Query("all", description="Entity label or 'all'"),
    year: Optional[str] = Query("all", description="Calendar year or 'all'"),
    db: AsyncSession = Depends(get_db),
):
    """
    Financials panel for one entity/year selection.

    Returns the monthly revenue/expense series, per-vertical breakdowns,
    summary totals (total funding reconciled against investment records,
    available funds = funding + revenue - expenses), the filtered record
    lists and the option lists for the filter bar.
    """
    filters = parse_filters(entity, year)
    panel = await FinancialsService(db).load(startup_id, filters)
    return FinancialsResponse.from_panel(panel)


@router.get("/records", response_model=List[LedgerRecordResponse])
async def list_records(
    startup_id: int = Path(...),
    entity: Optional[str] = Query("all"),
    year: Optional[str] = Query("all"),
    db: AsyncSession = Depends(get_db),
):
    """All ledger records matching the filters, newest first"""
    store = LedgerStore(db)
    await store.get_startup(startup_id)
    records = await store.list_records(startup_id, parse_filters(entity, year))
    return [_build_record_response(r) for r in records]


@router.post("/records", response_model=LedgerRecordResponse)
async def add_record(
    request: CreateLedgerRecordRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    """
    Add a revenue or expense record.

    A proof document may be sent inline (`attachment`, base64) or as a
    cloud-drive link (`attachment_url`). If the attachment is rejected the
    record is not created.
    """
    record = await LedgerStore(db, attachments).add_record(startup_id, request)
    await manager.notify_changed(startup_id)
    return _build_record_response(record)


@router.patch("/records/{record_id}", response_model=LedgerRecordResponse)
async def update_record(
    request: UpdateLedgerRecordRequest,
    startup_id: int = Path(...),
    record_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    record = await LedgerStore(db, attachments).update_record(startup_id, record_id, request)
    await manager.notify_changed(startup_id)
    return _build_record_response(record)


@router.delete("/records/{record_id}")
async def delete_record(
    startup_id: int = Path(...),
    record_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    await LedgerStore(db).delete_record(startup_id, record_id)
    await manager.notify_changed(startup_id)
    return {"deleted": True, "record_id": record_id}


@router.get("/expenses", response_model=List[LedgerRecordResponse])
async def list_expenses(
    startup_id: int = Path(...),
    entity: Optional[str] = Query("all"),
    year: Optional[str] = Query("all"),
    db: AsyncSession = Depends(get_db),
):
    store = LedgerStore(db)
    await store.get_startup(startup_id)
    records = await store.list_expenses(startup_id, parse_filters(entity, year))
    return [_build_record_response(r) for r in records]


@router.get("/revenues", response_model=List[LedgerRecordResponse])
async def list_revenues(
    startup_id: int = Path(...),
    entity: Optional[str] = Query("all"),
    year: Optional[str] = Query("all"),
    db: AsyncSession = Depends(get_db),
):
    store = LedgerStore(db)
    await store.get_startup(startup_id)
    records = await store.list_revenues(startup_id, parse_filters(entity, year))
    return [_build_record_response(r) for r in records]
