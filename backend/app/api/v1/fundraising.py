"""Fundraising details API endpoints"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.websocket import manager
from app.models.database import get_db
from app.models.investment import FundraisingDetails
from app.schemas.investment import FundraisingDetailsRequest, FundraisingDetailsResponse
from app.services.fundraising import FundraisingService

router = APIRouter()


def _build_fundraising_response(f: FundraisingDetails) -> FundraisingDetailsResponse:
    """Convert FundraisingDetails model to response schema"""
    return FundraisingDetailsResponse(
        id=f.id,
        startup_id=f.startup_id,
        active=f.active,
        type=f.type,
        value=f.value,
        equity=f.equity,
        domain=f.domain,
        stage=f.stage,
        validation_requested=f.validation_requested,
        pitch_deck_url=f.pitch_deck_url,
        pitch_video_url=f.pitch_video_url,
        business_plan_url=f.business_plan_url,
        one_pager_url=f.one_pager_url,
        website_url=f.website_url,
        linkedin_url=f.linkedin_url,
        created_at=f.created_at,
    )


@router.get("", response_model=List[FundraisingDetailsResponse])
async def list_fundraising(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Every fundraising round of the startup, most recent first"""
    service = FundraisingService(db)
    await service.get_startup(startup_id)
    return [_build_fundraising_response(f) for f in await service.list_fundraising(startup_id)]


@router.get("/status", response_model=Optional[FundraisingDetailsResponse])
async def get_fundraising_status(
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Most recent fundraising round, or null if the startup never raised"""
    service = FundraisingService(db)
    await service.get_startup(startup_id)
    details = await service.fundraising_status(startup_id)
    return _build_fundraising_response(details) if details else None


@router.put("", response_model=FundraisingDetailsResponse)
async def update_fundraising(
    request: FundraisingDetailsRequest,
    startup_id: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """
    Create or update fundraising details.

    The row to update is chosen by explicit `id`, else the active round,
    else the most recently created round; with none of those a new round is
    created. Marking a round active deactivates all other rounds.
    """
    details = await FundraisingService(db).update_fundraising(startup_id, request)
    await manager.notify_changed(startup_id)
    return _build_fundraising_response(details)
