"""Startup profile API endpoints"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import structlog

from app.config import get_settings
from app.models.database import get_db
from app.models.startup import Startup
from app.schemas.startup import CreateStartupRequest, UpdateStartupRequest, StartupResponse
from app.services.validation import non_negative_amount

logger = structlog.get_logger()

router = APIRouter()


def _build_startup_response(s: Startup) -> StartupResponse:
    """Convert Startup model to response schema"""
    return StartupResponse(
        id=s.id,
        name=s.name,
        country_of_registration=s.country_of_registration,
        currency=s.currency,
        registration_date=s.registration_date,
        subsidiaries=s.subsidiaries or [],
        international_ops=s.international_ops or [],
        total_funding=s.total_funding,
        created_at=s.created_at,
    )


@router.post("", response_model=StartupResponse)
async def create_startup(
    request: CreateStartupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a startup.

    `total_funding` seeds the cached funding figure for startups whose
    funding predates investment records; it is replaced by the records sum
    on the first recalculation.
    """
    name = request.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Startup name is required")

    startup = Startup(
        name=name,
        country_of_registration=request.country_of_registration,
        currency=(request.currency or get_settings().default_currency).upper(),
        registration_date=request.registration_date,
        subsidiaries=[loc.model_dump() for loc in request.subsidiaries],
        international_ops=[loc.model_dump() for loc in request.international_ops],
        total_funding=non_negative_amount(request.total_funding, "Total funding"),
    )
    db.add(startup)
    await db.commit()
    await db.refresh(startup)

    logger.info("Registered startup", startup_id=startup.id, name=startup.name)
    return _build_startup_response(startup)


@router.get("", response_model=List[StartupResponse])
async def list_startups(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List startups, newest first"""
    result = await db.execute(
        select(Startup)
        .order_by(Startup.created_at.desc(), Startup.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return [_build_startup_response(s) for s in result.scalars().all()]


@router.get("/{startup_id}", response_model=StartupResponse)
async def get_startup(startup_id: int, db: AsyncSession = Depends(get_db)):
    startup = await db.get(Startup, startup_id)
    if not startup:
        raise HTTPException(status_code=404, detail="Startup not found")
    return _build_startup_response(startup)


@router.patch("/{startup_id}", response_model=StartupResponse)
async def update_startup(
    startup_id: int,
    request: UpdateStartupRequest,
    db: AsyncSession = Depends(get_db),
):
    """Update profile fields; the funding cache is managed by the investment endpoints"""
    startup = await db.get(Startup, startup_id)
    if not startup:
        raise HTTPException(status_code=404, detail="Startup not found")

    changes = request.model_dump(exclude_unset=True)
    if "name" in changes:
        if not (changes["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Startup name is required")
        startup.name = changes["name"].strip()
    if "country_of_registration" in changes:
        startup.country_of_registration = changes["country_of_registration"]
    if changes.get("currency"):
        startup.currency = changes["currency"].upper()
    if "registration_date" in changes:
        startup.registration_date = changes["registration_date"]
    if changes.get("subsidiaries") is not None:
        startup.subsidiaries = changes["subsidiaries"]
    if changes.get("international_ops") is not None:
        startup.international_ops = changes["international_ops"]

    await db.commit()
    await db.refresh(startup)

    logger.info("Updated startup", startup_id=startup_id, fields=sorted(changes))
    return _build_startup_response(startup)
