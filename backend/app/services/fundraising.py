"""Fundraising round details: one active round per startup at most"""
from typing import List, Optional

import structlog
from sqlalchemy import select, update

from app.models.investment import FundraisingDetails
from app.schemas.investment import FundraisingDetailsRequest
from app.services.base import BaseStore
from app.services.errors import NotFoundError, ValidationError
from app.services.validation import require, positive_amount, non_negative_amount, percentage

logger = structlog.get_logger()

COLLATERAL_FIELDS = (
    "pitch_deck_url",
    "pitch_video_url",
    "business_plan_url",
    "one_pager_url",
    "website_url",
    "linkedin_url",
)


class FundraisingService(BaseStore):
    """Reads and upserts a startup's fundraising details."""

    async def list_fundraising(self, startup_id: int) -> List[FundraisingDetails]:
        """All rounds, most recently created first"""
        result = await self._execute(
            select(FundraisingDetails)
            .where(FundraisingDetails.startup_id == startup_id)
            .order_by(FundraisingDetails.created_at.desc(), FundraisingDetails.id.desc())
        )
        return list(result.scalars().all())

    async def fundraising_status(self, startup_id: int) -> Optional[FundraisingDetails]:
        rows = await self.list_fundraising(startup_id)
        return rows[0] if rows else None

    async def _resolve_target(
        self,
        startup_id: int,
        request: FundraisingDetailsRequest,
    ) -> Optional[FundraisingDetails]:
        """
        Pick the row to update.

        Priority: explicit id, then the active row, then the most recently
        created row. None means a new row should be inserted.
        """
        rows = await self.list_fundraising(startup_id)
        if request.id is not None:
            for row in rows:
                if row.id == request.id:
                    return row
            raise NotFoundError(f"Fundraising details {request.id} not found")

        for row in rows:
            if row.active:
                return row
        return rows[0] if rows else None

    async def update_fundraising(
        self,
        startup_id: int,
        request: FundraisingDetailsRequest,
    ) -> FundraisingDetails:
        round_type = require(getattr(request.type, "value", request.type), "Fundraising type")
        equity = percentage(request.equity, "Equity offered")
        if request.active:
            value = positive_amount(request.value, "Fundraising value")
            if equity == 0:
                raise ValidationError("Equity offered must be greater than 0 and at most 100")
        else:
            value = non_negative_amount(request.value, "Fundraising value")

        await self.get_startup(startup_id)
        details = await self._resolve_target(startup_id, request)
        created = details is None
        if created:
            details = FundraisingDetails(startup_id=startup_id)
            self.db.add(details)

        details.active = request.active
        details.type = round_type
        details.value = value
        details.equity = equity
        details.domain = request.domain
        details.stage = request.stage
        details.validation_requested = request.validation_requested
        for field_name in COLLATERAL_FIELDS:
            setattr(details, field_name, getattr(request, field_name))

        await self.db.flush()
        if request.active:
            await self._execute(
                update(FundraisingDetails)
                .where(
                    FundraisingDetails.startup_id == startup_id,
                    FundraisingDetails.id != details.id,
                )
                .values(active=False)
                .execution_options(synchronize_session="fetch")
            )

        await self._commit("save fundraising details")
        await self.db.refresh(details)

        logger.info(
            "Saved fundraising details",
            startup_id=startup_id,
            fundraising_id=details.id,
            created=created,
            active=details.active,
            round_type=round_type,
        )
        return details
