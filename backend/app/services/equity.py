"""Founders and share structure store"""
from decimal import Decimal
from typing import List, Sequence

import structlog
from sqlalchemy import delete, select

from app.models.equity import Founder, StartupShares
from app.schemas.equity import FounderRequest, UpdateSharesRequest
from app.services.aggregation import ZERO
from app.services.base import BaseStore
from app.services.errors import ValidationError
from app.services.validation import require, non_negative_amount, percentage

logger = structlog.get_logger()

DEFAULT_TOTAL_SHARES = 1_000_000
MAX_FOUNDER_EQUITY = Decimal("100")


def _share_count(value, label: str) -> int:
    if value is None:
        return 0
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return int(value)


def _validate_founder(request: FounderRequest) -> dict:
    return dict(
        name=require(request.name, "Founder name"),
        email=require(request.email, "Founder email"),
        shares=_share_count(request.shares, "Founder shares"),
        equity_percentage=percentage(request.equity_percentage, "Founder equity"),
        mentor_code=(request.mentor_code or "").strip() or None,
    )


def _check_founder_equity(equities: Sequence[Decimal]) -> None:
    if sum(equities, ZERO) > MAX_FOUNDER_EQUITY:
        raise ValidationError("Founder equity cannot exceed 100% in total")


class EquityStore(BaseStore):
    """
    Founders and the share structure of one startup.

    The founder list is edited as a whole on the cap table form, so
    `replace_founders` swaps every row in one transaction. The share
    structure is a single row created on first save.
    """

    async def list_founders(self, startup_id: int) -> List[Founder]:
        """Founders in the order they were added"""
        result = await self._execute(
            select(Founder)
            .where(Founder.startup_id == startup_id)
            .order_by(Founder.created_at, Founder.id)
        )
        return list(result.scalars().all())

    async def add_founder(self, startup_id: int, request: FounderRequest) -> Founder:
        fields = _validate_founder(request)
        await self.get_startup(startup_id)

        existing = await self.list_founders(startup_id)
        _check_founder_equity([f.equity_percentage for f in existing] + [fields["equity_percentage"]])

        founder = Founder(startup_id=startup_id, **fields)
        self.db.add(founder)
        await self._commit("add founder")
        await self.db.refresh(founder)

        logger.info("Added founder", founder_id=founder.id, startup_id=startup_id)
        return founder

    async def replace_founders(self, startup_id: int, requests: Sequence[FounderRequest]) -> List[Founder]:
        """Validate the whole list, then replace the stored founders with it"""
        rows = [_validate_founder(r) for r in requests]
        _check_founder_equity([row["equity_percentage"] for row in rows])
        await self.get_startup(startup_id)

        await self._execute(delete(Founder).where(Founder.startup_id == startup_id))
        founders = [Founder(startup_id=startup_id, **row) for row in rows]
        self.db.add_all(founders)
        await self._commit("replace founders")

        logger.info("Replaced founders", startup_id=startup_id, count=len(founders))
        return await self.list_founders(startup_id)

    async def delete_founders(self, startup_id: int) -> int:
        """Remove every founder; returns how many were removed"""
        await self.get_startup(startup_id)
        result = await self._execute(delete(Founder).where(Founder.startup_id == startup_id))
        await self._commit("delete founders")
        logger.info("Deleted founders", startup_id=startup_id, count=result.rowcount)
        return result.rowcount

    async def get_shares(self, startup_id: int) -> StartupShares:
        """Stored share structure, or an unsaved all-zero one"""
        await self.get_startup(startup_id)
        result = await self._execute(select(StartupShares).where(StartupShares.startup_id == startup_id))
        shares = result.scalar_one_or_none()
        if shares is None:
            return StartupShares(
                startup_id=startup_id, total_shares=0, esop_reserved_shares=0, price_per_share=ZERO
            )
        return shares

    async def update_shares(self, startup_id: int, request: UpdateSharesRequest) -> StartupShares:
        """
        Apply the given fields to the share structure.

        A first save starts from 1,000,000 total shares, no ESOP pool and a
        zero price.
        """
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        updates = {}
        if "total_shares" in changes:
            updates["total_shares"] = _share_count(changes["total_shares"], "Total shares")
        if "esop_reserved_shares" in changes:
            updates["esop_reserved_shares"] = _share_count(changes["esop_reserved_shares"], "ESOP reserved shares")
        if "price_per_share" in changes:
            updates["price_per_share"] = non_negative_amount(changes["price_per_share"], "Price per share")

        await self.get_startup(startup_id)
        result = await self._execute(select(StartupShares).where(StartupShares.startup_id == startup_id))
        shares = result.scalar_one_or_none()
        created = shares is None
        if created:
            shares = StartupShares(
                startup_id=startup_id,
                total_shares=DEFAULT_TOTAL_SHARES,
                esop_reserved_shares=0,
                price_per_share=ZERO,
            )

        total = updates.get("total_shares", shares.total_shares)
        esop = updates.get("esop_reserved_shares", shares.esop_reserved_shares)
        if esop > total:
            raise ValidationError("ESOP reserved shares cannot exceed total shares")

        if created:
            self.db.add(shares)
        for field_name, value in updates.items():
            setattr(shares, field_name, value)
        await self._commit("save share structure")
        await self.db.refresh(shares)

        logger.info("Saved share structure", startup_id=startup_id, created=created, fields=sorted(updates))
        return shares
