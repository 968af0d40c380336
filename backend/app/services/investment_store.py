"""Investment and valuation record stores with total-funding reconciliation."""
import warnings
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple

import structlog
from sqlalchemy import select

from app.models.investment import InvestmentRecord, FundraisingDetails, ValuationRecord
from app.models.startup import Startup
from app.schemas.investment import AddInvestmentRequest, UpdateInvestmentRequest, CreateValuationRequest
from app.services.aggregation import ZERO, resolve_total_funding, to_decimal
from app.services.attachments import AttachmentService
from app.services.base import BaseStore
from app.services.errors import NotFoundError, ReconciliationDriftWarning, ValidationError
from app.services.validation import require, positive_amount, percentage, not_in_future

logger = structlog.get_logger()

PRICE_PER_SHARE_PLACES = Decimal("0.0001")


@dataclass(frozen=True)
class InvestmentFilters:
    """Optional constraints for listing investments"""
    investor_type: Optional[str] = None
    investment_type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


def _enum_value(value):
    return getattr(value, "value", value)


def _share_terms_consistent(amount: Decimal, shares: int, price_per_share: Decimal) -> bool:
    # A 4-dp price can be off by half a unit per share
    tolerance = shares * PRICE_PER_SHARE_PLACES / 2
    return abs(shares * price_per_share - amount) <= tolerance


def resolve_share_terms(
    amount: Decimal,
    shares: Optional[int],
    price_per_share: Optional[Decimal],
) -> Tuple[Optional[int], Optional[Decimal]]:
    """
    Complete shares / price per share from the amount.

    Neither given: both stay empty. One given: the other is derived from the
    amount. Both must end up positive, and shares * price must equal the
    amount up to the rounding of a 4-dp price.
    """
    if shares is None and price_per_share is None:
        return None, None
    if shares is not None and shares <= 0:
        raise ValidationError("Valid number of shares is required")
    if price_per_share is not None and to_decimal(price_per_share) <= 0:
        raise ValidationError("Valid price per share is required")

    if price_per_share is None:
        price_per_share = (amount / shares).quantize(PRICE_PER_SHARE_PLACES)
        if price_per_share <= 0:
            raise ValidationError("Valid price per share is required")
    elif shares is None:
        shares = int((amount / to_decimal(price_per_share)).to_integral_value())
        if shares <= 0:
            raise ValidationError("Investment amount too small for one share at that price")

    price_per_share = to_decimal(price_per_share)
    if not _share_terms_consistent(amount, shares, price_per_share):
        raise ValidationError(
            f"Shares ({shares}) at price per share ({price_per_share}) do not add up to the amount ({amount})"
        )
    return shares, price_per_share


class InvestmentStore(BaseStore):
    """
    Persistent collection of investment records.

    The startup row carries a cached `total_funding`. Each mutation adjusts it
    by the exact amount delta inside the same transaction as the record write,
    and `recalculate_total_funding` rebuilds it from scratch.
    """

    def __init__(self, db, attachments: Optional[AttachmentService] = None):
        super().__init__(db)
        self.attachments = attachments or AttachmentService.from_settings()

    async def has_active_round(self, startup_id: int) -> bool:
        result = await self._execute(
            select(FundraisingDetails.id).where(
                FundraisingDetails.startup_id == startup_id,
                FundraisingDetails.active.is_(True),
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def add_investment(
        self,
        startup_id: int,
        request: AddInvestmentRequest,
        today: Optional[date] = None,
    ) -> InvestmentRecord:
        """Validate and insert an investment, adding its amount to the cached total"""
        investment_date = not_in_future(request.date, "Investment date", today)
        investor_type = require(_enum_value(request.investor_type), "Investor type")
        investment_type = require(_enum_value(request.investment_type), "Investment type")
        investor_name = require(request.investor_name, "Investor name")
        amount = positive_amount(request.amount, "Investment amount")
        shares, price_per_share = resolve_share_terms(amount, request.shares, request.price_per_share)

        startup = await self.get_startup(startup_id)

        if request.equity_allocated is None:
            if await self.has_active_round(startup_id):
                raise ValidationError("Equity allocation is required while fundraising is active")
            equity_allocated = ZERO
        else:
            equity_allocated = percentage(request.equity_allocated, "Equity allocated")

        proof_url = self.attachments.validate_link(request.proof_url) if request.proof_url else None

        investment = InvestmentRecord(
            startup_id=startup_id,
            date=investment_date,
            investor_type=investor_type,
            investment_type=investment_type,
            investor_name=investor_name,
            investor_code=request.investor_code,
            amount=amount,
            equity_allocated=equity_allocated,
            shares=shares,
            price_per_share=price_per_share,
            pre_money_valuation=request.pre_money_valuation,
            post_money_valuation=request.post_money_valuation,
            proof_url=proof_url,
        )
        self.db.add(investment)
        self._adjust_cached_total(startup, amount)
        await self._commit("add investment record")
        await self.db.refresh(investment)

        logger.info(
            "Added investment record",
            investment_id=investment.id,
            startup_id=startup_id,
            amount=str(amount),
            cached_total_funding=str(startup.total_funding),
        )
        return investment

    async def get_investment(self, startup_id: int, investment_id: int) -> InvestmentRecord:
        result = await self._execute(
            select(InvestmentRecord).where(
                InvestmentRecord.startup_id == startup_id,
                InvestmentRecord.id == investment_id,
            )
        )
        investment = result.scalar_one_or_none()
        if not investment:
            raise NotFoundError(f"Investment record {investment_id} not found")
        return investment

    async def update_investment(
        self,
        startup_id: int,
        investment_id: int,
        request: UpdateInvestmentRequest,
        today: Optional[date] = None,
    ) -> InvestmentRecord:
        """Partial update; an amount change moves the cached total by the signed difference"""
        investment = await self.get_investment(startup_id, investment_id)
        changes = request.model_dump(exclude_unset=True)
        updates = {}

        if "date" in changes:
            updates["date"] = not_in_future(changes["date"], "Investment date", today)
        if "investor_type" in changes:
            updates["investor_type"] = require(_enum_value(changes["investor_type"]), "Investor type")
        if "investment_type" in changes:
            updates["investment_type"] = require(_enum_value(changes["investment_type"]), "Investment type")
        if "investor_name" in changes:
            updates["investor_name"] = require(changes["investor_name"], "Investor name")
        if "investor_code" in changes:
            updates["investor_code"] = changes["investor_code"]
        if "amount" in changes:
            updates["amount"] = positive_amount(changes["amount"], "Investment amount")
        if "equity_allocated" in changes:
            updates["equity_allocated"] = percentage(
                require(changes["equity_allocated"], "Equity allocated"), "Equity allocated"
            )
        amount = updates.get("amount", to_decimal(investment.amount))
        if "shares" in changes or "price_per_share" in changes:
            # The term left out is re-derived from the amount
            updates["shares"], updates["price_per_share"] = resolve_share_terms(
                amount, changes.get("shares"), changes.get("price_per_share")
            )
        elif "amount" in updates and investment.shares is not None:
            # Share count stays, price follows the new amount
            updates["shares"], updates["price_per_share"] = resolve_share_terms(
                amount, investment.shares, None
            )
        for field_name in ("pre_money_valuation", "post_money_valuation"):
            if field_name in changes:
                updates[field_name] = changes[field_name]
        if "proof_url" in changes:
            link = changes["proof_url"]
            updates["proof_url"] = self.attachments.validate_link(link) if link else None

        old_amount = to_decimal(investment.amount)
        for field_name, value in updates.items():
            setattr(investment, field_name, value)

        delta = to_decimal(investment.amount) - old_amount
        if delta != ZERO:
            startup = await self.get_startup(startup_id)
            self._adjust_cached_total(startup, delta)

        await self._commit("update investment record")
        await self.db.refresh(investment)

        logger.info(
            "Updated investment record",
            investment_id=investment_id,
            startup_id=startup_id,
            amount_delta=str(delta),
            fields=sorted(updates),
        )
        return investment

    async def delete_investment(self, startup_id: int, investment_id: int) -> None:
        """Remove an investment, subtracting its amount from the cached total (never below zero)"""
        investment = await self.get_investment(startup_id, investment_id)
        startup = await self.get_startup(startup_id)
        amount = to_decimal(investment.amount)

        await self.db.delete(investment)
        self._adjust_cached_total(startup, -amount)
        await self._commit("delete investment record")

        logger.info(
            "Deleted investment record",
            investment_id=investment_id,
            startup_id=startup_id,
            amount=str(amount),
            cached_total_funding=str(startup.total_funding),
        )

    async def list_investments(
        self,
        startup_id: int,
        filters: Optional[InvestmentFilters] = None,
    ) -> List[InvestmentRecord]:
        """Investments for a startup, newest first"""
        filters = filters or InvestmentFilters()
        query = select(InvestmentRecord).where(InvestmentRecord.startup_id == startup_id)

        if filters.investor_type:
            query = query.where(InvestmentRecord.investor_type == _enum_value(filters.investor_type))
        if filters.investment_type:
            query = query.where(InvestmentRecord.investment_type == _enum_value(filters.investment_type))
        if filters.date_from:
            query = query.where(InvestmentRecord.date >= filters.date_from)
        if filters.date_to:
            query = query.where(InvestmentRecord.date <= filters.date_to)

        query = query.order_by(InvestmentRecord.date.desc(), InvestmentRecord.id.desc())
        result = await self._execute(query)
        return list(result.scalars().all())

    async def _investment_amounts(self, startup_id: int) -> List[Decimal]:
        result = await self._execute(
            select(InvestmentRecord.amount).where(InvestmentRecord.startup_id == startup_id)
        )
        return [to_decimal(a) for a in result.scalars().all()]

    async def total_funding(self, startup_id: int) -> Decimal:
        """Sum of investment records, falling back to the cached figure when there are none"""
        startup = await self.get_startup(startup_id)
        return resolve_total_funding(await self._investment_amounts(startup_id), startup.total_funding)

    async def recalculate_total_funding(self, startup_id: int) -> Decimal:
        """
        Rebuild the cached total from the current investment records.

        Idempotent: running it twice without intervening writes yields the
        same value. A mismatch with the previous cache is reported as a
        ReconciliationDriftWarning but does not stop the resync.
        """
        startup = await self.get_startup(startup_id)
        calculated = sum(await self._investment_amounts(startup_id), ZERO)
        cached = to_decimal(startup.total_funding)

        if cached != calculated:
            logger.warning(
                "Total funding drift detected",
                startup_id=startup_id,
                cached_total_funding=str(cached),
                calculated_total_funding=str(calculated),
            )
            warnings.warn(
                f"Startup {startup_id} cached total funding {cached} differs from records sum {calculated}",
                ReconciliationDriftWarning,
                stacklevel=2,
            )

        startup.total_funding = calculated
        await self._commit("recalculate total funding")

        logger.info("Recalculated total funding", startup_id=startup_id, total_funding=str(calculated))
        return calculated

    @staticmethod
    def _adjust_cached_total(startup: Startup, delta: Decimal) -> None:
        startup.total_funding = max(to_decimal(startup.total_funding) + delta, ZERO)


class ValuationStore(BaseStore):
    """Recorded valuations; dates must not be in the future."""

    async def add_valuation(
        self,
        startup_id: int,
        request: CreateValuationRequest,
        today: Optional[date] = None,
    ) -> ValuationRecord:
        valuation_date = not_in_future(request.date, "Valuation date", today)
        valuation = positive_amount(request.valuation, "Valuation")
        round_type = require(request.round_type, "Round type")
        await self.get_startup(startup_id)

        record = ValuationRecord(
            startup_id=startup_id,
            date=valuation_date,
            valuation=valuation,
            round_type=round_type,
            investment_amount=to_decimal(request.investment_amount),
            notes=request.notes,
        )
        self.db.add(record)
        await self._commit("add valuation record")
        await self.db.refresh(record)

        logger.info("Added valuation record", startup_id=startup_id, valuation=str(valuation))
        return record

    async def list_valuations(self, startup_id: int) -> List[ValuationRecord]:
        """Valuations oldest first"""
        result = await self._execute(
            select(ValuationRecord)
            .where(ValuationRecord.startup_id == startup_id)
            .order_by(ValuationRecord.date, ValuationRecord.id)
        )
        return list(result.scalars().all())
