"""Ledger record store: CRUD for revenue and expense entries."""
from typing import List, Optional

import structlog
from sqlalchemy import select

from app.models.ledger import LedgerRecord, RecordType
from app.schemas.ledger import CreateLedgerRecordRequest, UpdateLedgerRecordRequest
from app.services.aggregation import FinancialFilters
from app.services.attachments import AttachmentService
from app.services.base import BaseStore
from app.services.errors import NotFoundError, PersistenceError, ValidationError
from app.services.validation import require, positive_amount, non_negative_amount
from app.services.verticals import Vertical, known_verticals, resolve_vertical_label

logger = structlog.get_logger()


class LedgerStore(BaseStore):
    """
    Persistent collection of dated revenue and expense entries.

    Callers re-run the aggregation engine after any mutation; nothing here
    caches derived figures.
    """

    def __init__(self, db, attachments: Optional[AttachmentService] = None):
        super().__init__(db)
        self.attachments = attachments or AttachmentService.from_settings()

    async def add_record(self, startup_id: int, request: CreateLedgerRecordRequest) -> LedgerRecord:
        """
        Validate and insert a ledger record.

        The attachment is stored before the insert; if that fails the record
        is never written. A failed insert removes the stored file again.
        """
        record_type = RecordType(request.record_type)
        record_date = require(request.date, "Date")
        entity = require(request.entity, "Entity")
        description = require(request.description, "Description")
        vertical = resolve_vertical_label(
            record_type, require(request.vertical, "Vertical"), request.other_vertical_label
        )
        amount = positive_amount(request.amount, "Amount")

        funding_source = None
        cogs = None
        if record_type == RecordType.EXPENSE:
            funding_source = (request.funding_source or "").strip() or "Revenue"
        elif request.cogs is not None:
            cogs = non_negative_amount(request.cogs, "COGS")

        await self.get_startup(startup_id)

        attachment_url = await self.attachments.resolve(
            startup_id, upload=request.attachment, link=request.attachment_url
        )

        record = LedgerRecord(
            startup_id=startup_id,
            record_type=record_type,
            date=record_date,
            entity=entity,
            description=description,
            vertical=vertical,
            amount=amount,
            funding_source=funding_source,
            cogs=cogs,
            attachment_url=attachment_url,
        )
        self.db.add(record)
        await self._commit_with_attachment("add ledger record", attachment_url if request.attachment else None)
        await self.db.refresh(record)

        logger.info(
            "Added ledger record",
            record_id=record.id,
            startup_id=startup_id,
            record_type=record_type.value,
            amount=str(amount),
        )
        return record

    async def get_record(self, startup_id: int, record_id: int) -> LedgerRecord:
        result = await self._execute(
            select(LedgerRecord).where(
                LedgerRecord.startup_id == startup_id,
                LedgerRecord.id == record_id,
            )
        )
        record = result.scalar_one_or_none()
        if not record:
            raise NotFoundError(f"Ledger record {record_id} not found")
        return record

    async def update_record(
        self,
        startup_id: int,
        record_id: int,
        request: UpdateLedgerRecordRequest,
    ) -> LedgerRecord:
        """
        Apply only the fields present in the request.

        Every field is validated, and any attachment stored, before the
        record is touched.
        """
        record = await self.get_record(startup_id, record_id)
        changes = request.model_dump(exclude_unset=True)
        updates = {}

        if "date" in changes:
            updates["date"] = require(changes["date"], "Date")
        if "entity" in changes:
            updates["entity"] = require(changes["entity"], "Entity")
        if "description" in changes:
            updates["description"] = require(changes["description"], "Description")
        if "vertical" in changes:
            updates["vertical"] = resolve_vertical_label(
                record.record_type,
                require(changes["vertical"], "Vertical"),
                changes.get("other_vertical_label"),
            )
        elif changes.get("other_vertical_label"):
            # Relabels a record already filed under a custom "other" vertical
            other_option = known_verticals(record.record_type).OTHER
            current = Vertical.parse(record.record_type, record.vertical).known
            if current is not None and current is not other_option:
                raise ValidationError(f"A custom vertical label needs the '{other_option.value}' vertical")
            updates["vertical"] = resolve_vertical_label(
                record.record_type, other_option.value, changes["other_vertical_label"]
            )
        if "amount" in changes:
            updates["amount"] = positive_amount(changes["amount"], "Amount")

        if "funding_source" in changes:
            if record.record_type != RecordType.EXPENSE:
                raise ValidationError("Funding source applies to expenses only")
            updates["funding_source"] = (changes["funding_source"] or "").strip() or "Revenue"
        if "cogs" in changes:
            if record.record_type != RecordType.REVENUE:
                raise ValidationError("COGS applies to revenue only")
            cogs = changes["cogs"]
            updates["cogs"] = non_negative_amount(cogs, "COGS") if cogs is not None else None

        stored_url = None
        if request.attachment is not None:
            stored_url = await self.attachments.store_file(startup_id, request.attachment)
            updates["attachment_url"] = stored_url
        elif "attachment_url" in changes:
            link = changes["attachment_url"]
            updates["attachment_url"] = self.attachments.validate_link(link) if link else None

        for field_name, value in updates.items():
            setattr(record, field_name, value)

        await self._commit_with_attachment("update ledger record", stored_url)
        await self.db.refresh(record)

        logger.info("Updated ledger record", record_id=record_id, startup_id=startup_id, fields=sorted(updates))
        return record

    async def _commit_with_attachment(self, operation: str, stored_url: Optional[str]) -> None:
        """Commit; a file stored for this write is removed again if the commit fails"""
        try:
            await self._commit(operation)
        except PersistenceError:
            if stored_url:
                await self.attachments.discard(stored_url)
            raise

    async def delete_record(self, startup_id: int, record_id: int) -> None:
        record = await self.get_record(startup_id, record_id)
        await self.db.delete(record)
        await self._commit("delete ledger record")
        logger.info("Deleted ledger record", record_id=record_id, startup_id=startup_id)

    async def list_records(
        self,
        startup_id: int,
        filters: Optional[FinancialFilters] = None,
        record_type: Optional[RecordType] = None,
    ) -> List[LedgerRecord]:
        """Records matching the filters, newest first"""
        filters = filters or FinancialFilters()
        query = select(LedgerRecord).where(LedgerRecord.startup_id == startup_id)

        if filters.entity != "all":
            query = query.where(LedgerRecord.entity == filters.entity)

        date_range = filters.date_range()
        if date_range:
            query = query.where(
                LedgerRecord.date >= date_range[0],
                LedgerRecord.date <= date_range[1],
            )

        if record_type is not None:
            query = query.where(LedgerRecord.record_type == record_type)

        query = query.order_by(LedgerRecord.date.desc(), LedgerRecord.id.desc())
        result = await self._execute(query)
        return list(result.scalars().all())

    async def list_expenses(self, startup_id: int, filters: Optional[FinancialFilters] = None) -> List[LedgerRecord]:
        return await self.list_records(startup_id, filters, RecordType.EXPENSE)

    async def list_revenues(self, startup_id: int, filters: Optional[FinancialFilters] = None) -> List[LedgerRecord]:
        return await self.list_records(startup_id, filters, RecordType.REVENUE)

    async def entities(self, startup_id: int) -> List[str]:
        """Distinct entity labels already used by this startup's records"""
        result = await self._execute(
            select(LedgerRecord.entity)
            .where(LedgerRecord.startup_id == startup_id)
            .distinct()
            .order_by(LedgerRecord.entity)
        )
        return list(result.scalars().all())

    async def verticals(self, startup_id: int) -> List[str]:
        result = await self._execute(
            select(LedgerRecord.vertical)
            .where(LedgerRecord.startup_id == startup_id)
            .distinct()
            .order_by(LedgerRecord.vertical)
        )
        return list(result.scalars().all())
