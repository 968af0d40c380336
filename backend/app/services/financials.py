"""
Financials panel loader.

Fetches a startup's ledger and investment records, runs the aggregation
engine for one filter selection and adds the option lists the filter bar
and the record forms need.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select

from app.models.investment import InvestmentRecord
from app.models.ledger import RecordType
from app.models.startup import Startup
from app.services.aggregation import (
    FinancialFilters,
    FinancialsSnapshot,
    YearFilter,
    aggregate,
    available_years,
)
from app.services.base import BaseStore
from app.services.ledger_store import LedgerStore
from app.services.verticals import Vertical, known_verticals

logger = structlog.get_logger()

REVENUE_FUNDING_SOURCE = "Revenue"


@dataclass
class FinancialsPanel:
    """An aggregation snapshot plus the options offered for the next selection"""
    startup_id: int
    currency: str
    snapshot: FinancialsSnapshot
    entities: List[str] = field(default_factory=list)
    verticals: List[str] = field(default_factory=list)
    available_years: List[YearFilter] = field(default_factory=list)
    funding_sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.snapshot.to_dict()
        data.update(
            startup_id=self.startup_id,
            currency=self.currency,
            entities=self.entities,
            verticals=self.verticals,
            available_years=self.available_years,
            funding_sources=self.funding_sources,
        )
        return data


def _location_label(location: Dict[str, Any]) -> Optional[str]:
    if not isinstance(location, dict):
        return None
    return location.get("country") or location.get("name")


def entity_options(startup: Startup, legacy_entities: List[str] = ()) -> List[str]:
    """
    Entities a ledger record can be booked against.

    Parent company first, then numbered subsidiaries and international
    operations from the profile, then any other label already used by
    existing records.
    """
    options = [startup.parent_entity]
    for i, location in enumerate(startup.subsidiaries or [], start=1):
        where = _location_label(location)
        options.append(f"Subsidiary {i} ({where})" if where else f"Subsidiary {i}")
    for i, location in enumerate(startup.international_ops or [], start=1):
        where = _location_label(location)
        options.append(f"International Operation {i} ({where})" if where else f"International Operation {i}")

    for entity in legacy_entities:
        if entity and entity not in options:
            options.append(entity)
    return options


def vertical_options(labels: List[str] = ()) -> List[str]:
    """Known expense and revenue verticals followed by custom labels in use"""
    options: List[str] = []
    seen = set()
    for record_type in (RecordType.EXPENSE, RecordType.REVENUE):
        for member in known_verticals(record_type):
            options.append(member.value)
            seen.add(member.value.casefold())
    for label in sorted(labels):
        vertical = Vertical.parse(RecordType.EXPENSE, label)
        if vertical.label and vertical.label.casefold() not in seen:
            options.append(vertical.label)
            seen.add(vertical.label.casefold())
    return options


def funding_source_options(investor_names: List[str]) -> List[str]:
    """The "Revenue" source followed by each distinct investor name"""
    options = [REVENUE_FUNDING_SOURCE]
    for name in investor_names:
        if name and name not in options:
            options.append(name)
    return options


class FinancialsService(BaseStore):
    """Builds the financials panel for one startup and filter selection."""

    async def load(
        self,
        startup_id: int,
        filters: Optional[FinancialFilters] = None,
        today: Optional[date] = None,
    ) -> FinancialsPanel:
        filters = filters or FinancialFilters()
        startup = await self.get_startup(startup_id)

        records = await LedgerStore(self.db).list_records(startup_id)
        result = await self._execute(
            select(InvestmentRecord)
            .where(InvestmentRecord.startup_id == startup_id)
            .order_by(InvestmentRecord.date, InvestmentRecord.id)
        )
        investments = list(result.scalars().all())

        snapshot = aggregate(
            records,
            filters,
            investment_amounts=[inv.amount for inv in investments],
            cached_total_funding=startup.total_funding,
        )

        logger.debug(
            "Loaded financials",
            startup_id=startup_id,
            entity=filters.entity,
            year=filters.year,
            records=len(records),
            investments=len(investments),
        )

        return FinancialsPanel(
            startup_id=startup_id,
            currency=startup.currency,
            snapshot=snapshot,
            entities=entity_options(startup, sorted({r.entity for r in records})),
            verticals=vertical_options({r.vertical for r in records}),
            available_years=available_years(
                startup.registration_date, [r.date for r in records], today=today
            ),
            funding_sources=funding_source_options([inv.investor_name for inv in investments]),
        )
