"""
Filter state for a financials panel.

A view holds the current entity/year selection and the last loaded panel.
Every filter change or change notification triggers a full reload; when
several loads overlap, only the most recently started one may replace the
state.
"""
from typing import Awaitable, Callable, Generic, Optional, TypeVar

import structlog

from app.services.aggregation import ALL, FinancialFilters, YearFilter
from app.services.errors import ValidationError

logger = structlog.get_logger()

T = TypeVar("T")


def parse_year(value: Optional[str]) -> YearFilter:
    """'all' (or nothing) selects every year; anything else must be a year number"""
    if value is None or str(value).strip().lower() in ("", ALL):
        return ALL
    try:
        year = int(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"Invalid year filter: {value!r}") from e
    if year < 1900 or year > 9999:
        raise ValidationError(f"Invalid year filter: {value!r}")
    return year


def parse_filters(entity: Optional[str] = None, year: Optional[str] = None) -> FinancialFilters:
    entity = (entity or "").strip() or ALL
    return FinancialFilters(entity=ALL if entity.lower() == ALL else entity, year=parse_year(year))


class FinancialsView(Generic[T]):
    """
    Last-request-wins wrapper around a financials loader.

    `loader` receives the filters to load and returns the panel; `on_update`
    is awaited with each panel that is actually applied.
    """

    def __init__(
        self,
        loader: Callable[[FinancialFilters], Awaitable[T]],
        on_update: Optional[Callable[[T], Awaitable[None]]] = None,
        filters: Optional[FinancialFilters] = None,
    ):
        self._loader = loader
        self._on_update = on_update
        self._generation = 0
        self.filters = filters or FinancialFilters()
        self.state: Optional[T] = None

    @property
    def generation(self) -> int:
        return self._generation

    async def set_filters(self, entity: Optional[str] = None, year: Optional[YearFilter] = None) -> bool:
        """Change the selection (None keeps the current value) and reload"""
        self.filters = FinancialFilters(
            entity=self.filters.entity if entity is None else entity,
            year=self.filters.year if year is None else year,
        )
        return await self.refresh()

    async def refresh(self) -> bool:
        """
        Reload for the current filters.

        Returns False when a newer load was started while this one was in
        flight; the newer load owns the state and this result is dropped.
        """
        self._generation += 1
        generation = self._generation
        filters = self.filters

        try:
            result = await self._loader(filters)
        except Exception as e:
            if generation != self._generation:
                logger.info("Stale financials load failed", generation=generation, error=str(e))
                return False
            raise

        if generation != self._generation:
            logger.debug(
                "Discarded stale financials load",
                generation=generation,
                latest_generation=self._generation,
            )
            return False

        self.state = result
        if self._on_update is not None:
            await self._on_update(result)
        return True
