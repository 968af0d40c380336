"""Track My Startup financials services"""
from .errors import (
    AppError,
    ValidationError,
    NotFoundError,
    PersistenceError,
    AttachmentUploadError,
    ReconciliationDriftWarning,
)
from .aggregation import FinancialFilters, FinancialsSnapshot, aggregate, available_years
from .attachments import AttachmentService
from .ledger_store import LedgerStore
from .investment_store import InvestmentStore, InvestmentFilters, ValuationStore
from .fundraising import FundraisingService
from .equity import EquityStore
from .financials import FinancialsService, FinancialsPanel
from .financials_view import FinancialsView

__all__ = [
    # Errors
    "AppError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "AttachmentUploadError",
    "ReconciliationDriftWarning",
    # Aggregation engine
    "FinancialFilters",
    "FinancialsSnapshot",
    "aggregate",
    "available_years",
    # Stores
    "AttachmentService",
    "LedgerStore",
    "InvestmentStore",
    "InvestmentFilters",
    "ValuationStore",
    "FundraisingService",
    "EquityStore",
    # Financials panel
    "FinancialsService",
    "FinancialsPanel",
    "FinancialsView",
]
