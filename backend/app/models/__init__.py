"""Database models"""
from app.models.database import Base, get_db
from app.models.startup import Startup
from app.models.ledger import LedgerRecord, RecordType

# Cap table models
from app.models.investment import InvestmentRecord, FundraisingDetails, ValuationRecord
from app.models.equity import Founder, StartupShares

__all__ = [
    "Base",
    "get_db",
    "Startup",
    "LedgerRecord",
    "RecordType",
    # Cap table
    "InvestmentRecord",
    "FundraisingDetails",
    "ValuationRecord",
    "Founder",
    "StartupShares",
]
