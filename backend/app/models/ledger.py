"""Financial ledger models"""
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, Text, Enum, Index
from sqlalchemy.orm import relationship

from app.models.database import Base


class RecordType(str, enum.Enum):
    """Kind of ledger entry"""
    REVENUE = "revenue"
    EXPENSE = "expense"


class LedgerRecord(Base):
    """A single dated revenue or expense entry"""
    __tablename__ = "financial_records"
    __table_args__ = (Index("ix_financial_records_startup_date", "startup_id", "date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, index=True)

    record_type = Column(
        Enum(RecordType, values_callable=lambda x: [e.value for e in x], native_enum=False, length=10),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False, index=True)
    entity = Column(String(200), nullable=False, index=True)  # "Parent Company (India)", "Subsidiary 1 (US)"
    description = Column(Text, nullable=False)
    vertical = Column(String(100), nullable=False)

    # Amounts in the startup's base currency
    amount = Column(Numeric(18, 2), nullable=False)
    funding_source = Column(String(200), nullable=True)  # Expense only: "Revenue" or an investor name
    cogs = Column(Numeric(18, 2), nullable=True)  # Revenue only

    attachment_url = Column(String(1000), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    startup = relationship("Startup", back_populates="financial_records")

    def __repr__(self):
        return f"<LedgerRecord {self.record_type.value} {self.amount} on {self.date}>"
