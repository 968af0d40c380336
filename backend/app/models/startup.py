"""Startup models"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from app.models.database import Base


class Startup(Base):
    """A startup whose ledger and cap table are tracked"""
    __tablename__ = "startups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    country_of_registration = Column(String(100), nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    registration_date = Column(Date, nullable=True)

    # Profile structure used to offer ledger entities
    subsidiaries = Column(JSON, nullable=False, default=list)  # [{"country": "US"}, ...]
    international_ops = Column(JSON, nullable=False, default=list)

    # Denormalized sum of investment_records.amount, resynced by recalculation
    total_funding = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    financial_records = relationship("LedgerRecord", back_populates="startup", lazy="dynamic")
    investment_records = relationship("InvestmentRecord", back_populates="startup", lazy="dynamic")
    fundraising_details = relationship("FundraisingDetails", back_populates="startup", lazy="dynamic")
    valuation_records = relationship("ValuationRecord", back_populates="startup", lazy="dynamic")
    founders = relationship("Founder", back_populates="startup", lazy="dynamic")
    shares = relationship("StartupShares", back_populates="startup", uselist=False)

    @property
    def parent_entity(self) -> str:
        """Ledger entity label of the parent company"""
        if self.country_of_registration:
            return f"Parent Company ({self.country_of_registration})"
        return "Parent Company"

    def __repr__(self):
        return f"<Startup {self.name} (ID: {self.id})>"
