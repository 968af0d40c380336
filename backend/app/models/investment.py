"""Cap table models: investments, fundraising rounds, valuations"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, BigInteger, Numeric, Text
from sqlalchemy.orm import relationship

from app.models.database import Base


class InvestmentRecord(Base):
    """A single capital-raise event tied to an investor"""
    __tablename__ = "investment_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    investor_type = Column(String(50), nullable=False)
    investment_type = Column(String(20), nullable=False)  # Equity, Debt, Grant
    investor_name = Column(String(200), nullable=False)
    investor_code = Column(String(50), nullable=True)

    amount = Column(Numeric(18, 2), nullable=False)
    equity_allocated = Column(Numeric(7, 4), nullable=False, default=0)  # Percent, 0-100
    shares = Column(BigInteger, nullable=True)
    price_per_share = Column(Numeric(18, 4), nullable=True)
    pre_money_valuation = Column(Numeric(18, 2), nullable=True)
    post_money_valuation = Column(Numeric(18, 2), nullable=True)

    proof_url = Column(String(1000), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    startup = relationship("Startup", back_populates="investment_records")


class FundraisingDetails(Base):
    """Current or historical fundraising round metadata"""
    __tablename__ = "fundraising_details"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, index=True)

    active = Column(Boolean, nullable=False, default=False)
    type = Column(String(30), nullable=False)  # Pre-Seed, Seed, Series A, ...
    value = Column(Numeric(18, 2), nullable=False, default=0)  # Target raise
    equity = Column(Numeric(7, 4), nullable=False, default=0)  # Percent offered
    domain = Column(String(100), nullable=True)
    stage = Column(String(100), nullable=True)
    validation_requested = Column(Boolean, nullable=False, default=False)

    # Pitch collateral
    pitch_deck_url = Column(String(1000), nullable=True)
    pitch_video_url = Column(String(1000), nullable=True)
    business_plan_url = Column(String(1000), nullable=True)
    one_pager_url = Column(String(1000), nullable=True)
    website_url = Column(String(1000), nullable=True)
    linkedin_url = Column(String(1000), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    startup = relationship("Startup", back_populates="fundraising_details")


class ValuationRecord(Base):
    """Recorded company valuation at a point in time"""
    __tablename__ = "valuation_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, index=True)

    date = Column(Date, nullable=False)
    valuation = Column(Numeric(18, 2), nullable=False)
    round_type = Column(String(30), nullable=False)
    investment_amount = Column(Numeric(18, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    startup = relationship("Startup", back_populates="valuation_records")
