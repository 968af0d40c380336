"""Ownership models: founders and the startup's share structure"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, BigInteger, Numeric
from sqlalchemy.orm import relationship

from app.models.database import Base


class Founder(Base):
    """A founder holding equity in the startup"""
    __tablename__ = "founders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False)
    shares = Column(BigInteger, nullable=False, default=0)
    equity_percentage = Column(Numeric(7, 4), nullable=False, default=0)  # 0 means unstated
    mentor_code = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    startup = relationship("Startup", back_populates="founders")


class StartupShares(Base):
    """Issued share count, ESOP pool and current price per share; one row per startup"""
    __tablename__ = "startup_shares"

    id = Column(Integer, primary_key=True, autoincrement=True)
    startup_id = Column(Integer, ForeignKey("startups.id"), nullable=False, unique=True)

    total_shares = Column(BigInteger, nullable=False, default=0)
    esop_reserved_shares = Column(BigInteger, nullable=False, default=0)
    price_per_share = Column(Numeric(18, 4), nullable=False, default=0)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    startup = relationship("Startup", back_populates="shares")
