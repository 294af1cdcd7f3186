"""SQLAlchemy ORM models for users, cards, wallets and loans"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Amounts keep sub-cent precision so accrued interest is not rounded on save
Money = Numeric(18, 8)


class UserRecord(Base):
    """Registered platform user"""

    __tablename__ = "rcard_user"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    last_login = Column(DateTime(timezone=True), nullable=True)

    cards = relationship(
        "CardGrantRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="CardGrantRecord.seq",
    )
    balances = relationship("WalletBalanceRecord", back_populates="user", cascade="all, delete-orphan")


class CardGrantRecord(Base):
    """Card held by a user, in the order applied"""

    __tablename__ = "card_grant"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_card_grant_user_card"),)

    seq = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey("rcard_user.id", ondelete="CASCADE"), nullable=False, index=True)
    card_id = Column(Text, nullable=False)
    card_identifier = Column(Text, nullable=False)
    card_type = Column(Text, nullable=False, default="custom")
    applied_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("UserRecord", back_populates="cards")


class WalletBalanceRecord(Base):
    """One balance per (user, balance type)"""

    __tablename__ = "wallet_balance"

    user_id = Column(ForeignKey("rcard_user.id", ondelete="CASCADE"), primary_key=True)
    balance_type = Column(Text, primary_key=True)
    amount = Column(Money, nullable=False, default=0)

    user = relationship("UserRecord", back_populates="balances")


class LoanRecord(Base):
    """Loan, namespaced by its owning user"""

    __tablename__ = "loan"

    id = Column(Text, primary_key=True)
    user_id = Column(ForeignKey("rcard_user.id", ondelete="CASCADE"), nullable=False, index=True)
    card_id = Column(Text, nullable=False)
    principal = Column(Money, nullable=False)
    original_principal = Column(Money, nullable=False)
    interest_rate_monthly = Column(Money, nullable=False)
    interest_accrued = Column(Money, nullable=False, default=0)
    created_at = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="active")  # active | paid
    last_interest_calc = Column(Date, nullable=False)
    days_duration = Column(Integer, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    paid_amount = Column(Money, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SponsorCardRecord(Base):
    """Card program created by a sponsoring organization"""

    __tablename__ = "sponsor_card"

    id = Column(Text, primary_key=True)
    org_id = Column(Text, nullable=False, index=True)
    public_identifier = Column(Text, nullable=False, unique=True)
    spec = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FraudReportRecord(Base):
    """User-submitted fraud report awaiting review"""

    __tablename__ = "fraud_report"

    id = Column(Text, primary_key=True)
    user_id = Column(ForeignKey("rcard_user.id", ondelete="CASCADE"), nullable=False, index=True)
    report_type = Column(Text, nullable=False, default="general")
    description = Column(Text, nullable=False)
    ip_address = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
