"""Data access layer for RCard entities"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from rcard_gateway.domain.models import CENTRAL_WALLET, CardGrant, FraudReport, Loan, SponsorCard, User
from rcard_gateway.infrastructure.database.models import (
    CardGrantRecord,
    FraudReportRecord,
    LoanRecord,
    SponsorCardRecord,
    UserRecord,
    WalletBalanceRecord,
)


def _to_grant(record: CardGrantRecord) -> CardGrant:
    return CardGrant(
        id=record.card_id,
        card_identifier=record.card_identifier,
        type=record.card_type,
        applied_at=record.applied_at,
    )


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        username=record.username,
        password_hash=record.password_hash,
        cards=[_to_grant(card) for card in record.cards],
        balances={b.balance_type: b.amount for b in record.balances},
        created_at=record.created_at,
        last_login=record.last_login,
    )


def _to_loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        user_id=record.user_id,
        card_id=record.card_id,
        principal=record.principal,
        original_principal=record.original_principal,
        interest_rate_monthly=record.interest_rate_monthly,
        interest_accrued=record.interest_accrued,
        created_at=record.created_at,
        due_date=record.due_date,
        status=record.status,
        last_interest_calc=record.last_interest_calc,
        days_duration=record.days_duration,
        paid_at=record.paid_at,
        paid_amount=record.paid_amount,
    )


def _to_sponsor_card(record: SponsorCardRecord) -> SponsorCard:
    return SponsorCard(
        id=record.id,
        org_id=record.org_id,
        public_identifier=record.public_identifier,
        spec=dict(record.spec or {}),
        created_at=record.created_at,
    )


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int, for_update: bool = False) -> Optional[User]:
        """Fetch a user; for_update locks the row until the transaction ends"""
        query = self.db.query(UserRecord).filter(UserRecord.id == user_id)
        if for_update:
            query = query.with_for_update()
        record = query.first()
        return _to_user(record) if record else None

    def get_by_username(self, username: str) -> Optional[User]:
        record = self.db.query(UserRecord).filter(UserRecord.username == username).first()
        return _to_user(record) if record else None

    def create_user(self, username: str, password_hash: str, created_at: datetime) -> User:
        """Persist a new user with an empty central wallet"""
        record = UserRecord(username=username, password_hash=password_hash, created_at=created_at)
        record.balances.append(WalletBalanceRecord(balance_type=CENTRAL_WALLET, amount=Decimal(0)))
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return _to_user(record)

    def save_user(self, user: User) -> None:
        record = self.db.get(UserRecord, user.id)
        record.username = user.username
        record.password_hash = user.password_hash
        record.last_login = user.last_login
        self.db.flush()


class CardGrantRepository:
    """Repository for cards held by users"""

    def __init__(self, db: Session):
        self.db = db

    def add_grant(self, user_id: int, grant: CardGrant) -> None:
        user = self.db.get(UserRecord, user_id)
        user.cards.append(
            CardGrantRecord(
                card_id=grant.id,
                card_identifier=grant.card_identifier,
                card_type=grant.type,
                applied_at=grant.applied_at,
            )
        )
        self.db.flush()


class BalanceRepository:
    """Repository for wallet balances"""

    def __init__(self, db: Session):
        self.db = db

    def get_balance(self, user_id: int, balance_type: str) -> Optional[Decimal]:
        record = self.db.get(WalletBalanceRecord, (user_id, balance_type))
        return record.amount if record else None

    def set_balance(self, user_id: int, balance_type: str, amount: Decimal) -> None:
        record = self.db.get(WalletBalanceRecord, (user_id, balance_type))
        if record is None:
            user = self.db.get(UserRecord, user_id)
            user.balances.append(WalletBalanceRecord(balance_type=balance_type, amount=amount))
        else:
            record.amount = amount
        self.db.flush()


class LoanRepository:
    """Repository for loans, always addressed through their owner"""

    def __init__(self, db: Session):
        self.db = db

    def get_loan(self, user_id: int, loan_id: str) -> Optional[Loan]:
        record = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id, LoanRecord.user_id == user_id)
            .first()
        )
        return _to_loan(record) if record else None

    def list_loans(self, user_id: int, status: Optional[str] = None) -> List[Loan]:
        """Fetch a user's loans, newest first"""
        query = self.db.query(LoanRecord).filter(LoanRecord.user_id == user_id)
        if status is not None:
            query = query.filter(LoanRecord.status == status)
        records = query.order_by(LoanRecord.created_at.desc(), LoanRecord.recorded_at.desc()).all()
        return [_to_loan(record) for record in records]

    def save_loan(self, loan: Loan) -> None:
        """Insert or overwrite the whole loan record"""
        record = self.db.get(LoanRecord, loan.id)
        if record is None:
            record = LoanRecord(id=loan.id, user_id=loan.user_id)
            self.db.add(record)

        record.card_id = loan.card_id
        record.principal = loan.principal
        record.original_principal = loan.original_principal
        record.interest_rate_monthly = loan.interest_rate_monthly
        record.interest_accrued = loan.interest_accrued
        record.created_at = loan.created_at
        record.due_date = loan.due_date
        record.status = loan.status
        record.last_interest_calc = loan.last_interest_calc
        record.days_duration = loan.days_duration
        record.paid_at = loan.paid_at
        record.paid_amount = loan.paid_amount
        self.db.flush()


class SponsorCardRepository:
    """Repository for sponsor card programs"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_public_id(self, public_identifier: str) -> Optional[SponsorCard]:
        record = (
            self.db.query(SponsorCardRecord)
            .filter(SponsorCardRecord.public_identifier == public_identifier)
            .first()
        )
        return _to_sponsor_card(record) if record else None

    def list_by_org(self, org_id: str) -> List[SponsorCard]:
        records = (
            self.db.query(SponsorCardRecord)
            .filter(SponsorCardRecord.org_id == org_id)
            .order_by(SponsorCardRecord.created_at.desc())
            .all()
        )
        return [_to_sponsor_card(record) for record in records]

    def save_card(self, card: SponsorCard) -> None:
        self.db.add(
            SponsorCardRecord(
                id=card.id,
                org_id=card.org_id,
                public_identifier=card.public_identifier,
                spec=card.spec,
                created_at=card.created_at,
            )
        )
        self.db.flush()


class FraudReportRepository:
    """Repository for fraud reports"""

    def __init__(self, db: Session):
        self.db = db

    def save_report(self, report: FraudReport) -> None:
        self.db.add(
            FraudReportRecord(
                id=report.id,
                user_id=report.user_id,
                report_type=report.type,
                description=report.description,
                ip_address=report.ip_address,
                status=report.status,
                created_at=report.created_at,
            )
        )
        self.db.flush()
