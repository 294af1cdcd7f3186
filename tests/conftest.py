"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from rcard_gateway.api.main import create_app
from rcard_gateway.domain.cards import CardService
from rcard_gateway.domain.loans import LoanLifecycle
from rcard_gateway.domain.models import CENTRAL_WALLET, User
from rcard_gateway.domain.policies import PolicyCatalog
from rcard_gateway.domain.wallet import WalletLedger
from rcard_gateway.infrastructure.database.models import Base
from rcard_gateway.infrastructure.database.repositories import (
    BalanceRepository,
    CardGrantRepository,
    LoanRepository,
    SponsorCardRepository,
    UserRepository,
)
from rcard_gateway.infrastructure.database.session import get_db


# Test database, one connection shared by every session
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeClock:
    """Business date that tests can move forward"""

    def __init__(self, today: date):
        self.current = today

    def today(self) -> date:
        return self.current

    def now(self) -> datetime:
        return datetime(self.current.year, self.current.month, self.current.day, 12, tzinfo=timezone.utc)

    def advance(self, days: int) -> None:
        self.current += timedelta(days=days)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2024, 3, 1))


@pytest.fixture
def catalog() -> PolicyCatalog:
    """Packaged card catalog"""
    return PolicyCatalog.load()


@pytest.fixture
def card_service(db: Session, catalog: PolicyCatalog, clock: FakeClock) -> CardService:
    return CardService(
        users=UserRepository(db),
        grants=CardGrantRepository(db),
        sponsor_cards=SponsorCardRepository(db),
        catalog=catalog,
        now=clock.now,
    )


@pytest.fixture
def wallet(db: Session) -> WalletLedger:
    return WalletLedger(UserRepository(db), BalanceRepository(db))


@pytest.fixture
def lifecycle(db: Session, card_service: CardService, wallet: WalletLedger, clock: FakeClock) -> LoanLifecycle:
    """Loan lifecycle on the test database with a controllable business date"""
    return LoanLifecycle(
        users=UserRepository(db),
        loans=LoanRepository(db),
        wallet=wallet,
        policy_lookup=card_service.lookup_policy,
        today=clock.today,
        now=clock.now,
    )


@pytest.fixture
def make_user(db: Session):
    """Factory for committed users with a funded central wallet"""
    counter = {"n": 0}

    def _make_user(balance: Decimal = Decimal(0), username: str | None = None) -> User:
        counter["n"] += 1
        users = UserRepository(db)
        user = users.create_user(
            username or f"user{counter['n']}",
            "not-a-real-hash",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        BalanceRepository(db).set_balance(user.id, CENTRAL_WALLET, Decimal(balance))
        db.commit()
        return users.get_user(user.id)

    return _make_user
