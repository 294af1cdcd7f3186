"""Unit tests for registration, authentication and fraud report intake"""

import pytest
from datetime import datetime, timezone
from rcard_gateway.domain.accounts import AccountService, sanitize_text
from rcard_gateway.domain.exceptions import AuthenticationError, ValidationError
from rcard_gateway.domain.fraud import submit_fraud_report
from rcard_gateway.infrastructure.database.repositories import FraudReportRepository, UserRepository
from rcard_gateway.infrastructure.database.models import FraudReportRecord
from rcard_gateway.infrastructure.security import hash_password, verify_password

LOGIN_TIME = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def accounts(db) -> AccountService:
    return AccountService(UserRepository(db), hash_password, verify_password, now=lambda: LOGIN_TIME)


def test_sanitize_text_strips_tags_and_nul():
    assert sanitize_text("  <b>alice</b>\x00 ") == "alice"


def test_register_creates_user_with_wallet(db, accounts):
    user = accounts.register("alice", "s3cret!")
    db.commit()

    assert user.id is not None
    assert user.username == "alice"
    assert user.password_hash != "s3cret!"
    assert user.balances == {"central_wallet": 0}


def test_register_duplicate_username(db, accounts):
    accounts.register("alice", "s3cret!")
    db.commit()

    with pytest.raises(ValidationError) as exc_info:
        accounts.register("alice", "another1")

    assert exc_info.value.reason == "username_taken"


@pytest.mark.parametrize(
    "username,password",
    [("", "s3cret!"), ("al", "s3cret!"), ("a" * 31, "s3cret!"), ("alice", "short"), ("<i></i>", "s3cret!")],
)
def test_register_rejects_invalid_credentials(accounts, username, password):
    with pytest.raises(ValidationError):
        accounts.register(username, password)


def test_authenticate_stamps_last_login(db, accounts):
    accounts.register("alice", "s3cret!")
    db.commit()

    user = accounts.authenticate("alice", "s3cret!")
    db.commit()

    stored = UserRepository(db).get_user(user.id)
    assert stored.last_login is not None
    assert stored.last_login.replace(tzinfo=None) == LOGIN_TIME.replace(tzinfo=None)


def test_authenticate_wrong_password(db, accounts):
    accounts.register("alice", "s3cret!")
    db.commit()

    with pytest.raises(AuthenticationError):
        accounts.authenticate("alice", "wrong-password")


def test_authenticate_unknown_user(accounts):
    with pytest.raises(AuthenticationError):
        accounts.authenticate("nobody", "s3cret!")


def test_verify_password_rejects_garbage_hash():
    assert verify_password("s3cret!", "not-a-hash") is False


def test_submit_fraud_report(db, make_user):
    user = make_user()

    report = submit_fraud_report(
        FraudReportRepository(db),
        user.id,
        "<script>x</script>Card used abroad",
        report_type="card_theft",
        ip_address="10.0.0.8",
    )
    db.commit()

    record = db.get(FraudReportRecord, report.id)
    assert report.id.startswith("fraud_")
    assert report.status == "pending"
    assert record.description == "xCard used abroad"
    assert record.report_type == "card_theft"
    assert record.ip_address == "10.0.0.8"


def test_submit_fraud_report_requires_description(db, make_user):
    user = make_user()

    with pytest.raises(ValidationError):
        submit_fraud_report(FraudReportRepository(db), user.id, "   ")
